import contextlib
from unittest.mock import AsyncMock, MagicMock

import pytest

from py_load_pddikti.config import Settings
from py_load_pddikti.exceptions import UpstreamRenderError
from py_load_pddikti.renderer import BaseRenderer, RenderPlan, RenderSession

SEARCH_PAGE_ONE_ROW = """
<html><body><div id="root">
  <h2>Data Mahasiswa</h2>
  <table class="table">
    <thead><tr><th>Nama</th><th>NIM</th><th>Perguruan Tinggi</th></tr></thead>
    <tbody>
      <tr><td>Jane Doe</td><td>12345</td><td>Example University</td></tr>
    </tbody>
  </table>
</div></body></html>
"""

SEARCH_PAGE_NO_HEADING = """
<html><body><div id="root">
  <h2>Dosen</h2>
  <table><tr><th>Nama</th></tr><tr><td>Someone</td><td>1</td><td>Else</td></tr></table>
</div></body></html>
"""

INSTITUTION_PAGE = """
<html><body><div id="root">
  <a href="/detail-pt/abc123==">Example University</a>
  <a href="/detail-pt/zzz999">Another University</a>
</div></body></html>
"""


class FakeSession(RenderSession):
    def __init__(self, renderer: "FakeRenderer") -> None:
        self.renderer = renderer

    async def render(self, plan: RenderPlan) -> str:
        self.renderer.plans.append(plan)
        page = (
            self.renderer.institution_page
            if "/pt/" in plan.url
            else self.renderer.search_page
        )
        if page is None:
            raise UpstreamRenderError(plan.url, "net::ERR_NAME_NOT_RESOLVED")
        if isinstance(page, BaseException):
            raise page
        return page


class FakeRenderer(BaseRenderer):
    """Serves canned markup instead of driving a browser."""

    def __init__(self, search_page=None, institution_page=None) -> None:
        self.search_page = search_page
        self.institution_page = institution_page
        self.plans: list[RenderPlan] = []
        self.opened = 0
        self.closed = 0

    @contextlib.asynccontextmanager
    async def session(self):
        self.opened += 1
        try:
            yield FakeSession(self)
        finally:
            self.closed += 1


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url="https://api.example.test")


@pytest.fixture
def fake_renderer():
    """Factory for renderers serving the given search and institution pages."""
    return FakeRenderer


@pytest.fixture
def search_page() -> str:
    """A rendered search page with a student heading and one data row."""
    return SEARCH_PAGE_ONE_ROW


@pytest.fixture
def search_page_without_heading() -> str:
    return SEARCH_PAGE_NO_HEADING


@pytest.fixture
def institution_page() -> str:
    """A rendered institution search page linking to two detail pages."""
    return INSTITUTION_PAGE


def _playwright_manager(content=None, new_context_error=None):
    """A stand-in for ``async_playwright()`` serving one browser."""
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.content = AsyncMock(return_value=content)
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context, side_effect=new_context_error)
    browser.close = AsyncMock()
    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=browser)
    manager = MagicMock()
    manager.__aenter__ = AsyncMock(return_value=pw)
    manager.__aexit__ = AsyncMock(return_value=False)
    manager.browser = browser
    manager.page = page
    return manager


@pytest.fixture
def playwright_manager():
    """Factory for mocked Playwright drivers; pass ``new_context_error`` to fail setup."""
    return _playwright_manager
