# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Provides a renderer backed by a headless Chromium driven through Playwright."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from ..exceptions import UpstreamRenderError
from .base import BaseRenderer, RenderPlan, RenderSession

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
CHROMIUM_ARGS = ["--disable-gpu", "--disable-dev-shm-usage", "--no-sandbox"]
VIEWPORT = {"width": 1920, "height": 1080}

logger = logging.getLogger(__name__)


def visible_any(selectors: tuple[str, ...]) -> str:
    """Build a selector list where each member only matches visible elements.

    Playwright checks visibility on the first match of a list only, so a
    hidden early match would otherwise block the wait.
    """
    return ", ".join(f"{selector}:visible" for selector in selectors)


class PlaywrightSession(RenderSession):
    """Renders pages in a single Playwright page."""

    def __init__(self, page: Page) -> None:
        self.page = page

    async def render(self, plan: RenderPlan) -> str:
        delays = list(plan.settle_delays)
        try:
            await self.page.goto(plan.url)
            await self.page.wait_for_selector(plan.wait_selector, state="attached")
            if delays:
                await asyncio.sleep(delays.pop(0))
            if plan.ready_selectors:
                await self.page.wait_for_selector(
                    visible_any(plan.ready_selectors), state="visible",
                )
            for delay in delays:
                await asyncio.sleep(delay)
            return await self.page.content()
        except PlaywrightError as e:
            raise UpstreamRenderError(plan.url, e) from e


class PlaywrightRenderer(BaseRenderer):
    """Launches a new headless Chromium for every session."""

    def __init__(self, headless: bool = True) -> None:
        self.headless = headless

    @contextlib.asynccontextmanager
    async def session(self) -> AsyncIterator[PlaywrightSession]:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(
                headless=self.headless, args=CHROMIUM_ARGS,
            )
            try:
                context = await browser.new_context(
                    viewport=VIEWPORT, user_agent=USER_AGENT,
                )
                page = await context.new_page()
                yield PlaywrightSession(page)
            finally:
                try:
                    await browser.close()
                except PlaywrightError as e:
                    logger.warning("Failed to close browser: %s", e)
                else:
                    logger.debug("Browser session closed")

    async def _render_in_session(self, plan: RenderPlan) -> str:
        try:
            return await super()._render_in_session(plan)
        except PlaywrightError as e:
            # Raised while launching, setting up or closing the browser.
            raise UpstreamRenderError(plan.url, e) from e
