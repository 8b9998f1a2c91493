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
"""Runs one student lookup: render, extract, enrich."""

import logging
from urllib.parse import quote_plus

from .config import Settings
from .exceptions import MissingQueryError, UpstreamRenderError
from .extractor import DetailResolver
from .models import InstitutionDetail, ResolutionResult
from .parser import extract_institution_token, extract_student_records
from .renderer import BaseRenderer, RenderPlan

NO_RESULTS_MESSAGE = "Tidak ada hasil pencarian pada bagian Mahasiswa"
RESULT_SELECTORS = (
    "table",
    ".no-results",
    ".empty-state",
    '[class*="result"]',
    '[class*="table"]',
)

logger = logging.getLogger(__name__)


class ResolutionPipeline:
    """Resolves a student name into records plus details of their institution."""

    def __init__(
        self,
        settings: Settings,
        renderer: BaseRenderer,
        resolver: DetailResolver | None = None,
    ) -> None:
        self.settings = settings
        self.renderer = renderer
        self.resolver = resolver or DetailResolver(settings)

    def search_plan(self, name: str) -> RenderPlan:
        return RenderPlan(
            url=f"{self.settings.search_base_url}/{quote_plus(name)}",
            settle_delays=(2.0, 3.0),
            ready_selectors=RESULT_SELECTORS,
            timeout=self.settings.render_timeout,
        )

    def institution_plan(self, institution: str) -> RenderPlan:
        return RenderPlan(
            url=f"{self.settings.search_base_url}/pt/{quote_plus(institution)}",
            settle_delays=(3.0,),
            timeout=self.settings.render_timeout,
        )

    async def resolve(self, name: str | None) -> ResolutionResult:
        """Look up students by name.

        Raises:
            MissingQueryError: If ``name`` is empty or only whitespace.
            UpstreamRenderError: If the search page could not be rendered.

        """
        name = (name or "").strip()
        if not name:
            raise MissingQueryError()

        html = await self.renderer.render(self.search_plan(name))
        logger.info("Rendered search page for %r, HTML length: %d", name, len(html))

        records = extract_student_records(html)

        details: list[InstitutionDetail] = []
        if records:
            detail = await self.fetch_institution_detail(records[0].institution)
            if detail is not None:
                details.append(detail)

        if records:
            message = f"{len(records)} Query"
        else:
            message = NO_RESULTS_MESSAGE

        return ResolutionResult(
            success=bool(records), message=message, records=records, details=details,
        )

    async def fetch_institution_detail(self, institution: str) -> InstitutionDetail | None:
        """Find the institution's token on its search page and resolve it.

        Every failure here is logged and reported as None; the student
        records are worth returning without the institution details.
        """
        if not institution:
            logger.info("First record has no institution, skipping details")
            return None

        logger.info("Searching university details for: %s", institution)
        try:
            html = await self.renderer.render(self.institution_plan(institution))
        except UpstreamRenderError as e:
            logger.warning("Failed to search university: %s", e)
            return None

        token = extract_institution_token(html)
        if token is None:
            logger.warning("Failed to extract university token")
            return None

        logger.info("Found university token: %s", token)
        return await self.resolver.resolve(token)
