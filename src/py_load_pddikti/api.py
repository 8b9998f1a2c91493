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
"""HTTP surface: the student lookup endpoint and the diagnostics endpoint."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings
from .exceptions import MissingQueryError, UpstreamRenderError
from .metrics import ServerMetrics, StatsSnapshot
from .models import ResolutionResult
from .pipeline import ResolutionPipeline
from .renderer import PlaywrightRenderer

logger = logging.getLogger(__name__)

LOOKUP_HEADERS = {"Cache-Control": "no-store"}
JSON_MEDIA_TYPE = "application/json; charset=utf-8"


def _lookup_response(result: ResolutionResult, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        content=result.to_json_dict(),
        status_code=status_code,
        headers=LOOKUP_HEADERS,
        media_type=JSON_MEDIA_TYPE,
    )


def create_app(
    settings: Settings | None = None,
    pipeline: ResolutionPipeline | None = None,
    metrics: ServerMetrics | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration; defaults to one read from the environment.
        pipeline: The lookup pipeline; defaults to one rendering with Playwright.
        metrics: Counters to record requests into; a fresh set by default.

    """
    settings = settings or Settings()
    if pipeline is None:
        pipeline = ResolutionPipeline(
            settings, renderer=PlaywrightRenderer(headless=settings.headless),
        )

    app = FastAPI(title="py-load-pddikti")
    app.state.pipeline = pipeline
    app.state.metrics = metrics or ServerMetrics()

    @app.middleware("http")
    async def record_request(request: Request, call_next):
        recorder: ServerMetrics = request.app.state.metrics
        start = time.perf_counter_ns()
        recorder.start_request()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ns = time.perf_counter_ns() - start
            recorder.finish_request(status_code, duration_ns)
            logger.info(
                "%dms %s %s -> %d",
                duration_ns // 1_000_000,
                request.method,
                request.url.path,
                status_code,
            )

    @app.get("/")
    async def index() -> PlainTextResponse:
        return PlainTextResponse("not found", status_code=404)

    @app.get("/carimahasiswa")
    async def cari_mahasiswa(request: Request, name: str = "") -> JSONResponse:
        """Look up students by name."""
        lookup: ResolutionPipeline = request.app.state.pipeline
        try:
            result = await lookup.resolve(name)
        except MissingQueryError as e:
            return _lookup_response(
                ResolutionResult(success=False, message=e.message), status_code=400,
            )
        except UpstreamRenderError as e:
            logger.error("Failed to render upstream page %s: %s", e.url, e)
            return _lookup_response(
                ResolutionResult(
                    success=False, message=f"Failed to render upstream page: {e}",
                ),
                status_code=502,
            )
        return _lookup_response(result)

    @app.get("/stats", response_model=StatsSnapshot)
    async def stats(request: Request) -> StatsSnapshot:
        recorder: ServerMetrics = request.app.state.metrics
        return recorder.snapshot()

    return app
