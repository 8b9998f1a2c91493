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
"""Defines the abstract base classes for page renderers."""

import abc
import asyncio
import contextlib

from pydantic import BaseModel, ConfigDict

from ..exceptions import UpstreamRenderError


class RenderPlan(BaseModel):
    """Describes how to load a page and when to consider it ready.

    The page is loaded, ``wait_selector`` is awaited, the first settle delay
    is slept, any of ``ready_selectors`` is awaited (if given) and the
    remaining settle delays are slept before the markup is captured.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    wait_selector: str = "#root"
    settle_delays: tuple[float, ...] = ()
    ready_selectors: tuple[str, ...] = ()
    timeout: float = 30.0


class RenderSession(abc.ABC):
    """A single, isolated browser session."""

    @abc.abstractmethod
    async def render(self, plan: RenderPlan) -> str:
        """Load the page described by ``plan`` and return its full markup.

        Raises:
            UpstreamRenderError: If navigation or any readiness wait fails.

        """
        raise NotImplementedError


class BaseRenderer(abc.ABC):
    """Abstract Base Class for all renderers.

    Every call to ``render`` acquires a fresh session and releases it before
    returning, whether the render succeeded, failed or timed out.
    """

    @abc.abstractmethod
    def session(self) -> contextlib.AbstractAsyncContextManager[RenderSession]:
        """Return an async context manager that owns one browser session."""
        raise NotImplementedError

    async def _render_in_session(self, plan: RenderPlan) -> str:
        async with self.session() as session:
            return await session.render(plan)

    async def render(self, plan: RenderPlan) -> str:
        """Render ``plan.url`` in its own session within ``plan.timeout`` seconds.

        Raises:
            UpstreamRenderError: On any failure, including the budget running out.

        """
        try:
            return await asyncio.wait_for(
                self._render_in_session(plan), timeout=plan.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamRenderError(
                plan.url, f"render timed out after {plan.timeout:g}s",
            ) from e
