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
"""Provides a class to fetch institution details from the PDDikti API."""

import logging

import httpx
from pydantic import ValidationError

from .config import Settings
from .models import InstitutionDetail

logger = logging.getLogger(__name__)


class DetailResolver:
    """Resolves an institution token into its detail record.

    The API only answers requests that look like they come from the public
    web frontend, hence the browser-like header profile.
    """

    DETAIL_PATH_TEMPLATE = "/pt/detail/{token}"

    def __init__(
        self, settings: Settings, client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the resolver with settings and an optional HTTP client.

        Without a client, a short-lived one is opened for every lookup.
        """
        self.settings = settings
        self.client = client

    @property
    def headers(self) -> dict[str, str]:
        origin = self.settings.origin
        return {
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-US,en;q=0.9,id;q=0.8",
            "DNT": "1",
            "Origin": origin,
            "Referer": f"{origin}/",
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-site",
            "User-Agent": (
                "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) "
                "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/140.0.0.0 "
                "Mobile Safari/537.36 Edg/140.0.0.0"
            ),
            "X-User-IP": "182.9.1.224",
            "sec-ch-ua": '"Chromium";v="140", "Not=A?Brand";v="24", "Microsoft Edge";v="140"',
            "sec-ch-ua-mobile": "?1",
            "sec-ch-ua-platform": '"Android"',
        }

    def detail_url(self, token: str) -> str:
        return self.settings.api_base_url.rstrip("/") + self.DETAIL_PATH_TEMPLATE.format(
            token=token,
        )

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        return await client.get(
            url, headers=self.headers, timeout=self.settings.detail_timeout,
        )

    async def resolve(self, token: str) -> InstitutionDetail | None:
        """Fetch and decode the detail record for ``token``.

        Returns:
            The decoded detail, or None if the request failed, the API did not
            answer 200 OK, or the body is not a valid detail object.
        """
        url = self.detail_url(token)
        try:
            if self.client is not None:
                response = await self._get(self.client, url)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await self._get(client, url)
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch institution details: %s", e)
            return None

        if response.status_code != httpx.codes.OK:
            logger.warning("Detail API returned status code: %d", response.status_code)
            return None

        try:
            return InstitutionDetail.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning("Failed to decode institution details: %s", e)
            return None
