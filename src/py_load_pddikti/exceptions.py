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
"""Exceptions raised by the resolution pipeline."""


class PddiktiError(Exception):
    """Base class for all errors raised by this package."""


class MissingQueryError(PddiktiError):
    """Raised when the student name to search for is empty."""

    def __init__(self, message: str = "name query parameter is required") -> None:
        super().__init__(message)
        self.message = message


class UpstreamRenderError(PddiktiError):
    """Raised when the headless browser fails to render an upstream page.

    Covers navigation errors, selector waits that never resolve and the
    overall render budget running out.
    """

    def __init__(self, url: str, cause: BaseException | str) -> None:
        super().__init__(f"{cause}")
        self.url = url
        self.cause = cause
