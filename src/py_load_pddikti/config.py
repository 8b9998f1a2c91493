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
"""Manages the application's configuration using Pydantic."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Manages configuration for the application.

    Reads settings from environment variables with the prefix 'PDDIKTI_'.
    """

    model_config = SettingsConfigDict(env_prefix="PDDIKTI_")

    # Upstream registry
    search_base_url: str = "https://pddikti.kemdiktisaintek.go.id/search"
    api_base_url: str = "https://api-pddikti.kemdiktisaintek.go.id"
    origin: str = "https://pddikti.kemdiktisaintek.go.id"

    # Time budgets, in seconds
    render_timeout: float = 30.0
    detail_timeout: float = 10.0

    headless: bool = True

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 9040
    log_level: str = "INFO"


# Instantiate the settings so it can be imported directly
settings = Settings()
