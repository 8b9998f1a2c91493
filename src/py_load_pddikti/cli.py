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
"""Command-line entry point: run the HTTP server or a one-off lookup."""

import asyncio
import json
import logging
from typing import Any, Dict

import typer
import uvicorn
import yaml

from .api import create_app
from .config import Settings
from .exceptions import MissingQueryError, UpstreamRenderError
from .pipeline import ResolutionPipeline
from .renderer import PlaywrightRenderer

logger = logging.getLogger(__name__)

app = typer.Typer(help="Look up students in the PDDikti registry.")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(config_file: str | None) -> Dict[str, Any]:
    """Loads setting overrides from a YAML file."""
    if config_file:
        try:
            with open(config_file, "r") as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Config file not found: %s", config_file)
    return {}


def build_settings(config_file: str | None, **overrides: Any) -> Settings:
    """Environment first, then the YAML file, then explicit command-line values."""
    values = load_config(config_file)
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


@app.command()
def serve(
    host: str = typer.Option(None, help="Interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    config_file: str = typer.Option(None, help="Path to YAML config file."),
):
    """Serve the lookup and stats endpoints over HTTP."""
    settings = build_settings(config_file, host=host, port=port)
    configure_logging(settings.log_level)
    logger.info("Server running on %s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


async def _search(settings: Settings, name: str) -> Dict[str, Any]:
    pipeline = ResolutionPipeline(
        settings, renderer=PlaywrightRenderer(headless=settings.headless),
    )
    result = await pipeline.resolve(name)
    return result.to_json_dict()


@app.command()
def search(
    name: str = typer.Argument(..., help="Student name to look up."),
    config_file: str = typer.Option(None, help="Path to YAML config file."),
):
    """Run a single lookup and print the JSON result."""
    settings = build_settings(config_file)
    configure_logging(settings.log_level)
    try:
        result = asyncio.run(_search(settings, name))
    except MissingQueryError as e:
        typer.echo(e.message, err=True)
        raise typer.Exit(code=1)
    except UpstreamRenderError as e:
        typer.echo(f"Failed to render upstream page: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(result, indent=2, ensure_ascii=False))


def main():
    app()


if __name__ == "__main__":
    main()
