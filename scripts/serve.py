#!/usr/bin/env python3
"""Run the JSON API with uvicorn."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Annotated

import typer
import uvicorn

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.config import CONFIG_ENV_VAR

app = typer.Typer(
    add_completion=False,
    help="Serve the voting API.",
)


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port")] = 8000,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="App config TOML. Defaults to config/facemash.toml."),
    ] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Restart on code changes.")] = False,
    log_level: Annotated[str, typer.Option("--log-level")] = "info",
) -> None:
    """Start uvicorn on the app factory."""
    if config_path is not None:
        os.environ[CONFIG_ENV_VAR] = str(config_path.resolve())
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    uvicorn.run(
        "web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        app_dir=str(SRC_DIR),
        log_level=log_level,
    )


if __name__ == "__main__":
    app()
