#!/usr/bin/env python3
"""Create the people, votes and photos tables."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import create_db_engine
from domain.config import load_app_config
from repositories.schema import ensure_schema

app = typer.Typer(
    add_completion=False,
    help="Database setup.",
)


@app.command()
def init_db(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="App config TOML. Defaults to config/facemash.toml."),
    ] = None,
    db_url: Annotated[
        str | None,
        typer.Option("--db-url", help="Override [app].database_url."),
    ] = None,
) -> None:
    """Create missing tables and indexes; existing data is left untouched."""
    config = load_app_config(config_path, db_url=db_url)
    ensure_schema(create_db_engine(config.database_url))
    typer.echo("schema ready tables=people,votes,photos")


if __name__ == "__main__":
    app()
