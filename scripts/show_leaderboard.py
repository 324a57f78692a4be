#!/usr/bin/env python3
"""Show the top approved people by rating."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import create_db_engine, create_session_factory
from domain.config import load_app_config
from domain.leaderboard import build_leaderboard
from repositories.people import fetch_leaderboard_people

app = typer.Typer(
    add_completion=False,
    help="Query the leaderboard.",
)


@app.command()
def show_leaderboard(
    top_n: Annotated[
        int | None,
        typer.Option("--top-n", help="Rows to print. Defaults to [app].leaderboard_limit."),
    ] = None,
    grouped: Annotated[
        bool,
        typer.Option("--grouped", help="Merge rows sharing a display name."),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="App config TOML. Defaults to config/facemash.toml."),
    ] = None,
    db_url: Annotated[str | None, typer.Option("--db-url", help="Override [app].database_url.")] = None,
) -> None:
    """Print ranked people with rating, record and win rate."""
    if top_n is not None and top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    config = load_app_config(config_path, db_url=db_url)
    session_factory = create_session_factory(create_db_engine(config.database_url))
    with session_factory() as session:
        people = fetch_leaderboard_people(session)

    entries = build_leaderboard(people, grouped=grouped, limit=top_n or config.leaderboard_limit)
    if not entries:
        typer.echo("No people in the leaderboard yet.")
        return

    for entry in entries:
        typer.echo(
            f"{entry.rank:3d}. {entry.name:<24} rating={entry.rating:5d} "
            f"{entry.wins}W-{entry.losses}L votes={entry.total_votes:4d} "
            f"win_rate={entry.win_rate:5.1f}%"
        )


if __name__ == "__main__":
    app()
