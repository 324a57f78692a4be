#!/usr/bin/env python3
"""Terminal voting client: show a matchup, pick a winner, repeat."""

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
from domain.common import Matchup
from domain.config import load_app_config
from domain.errors import InsufficientPoolError, PersistenceFailure
from domain.ratings.elo.calculator import EloRatingEngine
from domain.session import JsonFileTokenStore, ensure_session_token
from domain.voting import VotingService

DEFAULT_TOKEN_FILE = Path.home() / ".facemash" / "session.json"

app = typer.Typer(
    add_completion=False,
    help="Vote from the terminal.",
)


def _describe(matchup: Matchup) -> None:
    for index, person in enumerate(matchup, start=1):
        typer.echo(f"  [{index}] {person.name:<24} rating={person.rating} photo={person.photo_url}")


@app.command()
def vote(
    rounds: Annotated[int, typer.Option("--rounds", help="Matchups to show before exiting.")] = 10,
    token_file: Annotated[
        Path,
        typer.Option("--token-file", help="Where this client's session token is kept."),
    ] = DEFAULT_TOKEN_FILE,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="App config TOML. Defaults to config/facemash.toml."),
    ] = None,
    db_url: Annotated[str | None, typer.Option("--db-url", help="Override [app].database_url.")] = None,
) -> None:
    """Answer 1 or 2 to vote, s to skip, q to quit."""
    if rounds <= 0:
        raise typer.BadParameter("--rounds must be greater than 0")

    config = load_app_config(config_path, db_url=db_url)
    session_token = ensure_session_token(JsonFileTokenStore(token_file))
    service = VotingService(
        create_session_factory(create_db_engine(config.database_url)),
        engine=EloRatingEngine(config.elo),
        pool_size=config.matchup_pool_size,
    )
    typer.echo(f"session={session_token}")

    for round_number in range(1, rounds + 1):
        try:
            matchup = service.next_matchup()
        except InsufficientPoolError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1) from exc

        typer.echo(f"round {round_number}/{rounds}")
        _describe(matchup)
        choice = typer.prompt("winner [1/2/s/q]").strip().lower()
        if choice == "q":
            break
        if choice not in ("1", "2"):
            typer.echo("skipped")
            continue

        winner = matchup.first if choice == "1" else matchup.second
        try:
            result = service.vote(
                session_token=session_token,
                person1_id=matchup.first.id,
                person2_id=matchup.second.id,
                winner_id=winner.id,
            )
        except PersistenceFailure as exc:
            typer.echo(f"{exc}", err=True)
            continue
        typer.echo(f"{winner.name} gained {result.rating_change} points (now {result.new_winner_rating})")


if __name__ == "__main__":
    app()
