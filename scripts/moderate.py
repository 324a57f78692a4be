#!/usr/bin/env python3
"""Manual moderation of submitted photos."""

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
from domain.errors import PersonNotFoundError
from repositories.people import approve_person, fetch_pending_people, reject_person

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="App config TOML. Defaults to config/facemash.toml."),
]
DbUrlOption = Annotated[str | None, typer.Option("--db-url", help="Override [app].database_url.")]

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Review pending submissions.",
)


def _session_factory(config_path: Path | None, db_url: str | None):
    config = load_app_config(config_path, db_url=db_url)
    return create_session_factory(create_db_engine(config.database_url))


@app.command("list-pending")
def list_pending(config_path: ConfigOption = None, db_url: DbUrlOption = None) -> None:
    """Print submissions awaiting review, oldest first."""
    session_factory = _session_factory(config_path, db_url)
    with session_factory() as session:
        pending = fetch_pending_people(session)
        if not pending:
            typer.echo("No pending submissions.")
            return
        for person in pending:
            typer.echo(f"{person.id}  {person.name:<24} {person.photo_url}  submitted={person.created_at}")


def _set_status(person_ids: list[str], config_path: Path | None, db_url: str | None, *, approve: bool) -> None:
    session_factory = _session_factory(config_path, db_url)
    action = approve_person if approve else reject_person
    with session_factory() as session, session.begin():
        for person_id in person_ids:
            try:
                person = action(session, person_id)
            except PersonNotFoundError as exc:
                raise typer.BadParameter(str(exc)) from exc
            typer.echo(f"{person.moderation_status} {person.id} {person.name}")


@app.command("approve")
def approve(
    person_ids: Annotated[list[str], typer.Argument(help="Ids of people to approve.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
) -> None:
    """Approve submissions so they enter matchups and the leaderboard."""
    _set_status(person_ids, config_path, db_url, approve=True)


@app.command("reject")
def reject(
    person_ids: Annotated[list[str], typer.Argument(help="Ids of people to reject.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
) -> None:
    """Reject submissions; they stay out of matchups."""
    _set_status(person_ids, config_path, db_url, approve=False)


if __name__ == "__main__":
    app()
