"""Shared fixtures: an in-memory database with the voting schema."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory
from repositories.people import approve_person, insert_person
from repositories.schema import ensure_schema


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_db_engine("sqlite+pysqlite:///:memory:")
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def add_person(session_factory: sessionmaker[Session]) -> Callable[..., str]:
    def _add(
        name: str,
        *,
        rating: int = 1200,
        wins: int = 0,
        losses: int = 0,
        approved: bool = True,
        photo_url: str | None = None,
    ) -> str:
        with session_factory() as session, session.begin():
            person = insert_person(
                session,
                name=name,
                photo_url=photo_url or f"/uploads/{name.lower()}.jpg",
                rating=rating,
            )
            person.wins = wins
            person.losses = losses
            person.total_votes = wins + losses
            if approved:
                approve_person(session, person.id)
            return person.id

    return _add
