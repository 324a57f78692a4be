"""Schema creation for the voting tables."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from models import Base, Person, Photo, Vote


def ensure_schema(engine: Engine) -> None:
    """Create people, votes and photos tables and their indexes if missing."""
    Base.metadata.create_all(
        bind=engine,
        tables=[Person.__table__, Vote.__table__, Photo.__table__],
    )
