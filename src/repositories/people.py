"""Persistence helpers for the people table."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from domain.common import PersonSnapshot
from domain.errors import PersonNotFoundError
from models import MODERATION_STATUSES, Person


def to_snapshot(person: Person) -> PersonSnapshot:
    return PersonSnapshot(
        id=person.id,
        name=person.name,
        photo_url=person.photo_url,
        rating=int(person.rating),
        wins=int(person.wins),
        losses=int(person.losses),
        total_votes=int(person.total_votes),
    )


def fetch_matchup_pool(session: Session, *, limit: int = 50) -> list[PersonSnapshot]:
    """Fetch up to ``limit`` approved people in random order."""
    statement = (
        select(Person)
        .where(Person.is_approved.is_(True))
        .order_by(func.random())
        .limit(limit)
    )
    return [to_snapshot(person) for person in session.scalars(statement)]


def fetch_leaderboard_people(session: Session, *, limit: int | None = None) -> list[PersonSnapshot]:
    """Fetch approved people, highest rating first."""
    statement = (
        select(Person)
        .where(Person.is_approved.is_(True))
        .order_by(Person.rating.desc(), Person.total_votes.desc(), Person.name.asc())
    )
    if limit is not None:
        statement = statement.limit(limit)
    return [to_snapshot(person) for person in session.scalars(statement)]


def get_person(session: Session, person_id: str) -> Person | None:
    return session.get(Person, person_id)


def lock_people(session: Session, person_ids: Sequence[str]) -> dict[str, Person]:
    """Load rows for update, in id order so concurrent voters lock consistently."""
    statement = (
        select(Person)
        .where(Person.id.in_(sorted(set(person_ids))))
        .order_by(Person.id)
        .with_for_update()
    )
    return {person.id: person for person in session.scalars(statement)}


def apply_comparison_result(
    session: Session,
    *,
    winner_id: str,
    loser_id: str,
    new_winner_rating: int,
    new_loser_rating: int,
) -> None:
    """Write both new ratings and bump the counters in SQL."""
    _update_counters(
        session,
        person_id=winner_id,
        values={
            "rating": new_winner_rating,
            "wins": Person.wins + 1,
            "total_votes": Person.total_votes + 1,
        },
    )
    _update_counters(
        session,
        person_id=loser_id,
        values={
            "rating": new_loser_rating,
            "losses": Person.losses + 1,
            "total_votes": Person.total_votes + 1,
        },
    )


def _update_counters(session: Session, *, person_id: str, values: dict[str, Any]) -> None:
    statement = (
        update(Person)
        .where(Person.id == person_id)
        .values(**values, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    result = session.execute(statement)
    if result.rowcount != 1:
        raise PersonNotFoundError(person_id, detail="disappeared during vote update")


def insert_person(session: Session, *, name: str, photo_url: str, rating: int) -> Person:
    """Insert a new pending submission."""
    person = Person(
        name=name,
        photo_url=photo_url,
        rating=rating,
        wins=0,
        losses=0,
        total_votes=0,
        is_approved=False,
        moderation_status="pending",
    )
    session.add(person)
    session.flush()
    return person


def set_moderation_status(session: Session, person_id: str, status: str) -> Person:
    if status not in MODERATION_STATUSES:
        raise ValueError(f"Unknown moderation status {status!r}; expected one of {MODERATION_STATUSES}")
    person = get_person(session, person_id)
    if person is None:
        raise PersonNotFoundError(person_id)
    person.moderation_status = status
    person.is_approved = status == "approved"
    person.updated_at = datetime.now(UTC).replace(tzinfo=None)
    session.flush()
    return person


def approve_person(session: Session, person_id: str) -> Person:
    return set_moderation_status(session, person_id, "approved")


def reject_person(session: Session, person_id: str) -> Person:
    return set_moderation_status(session, person_id, "rejected")


def fetch_pending_people(session: Session) -> list[Person]:
    statement = (
        select(Person)
        .where(Person.moderation_status == "pending")
        .order_by(Person.created_at.asc(), Person.id.asc())
    )
    return list(session.scalars(statement))


def fetch_same_name_ids(session: Session, name: str) -> list[str]:
    """Ids of every approved row sharing ``name``, highest rating first."""
    statement = (
        select(Person.id)
        .where(Person.name == name, Person.is_approved.is_(True))
        .order_by(Person.rating.desc(), Person.id.asc())
    )
    return list(session.scalars(statement))


def count_approved_people(session: Session) -> int:
    result = session.scalar(select(func.count(Person.id)).where(Person.is_approved.is_(True)))
    return int(result or 0)
