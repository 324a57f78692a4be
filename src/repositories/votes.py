"""Append-only persistence for vote records."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import Vote


def insert_vote(
    session: Session,
    *,
    session_id: str,
    person1_id: str,
    person2_id: str,
    winner_id: str,
    rating_change: int,
) -> Vote:
    vote = Vote(
        session_id=session_id,
        person1_id=person1_id,
        person2_id=person2_id,
        winner_id=winner_id,
        rating_change=rating_change,
    )
    session.add(vote)
    session.flush()
    return vote


def count_votes(session: Session, *, session_id: str | None = None) -> int:
    statement = select(func.count(Vote.id))
    if session_id is not None:
        statement = statement.where(Vote.session_id == session_id)
    result = session.scalar(statement)
    return int(result or 0)
