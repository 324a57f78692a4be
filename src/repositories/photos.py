"""Persistence helpers for additional profile photos."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.common import PhotoRecord
from models import Photo


def insert_photo(session: Session, *, person_id: str, image_url: str) -> Photo:
    photo = Photo(person_id=person_id, image_url=image_url)
    session.add(photo)
    session.flush()
    return photo


def fetch_photos_for_people(session: Session, person_ids: Sequence[str]) -> list[PhotoRecord]:
    """Photos of any of ``person_ids``, newest first."""
    if not person_ids:
        return []
    statement = (
        select(Photo)
        .where(Photo.person_id.in_(list(person_ids)))
        .order_by(Photo.created_at.desc(), Photo.id.desc())
    )
    return [
        PhotoRecord(
            id=photo.id,
            person_id=photo.person_id,
            image_url=photo.image_url,
            created_at=photo.created_at,
        )
        for photo in session.scalars(statement)
    ]
