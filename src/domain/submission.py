"""Photo submissions and additional profile photos."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from domain.common import PersonSnapshot, PhotoRecord
from domain.config import MAX_UPLOAD_BYTES
from domain.errors import InvalidUploadError, PersonNotFoundError, UploadFailure
from domain.feed import PEOPLE_TABLE, PHOTOS_TABLE, ChangeFeed
from repositories.people import fetch_same_name_ids, get_person, insert_person, to_snapshot
from repositories.photos import fetch_photos_for_people, insert_photo

logger = logging.getLogger(__name__)


class ImageStorage(Protocol):
    def upload(
        self,
        data: bytes,
        *,
        filename: str | None,
        content_type: str,
        folder: str | None = None,
    ) -> str: ...


def validate_image_upload(
    content_type: str | None,
    size: int,
    *,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> None:
    if not content_type or not content_type.lower().startswith("image/"):
        raise InvalidUploadError("Invalid file type: please select an image file")
    if size <= 0:
        raise InvalidUploadError("Uploaded file is empty")
    if size > max_bytes:
        raise InvalidUploadError(
            f"File too large: {size} bytes exceeds the {max_bytes} byte limit"
        )


def normalize_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidUploadError("Name required")
    return cleaned


class SubmissionService:
    """Upload-then-insert flows for new people and extra profile photos.

    A storage success followed by a failed insert leaves an orphaned file;
    that gap is reported, not reconciled.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        storage: ImageStorage,
        *,
        initial_rating: int = 1200,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        feed: ChangeFeed | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.storage = storage
        self.initial_rating = initial_rating
        self.max_upload_bytes = max_upload_bytes
        self.feed = feed

    def _upload(self, data: bytes, *, filename: str | None, content_type: str, folder: str | None = None) -> str:
        validate_image_upload(content_type, len(data), max_bytes=self.max_upload_bytes)
        try:
            return self.storage.upload(data, filename=filename, content_type=content_type, folder=folder)
        except UploadFailure:
            raise
        except OSError as exc:
            raise UploadFailure(f"Image upload failed: {exc}") from exc

    def submit_person(
        self,
        *,
        name: str,
        data: bytes,
        filename: str | None,
        content_type: str,
    ) -> PersonSnapshot:
        """Store the photo and create a pending person awaiting moderation."""
        cleaned_name = normalize_name(name)
        photo_url = self._upload(data, filename=filename, content_type=content_type)

        try:
            with self.session_factory() as session, session.begin():
                person = insert_person(
                    session,
                    name=cleaned_name,
                    photo_url=photo_url,
                    rating=self.initial_rating,
                )
                snapshot = to_snapshot(person)
        except SQLAlchemyError as exc:
            logger.error("submission insert failed name=%s photo_url=%s", cleaned_name, photo_url)
            raise UploadFailure(f"Could not record submission: {exc}") from exc

        logger.info("submission recorded person_id=%s name=%s", snapshot.id, snapshot.name)
        if self.feed is not None:
            self.feed.publish(PEOPLE_TABLE)
        return snapshot

    def add_profile_photo(
        self,
        *,
        person_id: str,
        data: bytes,
        filename: str | None,
        content_type: str,
    ) -> PhotoRecord:
        """Attach a photo to the highest-rated approved row sharing the person's name."""
        with self.session_factory() as session:
            person = get_person(session, person_id)
            if person is None:
                raise PersonNotFoundError(person_id)
            name = person.name
            same_name_ids = fetch_same_name_ids(session, name)
        primary_id = same_name_ids[0] if same_name_ids else person_id

        image_url = self._upload(data, filename=filename, content_type=content_type, folder=name)

        try:
            with self.session_factory() as session, session.begin():
                photo = insert_photo(session, person_id=primary_id, image_url=image_url)
                record = PhotoRecord(
                    id=photo.id,
                    person_id=photo.person_id,
                    image_url=photo.image_url,
                    created_at=photo.created_at,
                )
        except SQLAlchemyError as exc:
            logger.error("photo insert failed person_id=%s image_url=%s", primary_id, image_url)
            raise UploadFailure(f"Could not record photo: {exc}") from exc

        if self.feed is not None:
            self.feed.publish(PHOTOS_TABLE)
        return record

    def list_profile_photos(self, person_id: str) -> list[PhotoRecord]:
        """Photos across every approved row with this person's name, newest first."""
        with self.session_factory() as session:
            person = get_person(session, person_id)
            if person is None:
                raise PersonNotFoundError(person_id)
            person_ids = fetch_same_name_ids(session, person.name) or [person_id]
            return fetch_photos_for_people(session, person_ids)


__all__ = [
    "ImageStorage",
    "SubmissionService",
    "normalize_name",
    "validate_image_upload",
]
