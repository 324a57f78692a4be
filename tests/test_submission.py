"""Tests for photo submissions, profile photos and moderation."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

import domain.submission as submission_module
from domain.errors import InvalidUploadError, PersonNotFoundError, UploadFailure
from domain.feed import PEOPLE_TABLE, ChangeFeed
from domain.submission import SubmissionService, normalize_name, validate_image_upload
from models import Person
from repositories.people import (
    approve_person,
    count_approved_people,
    fetch_leaderboard_people,
    fetch_matchup_pool,
    fetch_pending_people,
    reject_person,
    set_moderation_status,
)
from storage.local import LocalImageStorage

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class RecordingStorage:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: list[tuple[str | None, str, str | None, int]] = []

    def upload(self, data: bytes, *, filename: str | None, content_type: str, folder: str | None = None) -> str:
        if self.fail:
            raise UploadFailure("bucket unavailable")
        self.uploads.append((filename, content_type, folder, len(data)))
        return f"https://cdn.example.com/{folder or 'root'}/{len(self.uploads)}.png"


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def service(session_factory: sessionmaker[Session], storage: RecordingStorage) -> SubmissionService:
    return SubmissionService(session_factory, storage, initial_rating=1200, max_upload_bytes=1024)


@pytest.mark.parametrize(
    ("content_type", "size", "message"),
    [
        ("application/pdf", 10, "Invalid file type"),
        (None, 10, "Invalid file type"),
        ("image/png", 0, "empty"),
        ("image/jpeg", 1025, "File too large"),
    ],
)
def test_validate_image_upload_rejects(content_type: str | None, size: int, message: str) -> None:
    with pytest.raises(InvalidUploadError, match=message):
        validate_image_upload(content_type, size, max_bytes=1024)


def test_validate_image_upload_accepts_limit_exactly() -> None:
    validate_image_upload("image/webp", 1024, max_bytes=1024)
    validate_image_upload("IMAGE/PNG", 5 * 1024 * 1024)


def test_normalize_name() -> None:
    assert normalize_name("  Ada Lovelace ") == "Ada Lovelace"
    with pytest.raises(InvalidUploadError, match="Name required"):
        normalize_name("   ")


def test_submit_person_creates_pending_entry(
    session_factory: sessionmaker[Session],
    service: SubmissionService,
    storage: RecordingStorage,
) -> None:
    person = service.submit_person(name=" Ada ", data=PNG_BYTES, filename="ada.png", content_type="image/png")

    assert person.name == "Ada"
    assert person.rating == 1200
    assert (person.wins, person.losses, person.total_votes) == (0, 0, 0)
    assert storage.uploads == [("ada.png", "image/png", None, len(PNG_BYTES))]

    with session_factory() as session:
        stored = session.get(Person, person.id)
        assert stored is not None
        assert stored.is_approved is False
        assert stored.moderation_status == "pending"
        assert fetch_matchup_pool(session) == []
        assert fetch_leaderboard_people(session) == []
        assert [row.id for row in fetch_pending_people(session)] == [person.id]


def test_submit_person_validates_before_upload(service: SubmissionService, storage: RecordingStorage) -> None:
    with pytest.raises(InvalidUploadError):
        service.submit_person(name="Ada", data=b"x" * 2048, filename="big.png", content_type="image/png")
    with pytest.raises(InvalidUploadError):
        service.submit_person(name="", data=PNG_BYTES, filename="a.png", content_type="image/png")
    assert storage.uploads == []


def test_storage_failure_is_upload_failure(session_factory: sessionmaker[Session]) -> None:
    service = SubmissionService(session_factory, RecordingStorage(fail=True))
    with pytest.raises(UploadFailure):
        service.submit_person(name="Ada", data=PNG_BYTES, filename="a.png", content_type="image/png")
    with session_factory() as session:
        assert fetch_pending_people(session) == []


def test_insert_failure_after_upload_is_upload_failure(
    service: SubmissionService,
    storage: RecordingStorage,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def failing_insert(session: Session, **kwargs: object) -> Person:
        raise IntegrityError("INSERT INTO people", {}, Exception("constraint"))

    monkeypatch.setattr(submission_module, "insert_person", failing_insert)
    with pytest.raises(UploadFailure, match="Could not record submission"):
        service.submit_person(name="Ada", data=PNG_BYTES, filename="a.png", content_type="image/png")
    assert len(storage.uploads) == 1


def test_submission_notifies_feed(session_factory: sessionmaker[Session], storage: RecordingStorage) -> None:
    feed = ChangeFeed()
    published: list[str] = []
    feed.subscribe(published.append)
    service = SubmissionService(session_factory, storage, feed=feed)
    service.submit_person(name="Ada", data=PNG_BYTES, filename="a.png", content_type="image/png")
    assert published == [PEOPLE_TABLE]


def test_moderation_moves_people_in_and_out_of_the_pool(
    session_factory: sessionmaker[Session],
    service: SubmissionService,
) -> None:
    ada = service.submit_person(name="Ada", data=PNG_BYTES, filename="a.png", content_type="image/png")
    bob = service.submit_person(name="Bob", data=PNG_BYTES, filename="b.png", content_type="image/png")

    with session_factory() as session, session.begin():
        approved = approve_person(session, ada.id)
        rejected = reject_person(session, bob.id)
        assert (approved.is_approved, approved.moderation_status) == (True, "approved")
        assert (rejected.is_approved, rejected.moderation_status) == (False, "rejected")

    with session_factory() as session:
        assert count_approved_people(session) == 1
        assert [person.id for person in fetch_matchup_pool(session)] == [ada.id]
        assert fetch_pending_people(session) == []


def test_moderation_errors(session_factory: sessionmaker[Session], add_person: Callable[..., str]) -> None:
    person_id = add_person("Ann", approved=False)
    with session_factory() as session:
        with pytest.raises(PersonNotFoundError):
            approve_person(session, "missing")
        with pytest.raises(ValueError, match="Unknown moderation status"):
            set_moderation_status(session, person_id, "banned")


def test_profile_photo_goes_to_highest_rated_same_name_row(
    session_factory: sessionmaker[Session],
    service: SubmissionService,
    storage: RecordingStorage,
    add_person: Callable[..., str],
) -> None:
    low_id = add_person("Dana", rating=1100)
    high_id = add_person("Dana", rating=1350)
    add_person("Dana", rating=1500, approved=False)

    record = service.add_profile_photo(person_id=low_id, data=PNG_BYTES, filename="d.png", content_type="image/png")

    assert record.person_id == high_id
    assert storage.uploads[-1][2] == "Dana"

    photos_from_low = service.list_profile_photos(low_id)
    photos_from_high = service.list_profile_photos(high_id)
    assert [photo.id for photo in photos_from_low] == [record.id]
    assert photos_from_low == photos_from_high


def test_profile_photos_newest_first(
    service: SubmissionService,
    add_person: Callable[..., str],
) -> None:
    first_id = add_person("Eve", rating=1200)
    second_id = add_person("Eve", rating=1100)
    older = service.add_profile_photo(person_id=first_id, data=PNG_BYTES, filename="1.png", content_type="image/png")
    newer = service.add_profile_photo(person_id=second_id, data=PNG_BYTES, filename="2.png", content_type="image/png")

    photos = service.list_profile_photos(second_id)
    assert [photo.id for photo in photos] == [newer.id, older.id]


def test_profile_photo_for_unknown_person(service: SubmissionService) -> None:
    with pytest.raises(PersonNotFoundError):
        service.add_profile_photo(person_id="missing", data=PNG_BYTES, filename="x.png", content_type="image/png")
    with pytest.raises(PersonNotFoundError):
        service.list_profile_photos("missing")


def test_submission_with_local_storage_writes_file(
    session_factory: sessionmaker[Session],
    tmp_path: Path,
) -> None:
    storage = LocalImageStorage(tmp_path / "uploads", "/uploads")
    service = SubmissionService(session_factory, storage)
    person = service.submit_person(name="Ada", data=PNG_BYTES, filename="ada.PNG", content_type="image/png")

    assert person.photo_url.startswith("/uploads/")
    assert person.photo_url.endswith(".png")
    assert storage.path_for_url(person.photo_url).read_bytes() == PNG_BYTES
