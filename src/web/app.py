"""FastAPI application exposing matchups, votes, the leaderboard and submissions."""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory
from domain.common import PersonSnapshot, PhotoRecord
from domain.config import AppConfig, load_app_config
from domain.errors import (
    FacemashError,
    InsufficientPoolError,
    InvalidUploadError,
    InvalidVoteError,
    PersistenceFailure,
    PersonNotFoundError,
    UploadFailure,
)
from domain.feed import ChangeFeed
from domain.leaderboard import LeaderboardView
from domain.ratings.elo.calculator import EloRatingEngine
from domain.submission import SubmissionService
from domain.voting import VotingService
from repositories.people import fetch_leaderboard_people
from repositories.schema import ensure_schema
from storage.local import LocalImageStorage

logger = logging.getLogger(__name__)

_ERROR_STATUS: tuple[tuple[type[FacemashError], int], ...] = (
    (InsufficientPoolError, 409),
    (InvalidVoteError, 400),
    (InvalidUploadError, 400),
    (PersonNotFoundError, 404),
    (PersistenceFailure, 503),
    (UploadFailure, 502),
)


class VoteRequest(BaseModel):
    session_id: str
    person1_id: str
    person2_id: str
    winner_id: str


def _person_json(person: PersonSnapshot) -> dict[str, Any]:
    return asdict(person)


def _photo_json(photo: PhotoRecord) -> dict[str, Any]:
    payload = asdict(photo)
    payload["created_at"] = photo.created_at.isoformat() if photo.created_at else None
    return payload


def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """Read at most ``max_bytes + 1`` bytes; a longer upload is left unread and fails validation."""
    return upload.file.read(max_bytes + 1)


def _status_for(exc: FacemashError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


def create_app(
    config: AppConfig | None = None,
    *,
    engine: Engine | None = None,
    session_factory: sessionmaker[Session] | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    """Build the API; ``engine``/``session_factory`` override the configured database."""
    config = config or load_app_config()
    engine = engine or create_db_engine(config.database_url)
    session_factory = session_factory or create_session_factory(engine)

    feed = ChangeFeed()
    storage = LocalImageStorage(config.storage.root_dir, config.storage.public_base_url)
    voting = VotingService(
        session_factory,
        engine=EloRatingEngine(config.elo),
        pool_size=config.matchup_pool_size,
        feed=feed,
        rng=rng,
    )
    submissions = SubmissionService(
        session_factory,
        storage,
        initial_rating=config.elo.initial_rating,
        max_upload_bytes=config.storage.max_upload_bytes,
        feed=feed,
    )

    def read_leaderboard() -> list[PersonSnapshot]:
        with session_factory() as session:
            return fetch_leaderboard_people(session)

    leaderboard = LeaderboardView(read_leaderboard, feed=feed)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables before serving; release the leaderboard subscription after."""
        ensure_schema(engine)
        yield
        leaderboard.close()

    app = FastAPI(title="Facemash", lifespan=lifespan)
    app.state.config = config
    app.state.feed = feed
    app.state.voting = voting
    app.state.submissions = submissions
    app.state.leaderboard = leaderboard

    config.storage.root_dir.mkdir(parents=True, exist_ok=True)
    if config.storage.public_base_url.startswith("/"):
        app.mount(
            config.storage.public_base_url,
            StaticFiles(directory=config.storage.root_dir),
            name="uploads",
        )

    @app.exception_handler(FacemashError)
    async def handle_domain_error(request: Request, exc: FacemashError):
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc), "kind": type(exc).__name__}, status_code=status_code)

    @app.get("/api/matchup")
    def get_matchup():
        """Two distinct approved people chosen uniformly at random."""
        matchup = voting.next_matchup()
        return {"people": [_person_json(person) for person in matchup]}

    @app.post("/api/votes")
    def post_vote(payload: VoteRequest):
        result = voting.vote(
            session_token=payload.session_id,
            person1_id=payload.person1_id,
            person2_id=payload.person2_id,
            winner_id=payload.winner_id,
        )
        return asdict(result)

    @app.get("/api/leaderboard")
    def get_leaderboard(limit: int | None = None, grouped: bool = False):
        effective_limit = config.leaderboard_limit if limit is None else limit
        if effective_limit <= 0:
            return JSONResponse({"error": "limit must be > 0"}, status_code=400)
        entries = leaderboard.entries(grouped=grouped, limit=effective_limit)
        return {"grouped": grouped, "entries": [asdict(entry) for entry in entries]}

    @app.post("/api/submissions", status_code=201)
    def post_submission(name: str = Form(""), photo: UploadFile = File(...)):
        """Accept a new photo for moderation; it joins matchups once approved."""
        person = submissions.submit_person(
            name=name,
            data=read_upload(photo, config.storage.max_upload_bytes),
            filename=photo.filename,
            content_type=photo.content_type or "",
        )
        return {"person": _person_json(person), "moderation_status": "pending"}

    @app.get("/api/people/{person_id}/photos")
    def get_person_photos(person_id: str):
        photos = submissions.list_profile_photos(person_id)
        return {"photos": [_photo_json(photo) for photo in photos]}

    @app.post("/api/people/{person_id}/photos", status_code=201)
    def post_person_photo(person_id: str, photo: UploadFile = File(...)):
        record = submissions.add_profile_photo(
            person_id=person_id,
            data=read_upload(photo, config.storage.max_upload_bytes),
            filename=photo.filename,
            content_type=photo.content_type or "",
        )
        return {"photo": _photo_json(record)}

    return app


__all__ = ["VoteRequest", "create_app", "read_upload"]
