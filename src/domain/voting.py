"""Vote orchestration: one comparison in, one vote row and two rating updates out."""

from __future__ import annotations

import logging
import random

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from domain.common import Matchup, VoteResult
from domain.errors import InvalidVoteError, PersistenceFailure, PersonNotFoundError
from domain.feed import PEOPLE_TABLE, VOTES_TABLE, ChangeFeed
from domain.matchup import select_matchup
from domain.ratings.elo.calculator import EloRatingEngine
from repositories.people import apply_comparison_result, fetch_matchup_pool, lock_people
from repositories.votes import insert_vote

logger = logging.getLogger(__name__)


def validate_vote(*, session_token: str, person1_id: str, person2_id: str, winner_id: str) -> str:
    """Check the vote shape and return the loser id."""
    if not session_token or not session_token.strip():
        raise InvalidVoteError("session token is required")
    if person1_id == person2_id:
        raise InvalidVoteError(f"person1_id and person2_id must differ (both {person1_id})")
    if winner_id == person1_id:
        return person2_id
    if winner_id == person2_id:
        return person1_id
    raise InvalidVoteError(
        f"winner_id={winner_id} does not belong to matchup {person1_id}/{person2_id}"
    )


def cast_vote(
    session: Session,
    *,
    engine: EloRatingEngine,
    session_token: str,
    person1_id: str,
    person2_id: str,
    winner_id: str,
) -> VoteResult:
    """Apply one vote inside the caller's open transaction.

    Ratings are computed from the rows as locked here, not from whatever the
    client saw when the matchup was served.
    """
    loser_id = validate_vote(
        session_token=session_token,
        person1_id=person1_id,
        person2_id=person2_id,
        winner_id=winner_id,
    )

    people = lock_people(session, (person1_id, person2_id))
    for person_id in (person1_id, person2_id):
        person = people.get(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        if not person.is_approved:
            raise PersonNotFoundError(person_id, detail="is not approved for matchups")

    winner = people[winner_id]
    loser = people[loser_id]
    winner_pre_rating = int(winner.rating)
    loser_pre_rating = int(loser.rating)

    update = engine.update(winner_pre_rating, loser_pre_rating)

    vote = insert_vote(
        session,
        session_id=session_token,
        person1_id=person1_id,
        person2_id=person2_id,
        winner_id=winner_id,
        rating_change=update.rating_change,
    )
    apply_comparison_result(
        session,
        winner_id=winner_id,
        loser_id=loser_id,
        new_winner_rating=update.new_winner_rating,
        new_loser_rating=update.new_loser_rating,
    )

    return VoteResult(
        vote_id=int(vote.id),
        session_id=session_token,
        winner_id=winner_id,
        loser_id=loser_id,
        winner_pre_rating=winner_pre_rating,
        loser_pre_rating=loser_pre_rating,
        new_winner_rating=update.new_winner_rating,
        new_loser_rating=update.new_loser_rating,
        rating_change=update.rating_change,
    )


class VotingService:
    """Serves matchups and records votes as single units of work."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        engine: EloRatingEngine | None = None,
        pool_size: int = 50,
        feed: ChangeFeed | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if pool_size < 2:
            raise ValueError("pool_size must be >= 2")
        self.session_factory = session_factory
        self.engine = engine or EloRatingEngine()
        self.pool_size = pool_size
        self.feed = feed
        self.rng = rng

    def next_matchup(self) -> Matchup:
        """Fetch a fresh pool and pick two distinct approved people."""
        with self.session_factory() as session:
            pool = fetch_matchup_pool(session, limit=self.pool_size)
        return select_matchup(pool, rng=self.rng)

    def vote(
        self,
        *,
        session_token: str,
        person1_id: str,
        person2_id: str,
        winner_id: str,
    ) -> VoteResult:
        """Record a vote; on any database error nothing is committed."""
        try:
            with self.session_factory() as session, session.begin():
                result = cast_vote(
                    session,
                    engine=self.engine,
                    session_token=session_token,
                    person1_id=person1_id,
                    person2_id=person2_id,
                    winner_id=winner_id,
                )
        except SQLAlchemyError as exc:
            logger.error(
                "vote not recorded session=%s pair=%s/%s winner=%s: %s",
                session_token,
                person1_id,
                person2_id,
                winner_id,
                exc,
            )
            raise PersistenceFailure("Failed to record your vote. Please try again.") from exc

        logger.info(
            "vote recorded vote_id=%s winner=%s loser=%s rating_change=%d",
            result.vote_id,
            result.winner_id,
            result.loser_id,
            result.rating_change,
        )
        if self.feed is not None:
            self.feed.publish(VOTES_TABLE)
            self.feed.publish(PEOPLE_TABLE)
        return result


__all__ = ["VotingService", "cast_vote", "validate_vote"]
