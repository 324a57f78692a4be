"""Tests for vote orchestration against an in-memory database."""

from __future__ import annotations

import random
from collections.abc import Callable

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

import domain.voting as voting_module
from domain.errors import InsufficientPoolError, InvalidVoteError, PersistenceFailure, PersonNotFoundError
from domain.feed import PEOPLE_TABLE, VOTES_TABLE, ChangeFeed
from domain.ratings.elo.calculator import EloParameters, EloRatingEngine
from domain.voting import VotingService, validate_vote
from models import Person, Vote
from repositories.votes import count_votes

TOKEN = "session_1700000000000_abc123"


def _load(session_factory: sessionmaker[Session], person_id: str) -> Person:
    with session_factory() as session:
        person = session.get(Person, person_id)
        assert person is not None
        return person


def _db_error() -> OperationalError:
    return OperationalError("UPDATE people", {}, Exception("database is locked"))


def test_validate_vote_returns_loser() -> None:
    assert validate_vote(session_token=TOKEN, person1_id="a", person2_id="b", winner_id="a") == "b"
    assert validate_vote(session_token=TOKEN, person1_id="a", person2_id="b", winner_id="b") == "a"


@pytest.mark.parametrize(
    ("token", "person1_id", "person2_id", "winner_id"),
    [
        ("", "a", "b", "a"),
        ("   ", "a", "b", "a"),
        (TOKEN, "a", "a", "a"),
        (TOKEN, "a", "b", "c"),
    ],
)
def test_validate_vote_rejects_malformed_votes(
    token: str, person1_id: str, person2_id: str, winner_id: str
) -> None:
    with pytest.raises(InvalidVoteError):
        validate_vote(session_token=token, person1_id=person1_id, person2_id=person2_id, winner_id=winner_id)


def test_vote_updates_both_people_and_records_vote(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
) -> None:
    winner_id = add_person("Ann", wins=2, losses=1)
    loser_id = add_person("Bob", wins=0, losses=4)
    service = VotingService(session_factory)

    result = service.vote(session_token=TOKEN, person1_id=loser_id, person2_id=winner_id, winner_id=winner_id)

    assert result.rating_change == 16
    assert result.new_winner_rating == 1216
    assert result.new_loser_rating == 1184
    assert result.loser_id == loser_id

    winner = _load(session_factory, winner_id)
    loser = _load(session_factory, loser_id)
    assert (winner.rating, winner.wins, winner.losses, winner.total_votes) == (1216, 3, 1, 4)
    assert (loser.rating, loser.wins, loser.losses, loser.total_votes) == (1184, 0, 5, 5)
    for person in (winner, loser):
        assert person.total_votes == person.wins + person.losses

    with session_factory() as session:
        vote = session.get(Vote, result.vote_id)
        assert vote is not None
        assert vote.session_id == TOKEN
        assert (vote.person1_id, vote.person2_id) == (loser_id, winner_id)
        assert vote.winner_id == winner_id
        assert vote.rating_change == 16


def test_ratings_are_read_fresh_for_each_vote(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
) -> None:
    first_id = add_person("Ann")
    second_id = add_person("Bob")
    service = VotingService(session_factory)

    service.vote(session_token=TOKEN, person1_id=first_id, person2_id=second_id, winner_id=first_id)
    result = service.vote(session_token=TOKEN, person1_id=first_id, person2_id=second_id, winner_id=first_id)

    assert result.winner_pre_rating == 1216
    assert result.loser_pre_rating == 1184
    assert result.rating_change < 16
    assert _load(session_factory, first_id).total_votes == 2


def test_configured_k_factor_is_used(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
) -> None:
    first_id = add_person("Ann")
    second_id = add_person("Bob")
    service = VotingService(session_factory, engine=EloRatingEngine(EloParameters(k_factor=10.0)))

    result = service.vote(session_token=TOKEN, person1_id=first_id, person2_id=second_id, winner_id=second_id)
    assert result.rating_change == 5


def test_unknown_or_unapproved_participant_is_rejected(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
) -> None:
    approved_id = add_person("Ann")
    pending_id = add_person("Pat", approved=False)
    service = VotingService(session_factory)

    with pytest.raises(PersonNotFoundError, match="not approved"):
        service.vote(session_token=TOKEN, person1_id=approved_id, person2_id=pending_id, winner_id=approved_id)
    with pytest.raises(PersonNotFoundError):
        service.vote(session_token=TOKEN, person1_id=approved_id, person2_id="missing", winner_id=approved_id)

    with session_factory() as session:
        assert count_votes(session) == 0
    assert _load(session_factory, approved_id).total_votes == 0


def test_failed_rating_update_rolls_back_the_vote_row(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    first_id = add_person("Ann")
    second_id = add_person("Bob")

    def failing_update(session: Session, **kwargs: object) -> None:
        raise _db_error()

    monkeypatch.setattr(voting_module, "apply_comparison_result", failing_update)
    service = VotingService(session_factory)

    with pytest.raises(PersistenceFailure, match="try again"):
        service.vote(session_token=TOKEN, person1_id=first_id, person2_id=second_id, winner_id=first_id)

    with session_factory() as session:
        assert count_votes(session) == 0
    assert _load(session_factory, first_id).rating == 1200
    assert _load(session_factory, second_id).total_votes == 0


def test_failed_vote_append_leaves_ratings_untouched(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    first_id = add_person("Ann")
    second_id = add_person("Bob")

    def failing_insert(session: Session, **kwargs: object) -> None:
        raise _db_error()

    monkeypatch.setattr(voting_module, "insert_vote", failing_insert)
    feed = ChangeFeed()
    published: list[str] = []
    feed.subscribe(published.append)
    service = VotingService(session_factory, feed=feed)

    with pytest.raises(PersistenceFailure) as excinfo:
        service.vote(session_token=TOKEN, person1_id=first_id, person2_id=second_id, winner_id=second_id)

    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert _load(session_factory, second_id).wins == 0
    assert published == []


def test_successful_vote_notifies_feed(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
) -> None:
    first_id = add_person("Ann")
    second_id = add_person("Bob")
    feed = ChangeFeed()
    published: list[str] = []
    feed.subscribe(published.append)

    VotingService(session_factory, feed=feed).vote(
        session_token=TOKEN, person1_id=first_id, person2_id=second_id, winner_id=first_id
    )
    assert published == [VOTES_TABLE, PEOPLE_TABLE]


def test_next_matchup_uses_only_approved_people(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
) -> None:
    approved = {add_person("Ann"), add_person("Bob"), add_person("Cid")}
    add_person("Pat", approved=False)
    service = VotingService(session_factory, rng=random.Random(5))

    for _ in range(20):
        matchup = service.next_matchup()
        first_id, second_id = matchup.ids()
        assert first_id != second_id
        assert {first_id, second_id} <= approved


def test_next_matchup_with_one_approved_person_fails(
    session_factory: sessionmaker[Session],
    add_person: Callable[..., str],
) -> None:
    add_person("Ann")
    add_person("Pat", approved=False)
    with pytest.raises(InsufficientPoolError):
        VotingService(session_factory).next_matchup()


def test_pool_size_must_allow_a_pair(session_factory: sessionmaker[Session]) -> None:
    with pytest.raises(ValueError):
        VotingService(session_factory, pool_size=1)
