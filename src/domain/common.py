"""Shared value types passed between repositories and domain services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PersonSnapshot:
    """Read-only view of one person row at the time it was fetched."""

    id: str
    name: str
    photo_url: str
    rating: int
    wins: int = 0
    losses: int = 0
    total_votes: int = 0


@dataclass(frozen=True)
class Matchup:
    """Unordered pair of two distinct people shown side by side."""

    first: PersonSnapshot
    second: PersonSnapshot

    def ids(self) -> tuple[str, str]:
        return self.first.id, self.second.id

    def __iter__(self):
        yield self.first
        yield self.second


@dataclass(frozen=True)
class VoteResult:
    vote_id: int
    session_id: str
    winner_id: str
    loser_id: str
    winner_pre_rating: int
    loser_pre_rating: int
    new_winner_rating: int
    new_loser_rating: int
    rating_change: int


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    id: str
    name: str
    photo_url: str
    rating: int
    wins: int
    losses: int
    total_votes: int
    win_rate: float


@dataclass(frozen=True)
class PhotoRecord:
    id: int
    person_id: str
    image_url: str
    created_at: datetime


__all__ = ["LeaderboardEntry", "Matchup", "PersonSnapshot", "PhotoRecord", "VoteResult"]
