"""Leaderboard ranking, name grouping and change-aware caching."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from domain.common import LeaderboardEntry, PersonSnapshot
from domain.feed import PEOPLE_TABLE, ChangeFeed

logger = logging.getLogger(__name__)


def win_rate(wins: int, losses: int) -> float:
    """Win percentage rounded to one decimal, 0.0 before the first vote."""
    total = wins + losses
    if total <= 0:
        return 0.0
    return round((wins / total) * 100.0, 1)


def _sort_key(person: PersonSnapshot) -> tuple[int, int, str]:
    return (-person.rating, -person.total_votes, person.name)


def rank_people(people: Sequence[PersonSnapshot]) -> list[LeaderboardEntry]:
    ordered = sorted(people, key=_sort_key)
    return [
        LeaderboardEntry(
            rank=index,
            id=person.id,
            name=person.name,
            photo_url=person.photo_url,
            rating=person.rating,
            wins=person.wins,
            losses=person.losses,
            total_votes=person.total_votes,
            win_rate=win_rate(person.wins, person.losses),
        )
        for index, person in enumerate(ordered, start=1)
    ]


def group_by_name(people: Sequence[PersonSnapshot]) -> list[PersonSnapshot]:
    """Collapse rows sharing a display name into one identity.

    The highest-rated row supplies id, photo and rating; wins, losses and
    total votes are summed across the group.
    """
    groups: dict[str, list[PersonSnapshot]] = {}
    for person in people:
        groups.setdefault(person.name, []).append(person)

    merged: list[PersonSnapshot] = []
    for rows in groups.values():
        representative = min(rows, key=_sort_key)
        merged.append(
            PersonSnapshot(
                id=representative.id,
                name=representative.name,
                photo_url=representative.photo_url,
                rating=representative.rating,
                wins=sum(row.wins for row in rows),
                losses=sum(row.losses for row in rows),
                total_votes=sum(row.total_votes for row in rows),
            )
        )
    return sorted(merged, key=_sort_key)


def build_leaderboard(
    people: Sequence[PersonSnapshot],
    *,
    grouped: bool = False,
    limit: int | None = None,
) -> list[LeaderboardEntry]:
    rows = group_by_name(people) if grouped else list(people)
    entries = rank_people(rows)
    if limit is not None:
        entries = entries[:limit]
    return entries


@dataclass
class _Snapshot:
    people: list[PersonSnapshot]
    fetched_at: float


class LeaderboardView:
    """Serves leaderboard reads, re-querying only after a change notification.

    Without a feed every call goes back to ``reader``. With one, a snapshot
    older than ``max_age_seconds`` is also re-read, covering writes made by
    other processes the feed never hears about.

    Notifications may arrive from another thread while a read is in flight;
    a snapshot read before such a notification is returned once but not kept.
    """

    def __init__(
        self,
        reader: Callable[[], Sequence[PersonSnapshot]],
        *,
        feed: ChangeFeed | None = None,
        max_age_seconds: float | None = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._reader = reader
        self._feed = feed
        self._max_age_seconds = max_age_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: _Snapshot | None = None
        self._generation = 0
        self._unsubscribe: Callable[[], None] | None = None
        if feed is not None:
            self._unsubscribe = feed.subscribe(self._on_change)

    def _on_change(self, table: str) -> None:
        if table == PEOPLE_TABLE:
            self.invalidate()

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._snapshot = None

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._feed = None
        self.invalidate()

    def _is_fresh(self, snapshot: _Snapshot) -> bool:
        if self._max_age_seconds is None:
            return True
        return (self._clock() - snapshot.fetched_at) <= self._max_age_seconds

    def people(self) -> list[PersonSnapshot]:
        if self._feed is None:
            return list(self._reader())
        with self._lock:
            snapshot = self._snapshot
            generation = self._generation
        if snapshot is not None and self._is_fresh(snapshot):
            return list(snapshot.people)

        people = list(self._reader())
        logger.debug("leaderboard refreshed rows=%d", len(people))
        with self._lock:
            if self._generation == generation:
                self._snapshot = _Snapshot(people=people, fetched_at=self._clock())
        return list(people)

    def entries(self, *, grouped: bool = False, limit: int | None = None) -> list[LeaderboardEntry]:
        return build_leaderboard(self.people(), grouped=grouped, limit=limit)


__all__ = [
    "LeaderboardView",
    "build_leaderboard",
    "group_by_name",
    "rank_people",
    "win_rate",
]
