"""Uniform random matchup selection over the eligible pool."""

from __future__ import annotations

import random
from collections.abc import Iterable

from domain.common import Matchup, PersonSnapshot
from domain.errors import InsufficientPoolError


def select_matchup(pool: Iterable[PersonSnapshot], *, rng: random.Random | None = None) -> Matchup:
    """Pick two people with distinct ids, uniformly at random.

    The selection is memoryless: the same pair can come up again on the next call.
    """
    distinct: dict[str, PersonSnapshot] = {}
    for person in pool:
        distinct.setdefault(person.id, person)

    candidates = list(distinct.values())
    if len(candidates) < 2:
        raise InsufficientPoolError(len(candidates))

    first, second = (rng or random).sample(candidates, 2)
    return Matchup(first=first, second=second)


__all__ = ["select_matchup"]
