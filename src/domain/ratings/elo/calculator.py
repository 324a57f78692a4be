"""Pairwise Elo update for one head-to-head comparison."""

from __future__ import annotations

from dataclasses import dataclass
from math import floor

# 10 ** 300 is still a finite float; larger gaps give an expected score of 0 or 1.
_MAX_EXPONENT = 300.0


@dataclass(frozen=True)
class EloParameters:
    initial_rating: int = 1200
    k_factor: float = 32.0
    scale_factor: float = 400.0


@dataclass(frozen=True)
class EloUpdate:
    """Outcome of one comparison for both participants."""

    new_winner_rating: int
    new_loser_rating: int
    rating_change: int
    winner_expected_score: float
    loser_expected_score: float


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float = 400.0) -> float:
    """Compute the Elo expected score for one side."""
    exponent = (opponent_rating - rating) / scale_factor
    exponent = max(-_MAX_EXPONENT, min(_MAX_EXPONENT, exponent))
    return 1.0 / (1.0 + 10.0 ** exponent)


def round_rating(value: float) -> int:
    """Round half up (2.5 -> 3, -2.5 -> -2) rather than to even."""
    return int(floor(value + 0.5))


def calculate_elo_update(
    winner_rating: float,
    loser_rating: float,
    k_factor: float = 32.0,
    *,
    scale_factor: float = 400.0,
) -> EloUpdate:
    """Return the new integer ratings after ``winner`` beats ``loser``.

    Each new rating is rounded on its own, so the loser's drop is not
    guaranteed to mirror ``rating_change``. No floor or ceiling is applied.
    """
    winner_expected = calculate_expected_score(winner_rating, loser_rating, scale_factor)
    loser_expected = calculate_expected_score(loser_rating, winner_rating, scale_factor)

    new_winner_rating = round_rating(winner_rating + k_factor * (1.0 - winner_expected))
    new_loser_rating = round_rating(loser_rating + k_factor * (0.0 - loser_expected))

    return EloUpdate(
        new_winner_rating=new_winner_rating,
        new_loser_rating=new_loser_rating,
        rating_change=int(new_winner_rating - winner_rating),
        winner_expected_score=winner_expected,
        loser_expected_score=loser_expected,
    )


class EloRatingEngine:
    """Binds ``EloParameters`` so callers never pass the k-factor by hand."""

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()

    @property
    def initial_rating(self) -> int:
        return self.params.initial_rating

    def update(self, winner_rating: float, loser_rating: float) -> EloUpdate:
        return calculate_elo_update(
            winner_rating,
            loser_rating,
            self.params.k_factor,
            scale_factor=self.params.scale_factor,
        )
