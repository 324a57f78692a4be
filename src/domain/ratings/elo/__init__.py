"""Elo rating modules."""

from domain.ratings.elo.calculator import (
    EloParameters,
    EloRatingEngine,
    EloUpdate,
    calculate_elo_update,
    calculate_expected_score,
    round_rating,
)
from domain.ratings.elo.config import parse_elo_parameters

__all__ = [
    "EloParameters",
    "EloRatingEngine",
    "EloUpdate",
    "calculate_elo_update",
    "calculate_expected_score",
    "parse_elo_parameters",
    "round_rating",
]
