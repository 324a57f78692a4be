"""Parse the [elo] config section into rating parameters."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from domain.ratings.elo.calculator import EloParameters


def parse_elo_parameters(elo_raw: dict[str, Any], file_path: Path | None = None) -> EloParameters:
    label = str(file_path) if file_path is not None else "<config>"
    parameters = EloParameters(
        initial_rating=int(elo_raw.get("initial_rating", 1200)),
        k_factor=float(elo_raw.get("k_factor", 32.0)),
        scale_factor=float(elo_raw.get("scale_factor", 400.0)),
    )
    _validate_parameters(label=label, parameters=parameters)
    return parameters


def _validate_parameters(*, label: str, parameters: EloParameters) -> None:
    if parameters.k_factor <= 0.0:
        raise ValueError(f"{label}: [elo].k_factor must be > 0")
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{label}: [elo].scale_factor must be > 0")
