"""Shared TOML loading utilities for application config files."""

from __future__ import annotations

from pathlib import Path
from typing import Any
import tomllib


def load_toml_file(config_path: Path) -> dict[str, Any]:
    """Read one TOML config file, failing loudly when it is missing or malformed."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if not config_path.is_file():
        raise IsADirectoryError(f"Config path is not a file: {config_path}")

    with config_path.open("rb") as file:
        try:
            return tomllib.load(file)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"{config_path}: invalid TOML ({exc})") from exc


def get_section(raw: dict[str, Any], name: str, file_path: Path | None) -> dict[str, Any]:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"{_label(file_path)}: [{name}] must be a table")
    return section


def _label(file_path: Path | None) -> str:
    return str(file_path) if file_path is not None else "<config>"


__all__ = ["get_section", "load_toml_file"]
