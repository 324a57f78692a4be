"""Per-client session tokens used to tag vote records."""

from __future__ import annotations

import json
import random
import string
import time
from pathlib import Path
from typing import Protocol, runtime_checkable

SESSION_TOKEN_KEY = "facemash-session-id"
_BASE36_ALPHABET = string.digits + string.ascii_lowercase


@runtime_checkable
class SessionTokenStore(Protocol):
    """Client-local key/value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryTokenStore:
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileTokenStore:
    """Store keys in a small JSON object on disk, surviving restarts."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(raw, dict):
            raise ValueError(f"{self.path}: expected a JSON object")
        return {str(key): str(value) for key, value in raw.items()}

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values, indent=2, sort_keys=True), encoding="utf-8")


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be >= 0")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_session_token(*, now: float | None = None, rng: random.Random | None = None) -> str:
    """Return ``session_<epoch-ms>_<random base36>``; an audit tag, not a secret."""
    timestamp_ms = int((time.time() if now is None else now) * 1000)
    suffix = to_base36((rng or random).getrandbits(52))
    return f"session_{timestamp_ms}_{suffix}"


def ensure_session_token(
    store: SessionTokenStore,
    *,
    key: str = SESSION_TOKEN_KEY,
    now: float | None = None,
    rng: random.Random | None = None,
) -> str:
    """Return the stored token, minting and persisting one on first use."""
    token = store.get(key)
    if token:
        return token
    token = generate_session_token(now=now, rng=rng)
    store.set(key, token)
    return token


__all__ = [
    "InMemoryTokenStore",
    "JsonFileTokenStore",
    "SESSION_TOKEN_KEY",
    "SessionTokenStore",
    "ensure_session_token",
    "generate_session_token",
    "to_base36",
]
