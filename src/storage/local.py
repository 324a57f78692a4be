"""Filesystem-backed image storage with public URLs."""

from __future__ import annotations

import mimetypes
import random
import re
import time
from pathlib import Path

from domain.errors import UploadFailure
from domain.session import to_base36

_SAFE_SEGMENT = re.compile(r"[^A-Za-z0-9._-]+")


def file_extension(filename: str | None, content_type: str) -> str:
    """Extension for the stored object, from the client filename or its content type."""
    suffix = Path(filename or "").suffix.lstrip(".").lower()
    if suffix:
        return suffix
    guessed = mimetypes.guess_extension(content_type or "")
    return guessed.lstrip(".") if guessed else "img"


def safe_segment(value: str) -> str:
    cleaned = _SAFE_SEGMENT.sub("_", value.strip()).strip("._")
    return cleaned or "unnamed"


class LocalImageStorage:
    """Write uploads under ``root_dir`` and serve them from ``public_base_url``."""

    def __init__(
        self,
        root_dir: Path,
        public_base_url: str = "/uploads",
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.root_dir = root_dir
        self.public_base_url = public_base_url.rstrip("/")
        self._rng = rng or random.Random()

    def _object_name(self, filename: str | None, content_type: str) -> str:
        timestamp_ms = int(time.time() * 1000)
        suffix = to_base36(self._rng.getrandbits(52))
        return f"{timestamp_ms}_{suffix}.{file_extension(filename, content_type)}"

    def upload(
        self,
        data: bytes,
        *,
        filename: str | None,
        content_type: str,
        folder: str | None = None,
    ) -> str:
        """Persist ``data`` and return its public URL."""
        relative = Path(safe_segment(folder)) if folder else Path()
        relative = relative / self._object_name(filename, content_type)
        target = self.root_dir / relative
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise UploadFailure(f"Could not store upload at {target}: {exc}") from exc
        return f"{self.public_base_url}/{relative.as_posix()}"

    def path_for_url(self, url: str) -> Path:
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            raise ValueError(f"URL {url!r} is not served by this storage")
        return self.root_dir / url[len(prefix):]
