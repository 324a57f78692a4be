"""Error taxonomy surfaced to callers of the voting core."""

from __future__ import annotations


class FacemashError(Exception):
    """Base class for errors raised by the domain layer."""


class InsufficientPoolError(FacemashError):
    """Fewer than two eligible people are available for a matchup."""

    def __init__(self, pool_size: int) -> None:
        super().__init__(f"not enough entities: need at least 2 approved people, found {pool_size}")
        self.pool_size = pool_size


class InvalidVoteError(FacemashError, ValueError):
    """The submitted vote does not describe a valid comparison."""


class PersonNotFoundError(FacemashError, LookupError):
    def __init__(self, person_id: str, *, detail: str = "not found") -> None:
        super().__init__(f"person_id={person_id} {detail}")
        self.person_id = person_id


class PersistenceFailure(FacemashError):
    """A vote could not be stored; nothing from the attempt was committed."""


class InvalidUploadError(FacemashError, ValueError):
    """The uploaded file was rejected before reaching storage."""


class UploadFailure(FacemashError):
    """Image storage or the follow-up metadata insert failed."""


__all__ = [
    "FacemashError",
    "InsufficientPoolError",
    "InvalidUploadError",
    "InvalidVoteError",
    "PersistenceFailure",
    "PersonNotFoundError",
    "UploadFailure",
]
