"""ORM models."""

from models.base import Base
from models.person import MODERATION_STATUSES, Person
from models.photo import Photo
from models.vote import Vote

__all__ = [
    "Base",
    "MODERATION_STATUSES",
    "Person",
    "Photo",
    "Vote",
]
