"""people table model."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import TimestampMixin

MODERATION_STATUSES = ("pending", "approved", "rejected")


def new_person_id() -> str:
    return uuid4().hex


class Person(TimestampMixin, Base):
    """One submitted photo subject and its running Elo record."""

    __tablename__ = "people"
    __table_args__ = (
        CheckConstraint("wins >= 0", name="ck_people_wins"),
        CheckConstraint("losses >= 0", name="ck_people_losses"),
        CheckConstraint("total_votes >= 0", name="ck_people_total_votes"),
        Index("idx_people_approved_rating", "is_approved", "rating"),
        Index("idx_people_name", "name"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_person_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    photo_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    moderation_status: Mapped[str] = mapped_column(
        Enum(*MODERATION_STATUSES, name="moderation_status", native_enum=False),
        nullable=False,
        default="pending",
    )
