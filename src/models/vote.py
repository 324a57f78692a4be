"""votes table model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import CreatedAtMixin


class Vote(CreatedAtMixin, Base):
    """Append-only audit row for one completed comparison."""

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("person1_id <> person2_id", name="ck_votes_distinct_people"),
        CheckConstraint(
            "winner_id = person1_id OR winner_id = person2_id",
            name="ck_votes_winner_participant",
        ),
        Index("idx_votes_session", "session_id"),
        Index("idx_votes_winner", "winner_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    person1_id: Mapped[str] = mapped_column(ForeignKey("people.id"), nullable=False)
    person2_id: Mapped[str] = mapped_column(ForeignKey("people.id"), nullable=False)
    winner_id: Mapped[str] = mapped_column(ForeignKey("people.id"), nullable=False)
    rating_change: Mapped[int] = mapped_column(Integer, nullable=False)
