"""photos table model."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import CreatedAtMixin


class Photo(CreatedAtMixin, Base):
    """Additional profile photo attached to a person row."""

    __tablename__ = "photos"
    __table_args__ = (Index("idx_photos_person_created", "person_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    person_id: Mapped[str] = mapped_column(ForeignKey("people.id"), nullable=False)
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
