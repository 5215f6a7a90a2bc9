"""
NoteShare Backend — Rating and Download Models
================================================

What:  `ratings` (one per note and user) and `downloads` (append-only log).
Who:   Written by RatingService; aggregated into every note fetch.

ratings:
    UNIQUE (note_id, user_id) is the key the rating upsert conflicts on.
    A plain INSERT against an existing pair fails instead of accumulating.

downloads:
    One row per file fetch. `download_count` on a note is COUNT(*) over this
    table; nothing increments a counter column.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from noteshare.database import Base


class Rating(Base):
    """A principal's star rating (1-5) and optional comment on a note."""

    __tablename__ = "ratings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("note_id", "user_id", name="uq_ratings_note_user"),
        CheckConstraint("stars BETWEEN 1 AND 5", name="ck_ratings_stars_range"),
        Index("idx_ratings_note_created_at", "note_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Rating(note_id={self.note_id}, user_id={self.user_id}, stars={self.stars})>"


class Download(Base):
    """One file download of a note by a principal."""

    __tablename__ = "downloads"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
