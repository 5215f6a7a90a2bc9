"""
NoteShare Backend — Note SQLAlchemy Model
===========================================

What:  ORM model representing the `notes` table.
Who:   Written by the submission workflow, read by listing and detail,
       deleted by its owner.

Table Design:
    - UUID primary key, generated client-side (portable across PostgreSQL/SQLite)
    - subject_id / professor_id: many-to-one into the taxonomy tables
    - user_id: owning principal's id. There is no local users table; display
      names come from `user_profiles`, joined by id.
    - file_path / content: exactly one is set, depending on submission mode.
      The CHECK constraint below rejects rows that break this.
    - file_type: "pdf" | "image" for uploads, "text" for typed notes
    - download_count / average_rating are not columns: NoteService computes
      them from `downloads` and `ratings` on every fetch.

    Index on created_at backs the newest-first listing.
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
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from noteshare.database import Base


FILE_TYPE_PDF = "pdf"
FILE_TYPE_IMAGE = "image"
FILE_TYPE_TEXT = "text"


class Note(Base):
    """
    A shared academic note: an uploaded file or a block of typed text.

    Lifecycle:
        1. Inserted once by the submission workflow
        2. Never updated in place
        3. Deleted only by its owner (ratings and downloads cascade)
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("subjects.id"),
        nullable=False,
    )
    professor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("professors.id"),
        nullable=False,
    )

    # Expected 2000-2100; the form enforces it, the table does not.
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Blob store key: {user_id}/{token}.{ext}
    file_path: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    file_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint(
            "(file_path IS NULL) <> (content IS NULL)",
            name="ck_notes_file_xor_content",
        ),
        Index("idx_notes_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, title='{self.title}', "
            f"file_type='{self.file_type}')>"
        )
