"""
NoteShare Backend — Taxonomy Models
=====================================

What:  `subjects` and `professors` tables used to tag notes.
Who:   Read and extended by TaxonomyService; joined into note listings.

Both tables have the same shape and lifecycle: rows are created by the
inline quick-add on the note form and are never renamed or deleted here.
Name uniqueness is not enforced.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from noteshare.database import Base


class _TaxonomyColumns:
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name='{self.name}')>"


class Subject(_TaxonomyColumns, Base):
    """A course subject (e.g. "Mathematical Analysis I")."""

    __tablename__ = "subjects"
    __table_args__ = (Index("idx_subjects_name", "name"),)


class Professor(_TaxonomyColumns, Base):
    """A lecturer a note can be attributed to."""

    __tablename__ = "professors"
    __table_args__ = (Index("idx_professors_name", "name"),)
