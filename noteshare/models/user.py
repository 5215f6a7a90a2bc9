"""
NoteShare Backend — User Profile Model
========================================

What:  `user_profiles` holds the display name shown as a note's author and
       as a rating's author.
How:   Keyed by the identity provider's user id. Rows are created on a
       principal's first write (see `ensure_profile` in services/profile_service.py).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from noteshare.database import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, username='{self.username}')>"
