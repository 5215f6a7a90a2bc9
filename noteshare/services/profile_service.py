"""
NoteShare Backend — Profile Service
=====================================

What:  Makes sure a principal has a `user_profiles` row before their first
       write, so listings and rating histories can show a display name.
How:   INSERT ... ON CONFLICT (id) DO NOTHING. An existing username is never
       overwritten.

Callers wrap store errors into their own per-action DatabaseError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from noteshare.auth import Principal
from noteshare.database import dialect_insert
from noteshare.models.user import UserProfile

logger = logging.getLogger(__name__)


async def ensure_profile(db: AsyncSession, principal: Principal) -> None:
    stmt = (
        dialect_insert(db, UserProfile)
        .values(id=principal.id, username=principal.display_name)
        .on_conflict_do_nothing(index_elements=["id"])
    )
    await db.execute(stmt)
    logger.debug("Profile ensured for principal %s", principal.id)
