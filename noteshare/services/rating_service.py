"""
NoteShare Backend — Rating Service (Detail, Rate, Download)
=============================================================

What:  Everything the note detail view does: load the note with its rating
       history, store the principal's rating, and fetch the note's file.
How:   Ratings are upserted on (note_id, user_id). Downloads append a row to
       the `downloads` log after the blob has been read.
Who:   Called by the note detail routes.

Rate Flow (PUT /api/notes/{id}/rating):
    ┌─────────────┐    ┌────────────┐    ┌──────────────┐    ┌──────────────┐
    │ Check stars │───▶│ Note must  │───▶│ Upsert       │───▶│ Reload the   │
    │ 1..5        │    │ exist      │    │ (note, user) │    │ detail view  │
    └─────────────┘    └────────────┘    └──────────────┘    └──────────────┘

    The reload is a full fetch: aggregates and history come back from the
    store, never patched locally.
"""

import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from noteshare.auth import Principal
from noteshare.config import settings
from noteshare.database import dialect_insert
from noteshare.exceptions import DatabaseError, ValidationError
from noteshare.models.rating import Download, Rating
from noteshare.models.user import UserProfile
from noteshare.schemas.note import NoteResponse
from noteshare.schemas.rating import NoteDetailResponse, OwnRating, RatingResponse
from noteshare.services.blob_store import blob_store, file_extension
from noteshare.services.note_service import note_service
from noteshare.services.profile_service import ensure_profile

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


@dataclass
class DownloadedFile:
    """A fetched blob, ready to be sent as an attachment."""
    filename: str
    media_type: str
    data: bytes


def _validate_stars(stars) -> int:
    # bool is an int subclass; True must not count as one star
    if isinstance(stars, bool) or not isinstance(stars, int):
        raise ValidationError(message="Please choose a rating between 1 and 5 stars", field="stars")
    if not MIN_STARS <= stars <= MAX_STARS:
        raise ValidationError(
            message="Please choose a rating between 1 and 5 stars",
            field="stars",
            context={"stars": stars},
        )
    return stars


class RatingService:
    """Detail view loading, rating upserts and file downloads."""

    async def load_detail(
        self,
        db: AsyncSession,
        note_id: UUID,
        principal: Optional[Principal] = None,
    ) -> NoteDetailResponse:
        """
        Load a note, its ratings (newest first) and the principal's own rating.

        Raises:
            NotFoundError: the note does not exist
            DatabaseError: a query failed
        """
        note = await note_service.get_note(db, note_id)

        # Plain columns, not entities: a rating replaced by an upsert earlier
        # in the same session must not come back from the identity map.
        query = (
            select(
                Rating.id,
                Rating.note_id,
                Rating.user_id,
                UserProfile.username,
                Rating.stars,
                Rating.comment,
                Rating.created_at,
            )
            .outerjoin(UserProfile, UserProfile.id == Rating.user_id)
            .where(Rating.note_id == note_id)
            .order_by(Rating.created_at.desc())
        )
        try:
            result = await db.execute(query)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.error("Failed to load ratings for note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not load ratings. Please try again.",
                context={"note_id": str(note_id), "error_type": type(e).__name__},
            )

        ratings = [RatingResponse.model_validate(dict(row)) for row in rows]

        my_rating = None
        if principal is not None:
            own = next((r for r in ratings if r.user_id == principal.id), None)
            if own is not None:
                my_rating = OwnRating(stars=own.stars, comment=own.comment or "")

        return NoteDetailResponse(note=note, ratings=ratings, my_rating=my_rating)

    async def rate(
        self,
        db: AsyncSession,
        principal: Principal,
        note_id: UUID,
        stars: int,
        comment: Optional[str] = "",
    ) -> NoteDetailResponse:
        """
        Create or replace the principal's rating of a note, then reload.

        At most one rating exists per (note, principal); a second call
        replaces stars, comment and timestamp.

        Raises:
            ValidationError: stars outside 1-5 (no store call)
            NotFoundError: the note does not exist (no write is attempted)
            DatabaseError: the upsert failed
        """
        stars = _validate_stars(stars)
        # NotFoundError before any write
        await note_service.get_note(db, note_id)

        try:
            await ensure_profile(db, principal)
            stmt = dialect_insert(db, Rating).values(
                id=uuid4(),
                note_id=note_id,
                user_id=principal.id,
                stars=stars,
                comment=comment or "",
                created_at=datetime.now(timezone.utc),
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["note_id", "user_id"],
                set_={
                    "stars": stmt.excluded.stars,
                    "comment": stmt.excluded.comment,
                    "created_at": stmt.excluded.created_at,
                },
            )
            await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Rating upsert failed for note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not save your rating. Please try again.",
                context={"note_id": str(note_id), "error_type": type(e).__name__},
            )

        logger.info("Principal %s rated note %s with %d stars", principal.id, note_id, stars)
        return await self.load_detail(db, note_id, principal)

    async def download(
        self,
        db: AsyncSession,
        principal: Principal,
        note: NoteResponse,
    ) -> DownloadedFile:
        """
        Fetch a note's file and record the download.

        The attachment is named after the note title plus the stored
        extension. The download row is written only after the blob has been
        read, so a failed fetch is not counted.

        Raises:
            ValidationError: the note has no file (no store call)
            FileStorageError: the blob could not be read
            DatabaseError: recording the download failed
        """
        if not note.has_file:
            raise ValidationError(
                message="This note has no file to download",
                field="file_path",
                context={"note_id": str(note.id)},
            )

        data = await blob_store.download(settings.notes_bucket, note.file_path)

        try:
            db.add(Download(note_id=note.id, user_id=principal.id))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to record download of note %s: %s", note.id, str(e))
            raise DatabaseError(
                message="Could not download the file. Please try again.",
                context={"note_id": str(note.id), "error_type": type(e).__name__},
            )

        extension = file_extension(note.file_path)
        media_type = mimetypes.guess_type(note.file_path)[0] or "application/octet-stream"
        logger.info("Principal %s downloaded note %s", principal.id, note.id)
        return DownloadedFile(
            filename=f"{note.title}.{extension}",
            media_type=media_type,
            data=data,
        )


rating_service = RatingService()
