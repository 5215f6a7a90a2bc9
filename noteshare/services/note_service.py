"""
NoteShare Backend — Note Service (Submission, Listing, Delete)
================================================================

What:  Commits new notes, lists them with joined names, filters them, and
       deletes them on behalf of their owner.
How:   Composes the BlobStore and database operations on the request's session.
Who:   Called by the notes routes and by RatingService (single-note fetch).

Submission Flow (POST /api/notes):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate │───▶│ Upload blob │───▶│ Insert note  │───▶│ Reload   │
    │ (mode)   │    │ (file mode) │    │ row          │    │ joined   │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    Upload fails  → FileStorageError, no row written
    Insert fails  → DatabaseError. The uploaded blob is kept (orphaned); the
                    key is logged at WARNING for reconciliation.

Aggregates:
    download_count and average_rating are correlated subqueries over
    `downloads` and `ratings`, evaluated on every fetch.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from noteshare.auth import Principal
from noteshare.config import settings
from noteshare.exceptions import (
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from noteshare.models.note import FILE_TYPE_IMAGE, FILE_TYPE_PDF, FILE_TYPE_TEXT, Note
from noteshare.models.rating import Download, Rating
from noteshare.models.taxonomy import Professor, Subject
from noteshare.models.user import UserProfile
from noteshare.schemas.note import NoteCreate, NoteResponse, UploadedFile
from noteshare.services.blob_store import blob_store, build_storage_key
from noteshare.services.profile_service import ensure_profile

logger = logging.getLogger(__name__)


def file_type_for_extension(extension: str) -> str:
    """'pdf' only for an extension of exactly 'pdf'; everything else is an image."""
    return FILE_TYPE_PDF if extension == "pdf" else FILE_TYPE_IMAGE


def filter_notes(
    notes: Iterable[NoteResponse],
    search_term: Optional[str] = "",
    subject_id: Optional[str] = "",
) -> List[NoteResponse]:
    """
    Subsequence of `notes` matching both predicates, in the original order.

    - search_term: case-insensitive substring of the title, the subject name
      or the professor name. Empty matches everything.
    - subject_id: empty, or the note's subject id in any UUID spelling
      (case, braces, hyphens). A string that is not a UUID matches nothing.

    Pure: the input is never modified and nothing is fetched.
    """
    term = (search_term or "").lower()
    wanted_subject: Optional[UUID] = None
    if subject_id:
        try:
            wanted_subject = UUID(str(subject_id))
        except ValueError:
            return []

    def matches(note: NoteResponse) -> bool:
        if term:
            haystacks = (note.title, note.subject_name, note.professor_name)
            if not any(term in (h or "").lower() for h in haystacks):
                return False
        if wanted_subject is not None and UUID(str(note.subject_id)) != wanted_subject:
            return False
        return True

    return [note for note in notes if matches(note)]


def _note_query():
    download_count = (
        select(func.count(Download.id))
        .where(Download.note_id == Note.id)
        .correlate(Note)
        .scalar_subquery()
    )
    average_rating = (
        select(func.avg(Rating.stars))
        .where(Rating.note_id == Note.id)
        .correlate(Note)
        .scalar_subquery()
    )
    return (
        select(
            Note,
            Subject.name.label("subject_name"),
            Professor.name.label("professor_name"),
            UserProfile.username.label("author_name"),
            download_count.label("download_count"),
            average_rating.label("average_rating"),
        )
        .outerjoin(Subject, Subject.id == Note.subject_id)
        .outerjoin(Professor, Professor.id == Note.professor_id)
        .outerjoin(UserProfile, UserProfile.id == Note.user_id)
    )


def _to_response(row) -> NoteResponse:
    note, subject_name, professor_name, author_name, download_count, average_rating = row
    return NoteResponse(
        id=note.id,
        title=note.title,
        subject_id=note.subject_id,
        subject_name=subject_name,
        professor_id=note.professor_id,
        professor_name=professor_name,
        year=note.year,
        user_id=note.user_id,
        author_name=author_name,
        file_path=note.file_path,
        file_type=note.file_type,
        content=note.content,
        created_at=note.created_at,
        download_count=download_count or 0,
        average_rating=round(float(average_rating), 2) if average_rating is not None else 0.0,
    )


class NoteService:
    """
    Business logic for note submission, listing and deletion.

    Error Handling Strategy:
        Validation and authorization are checked before any remote call.
        Store failures become DatabaseError with a generic per-action
        message; blob failures arrive as FileStorageError from the BlobStore.
    """

    async def submit_note(
        self,
        db: AsyncSession,
        principal: Principal,
        data: NoteCreate,
        upload: Optional[UploadedFile] = None,
    ) -> NoteResponse:
        """
        Validate and commit a new note in file or text mode.

        Validation (first failure wins, nothing is written):
            1. file mode without a file → "file required"
            2. text mode with blank content → "content required"

        Returns:
            The created note, reloaded with joined names.

        Raises:
            ValidationError, FileStorageError, DatabaseError
        """
        if data.mode == "file" and upload is None:
            raise ValidationError(message="Please choose a file to upload", field="file")
        if data.mode == "text" and not (data.content or "").strip():
            raise ValidationError(message="Please enter the note content", field="content")

        file_path: Optional[str] = None
        file_type = FILE_TYPE_TEXT
        content = data.content

        if data.mode == "file":
            blob_store.validate_size(len(upload.data))
            file_path, extension = build_storage_key(principal.id, upload.filename)
            await blob_store.upload(settings.notes_bucket, file_path, upload.data)
            file_type = file_type_for_extension(extension)
            content = None

        try:
            year = int(data.year)
            await ensure_profile(db, principal)
            note = Note(
                title=data.title,
                subject_id=data.subject_id,
                professor_id=data.professor_id,
                year=year,
                user_id=principal.id,
                file_path=file_path,
                file_type=file_type,
                content=content,
            )
            db.add(note)
            await db.flush()
        except (ValueError, TypeError, SQLAlchemyError) as e:
            if file_path is not None:
                logger.warning(
                    "Note insert failed after upload; blob %s/%s is orphaned",
                    settings.notes_bucket,
                    file_path,
                )
            logger.error("Failed to insert note: %s", str(e))
            raise DatabaseError(
                message="Could not add the note. Please try again.",
                context={"error_type": type(e).__name__, "file_path": file_path},
            )

        logger.info(
            "Note %s created by %s (file_type=%s)", note.id, principal.id, file_type
        )
        return await self.get_note(db, note.id)

    async def list_notes(self, db: AsyncSession) -> List[NoteResponse]:
        """
        All notes with subject, professor and author names, newest first.

        No pagination: every row is returned in one call.
        """
        try:
            result = await db.execute(_note_query().order_by(Note.created_at.desc()))
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not load notes. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [_to_response(row) for row in rows]

    async def get_note(self, db: AsyncSession, note_id: UUID) -> NoteResponse:
        """
        One note with joined names and aggregates.

        Raises:
            NotFoundError: no note with that id
            DatabaseError: the query failed
        """
        try:
            result = await db.execute(_note_query().where(Note.id == note_id))
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not load the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        if row is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return _to_response(row)

    async def delete_note(
        self,
        db: AsyncSession,
        principal: Principal,
        note: NoteResponse,
        listing: Optional[List[NoteResponse]] = None,
    ) -> None:
        """
        Delete a note owned by the principal.

        The ownership check happens before any store call. On success the
        note is also removed from `listing` in place, when one is given.
        The note's blob is left in storage.

        Raises:
            AuthorizationError: the principal does not own the note
            DatabaseError: the delete failed
        """
        if note.user_id != principal.id:
            raise AuthorizationError(
                message="You can only delete your own notes",
                context={"note_id": str(note.id), "principal_id": str(principal.id)},
            )

        try:
            await db.execute(delete(Note).where(Note.id == note.id))
        except SQLAlchemyError as e:
            logger.error("Failed to delete note %s: %s", note.id, str(e))
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note.id)},
            )

        if listing is not None:
            listing[:] = [item for item in listing if item.id != note.id]
        logger.info("Note %s deleted by owner %s", note.id, principal.id)


note_service = NoteService()
