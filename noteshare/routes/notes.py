"""
NoteShare Backend — Notes Route Handlers
==========================================

What:  GET /api/notes (listing + filter), POST /api/notes (submission) and
       DELETE /api/notes/{id}.
How:   Extracts form fields and query parameters, delegates to NoteService.
Who:   Called by the frontend listing page and the note form.

Caching Strategy:
    - POST/DELETE: never cached (mutations)
    - GET /api/notes: no-cache; aggregates change with every rating and download
"""

import logging
import uuid
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from noteshare.auth import Principal, get_current_principal
from noteshare.database import get_db_session
from noteshare.schemas.common import ErrorResponse
from noteshare.schemas.note import NoteCreate, NoteListResponse, NoteResponse, UploadedFile
from noteshare.services.note_service import filter_notes, note_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api", tags=["Notes"])


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        200: {"description": "All matching notes, newest first", "model": NoteListResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List notes",
    description=(
        "Returns every note with subject, professor and author names, download "
        "count and average rating. `search` matches title, subject or professor "
        "(case-insensitive); `subject_id` narrows to one subject. No pagination."
    ),
)
async def list_notes(
    response: Response,
    search: str = Query(default="", description="Case-insensitive substring"),
    subject_id: str = Query(default="", description="Only notes for this subject"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> NoteListResponse:
    notes = await note_service.list_notes(db)
    notes = filter_notes(notes, search, subject_id)

    response.headers["X-Total-Count"] = str(len(notes))
    response.headers["Cache-Control"] = "no-cache"
    return NoteListResponse(notes=notes, total_count=len(notes))


@router.post(
    "/notes",
    status_code=status.HTTP_201_CREATED,
    response_model=NoteResponse,
    responses={
        201: {"description": "Note created", "model": NoteResponse},
        400: {"description": "Missing file or content, or file too large", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "Upload or insert failed", "model": ErrorResponse},
    },
    summary="Submit a note",
    description=(
        "Multipart form. In `file` mode a PDF or image is uploaded to storage; "
        "in `text` mode the typed `content` is stored on the note."
    ),
)
async def create_note(
    title: str = Form(..., min_length=1, max_length=255),
    subject_id: uuid.UUID = Form(...),
    professor_id: uuid.UUID = Form(...),
    year: str = Form(..., description="Academic year, 2000-2100"),
    mode: Literal["file", "text"] = Form(default="file"),
    content: Optional[str] = Form(default=None),
    file: Optional[UploadFile] = File(default=None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    upload = None
    # Browsers send an empty, unnamed part when no file was chosen
    if file is not None and file.filename:
        try:
            data = await file.read()
        finally:
            await file.close()
        upload = UploadedFile(filename=file.filename, data=data)

    note_in = NoteCreate(
        title=title,
        subject_id=subject_id,
        professor_id=professor_id,
        year=year,
        mode=mode,
        content=content,
    )
    return await note_service.submit_note(db, principal, note_in, upload)


@router.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Delete failed", "model": ErrorResponse},
    },
    summary="Delete one of your notes",
)
async def delete_note(
    note_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    note = await note_service.get_note(db, note_id)
    await note_service.delete_note(db, principal, note)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
