"""
NoteShare Backend — Note Detail Route Handlers
================================================

What:  GET /api/notes/{id} (detail view), GET /api/notes/{id}/download and
       PUT /api/notes/{id}/rating.
Who:   Called by the frontend NoteDetail page.

Detail view states:
    Loaded    → 200
    NotFound  → 404 (unknown id)
    LoadError → 500 (store failure)
"""

import logging
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from noteshare.auth import Principal, get_current_principal
from noteshare.database import get_db_session
from noteshare.schemas.common import ErrorResponse
from noteshare.schemas.rating import NoteDetailResponse, RatingRequest
from noteshare.services.note_service import note_service
from noteshare.services.rating_service import rating_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Note Detail"])


@router.get(
    "/notes/{note_id}",
    response_model=NoteDetailResponse,
    responses={
        200: {"description": "Note with ratings", "model": NoteDetailResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a note with its ratings",
    description=(
        "Returns the note with joined names and aggregates, every rating "
        "(newest first) and the caller's own rating, if any."
    ),
)
async def get_note_detail(
    note_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> NoteDetailResponse:
    return await rating_service.load_detail(db, note_id, principal)


@router.get(
    "/notes/{note_id}/download",
    responses={
        200: {"description": "The note's file as an attachment"},
        400: {"description": "The note has no file", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Download failed", "model": ErrorResponse},
    },
    summary="Download a note's file",
)
async def download_note(
    note_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    note = await note_service.get_note(db, note_id)
    downloaded = await rating_service.download(db, principal, note)

    # RFC 5987: titles may contain non-ASCII characters
    disposition = f"attachment; filename*=UTF-8''{quote(downloaded.filename)}"
    return Response(
        content=downloaded.data,
        media_type=downloaded.media_type,
        headers={"Content-Disposition": disposition, "Cache-Control": "no-store"},
    )


@router.put(
    "/notes/{note_id}/rating",
    response_model=NoteDetailResponse,
    responses={
        200: {"description": "Reloaded note with ratings", "model": NoteDetailResponse},
        400: {"description": "Stars outside 1-5", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Rating could not be saved", "model": ErrorResponse},
    },
    summary="Rate a note",
    description="Creates or replaces your rating of the note and returns the fresh detail view.",
)
async def rate_note(
    note_id: UUID,
    body: RatingRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> NoteDetailResponse:
    return await rating_service.rate(db, principal, note_id, body.stars, body.comment)
