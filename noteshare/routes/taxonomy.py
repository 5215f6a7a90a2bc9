"""
NoteShare Backend — Taxonomy Route Handlers
=============================================

What:  GET /api/taxonomy (form choices) and POST /api/taxonomy/{kind}
       (quick-add a subject or professor).
Who:   Called by the note submission form.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from noteshare.auth import Principal, get_current_principal
from noteshare.database import get_db_session
from noteshare.schemas.common import ErrorResponse
from noteshare.schemas.taxonomy import QuickAddRequest, TaxonomyChoicesResponse
from noteshare.services.taxonomy_service import taxonomy_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Taxonomy"])


@router.get(
    "/taxonomy",
    response_model=TaxonomyChoicesResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Subjects and professors for the note form",
)
async def get_choices(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> TaxonomyChoicesResponse:
    choices = await taxonomy_service.load(db)
    return choices.to_response()


@router.post(
    "/taxonomy/{kind}",
    status_code=status.HTTP_201_CREATED,
    response_model=TaxonomyChoicesResponse,
    responses={
        400: {"description": "Blank name", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "Insert failed", "model": ErrorResponse},
    },
    summary="Quick-add a subject or professor",
    description=(
        "Inserts a new subject or professor and returns the form choices with "
        "the new entry appended last and selected."
    ),
)
async def quick_add(
    kind: str,
    body: QuickAddRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> TaxonomyChoicesResponse:
    choices = await taxonomy_service.load(db)
    await taxonomy_service.quick_add(db, choices, kind, body.name)
    return choices.to_response()
