"""
NoteShare Backend — Session Route Handlers
============================================

What:  GET /api/auth/me and POST /api/auth/sign-out.
How:   Both work on the request's AuthSession. Sign-in happens against the
       hosted identity provider directly; this API only consumes its tokens.
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from noteshare.auth import AuthSession, Principal, get_auth_session, get_current_principal
from noteshare.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.get(
    "/me",
    response_model=Principal,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="The signed-in user",
)
async def me(principal: Principal = Depends(get_current_principal)) -> Principal:
    return principal


@router.post(
    "/sign-out",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="End the current session",
    description="Revokes the bearer token; later requests carrying it get a 401.",
)
async def sign_out(session: AuthSession = Depends(get_auth_session)) -> Response:
    session.sign_out()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
