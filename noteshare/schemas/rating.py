"""
NoteShare Backend — Rating and Detail Schemas
===============================================

What:  Rating request/response models and the note detail payload.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from noteshare.schemas.note import NoteResponse


class RatingRequest(BaseModel):
    """
    Body of PUT /api/notes/{id}/rating.

    Star values outside 1-5 are rejected by RatingService with a
    validation_error rather than by pydantic.
    """
    stars: int = Field(description="Whole stars, 1 to 5")
    comment: Optional[str] = Field(default="", max_length=2000)


class RatingResponse(BaseModel):
    """A rating in a note's history, with the rater's display name."""
    id: uuid.UUID
    note_id: uuid.UUID
    user_id: uuid.UUID
    username: Optional[str] = None
    stars: int
    comment: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OwnRating(BaseModel):
    """The principal's existing rating, used to pre-fill the rating form."""
    stars: int
    comment: str = ""


class NoteDetailResponse(BaseModel):
    """
    Everything the detail view shows.

    Returned by GET /api/notes/{id} and, after a rating is stored, by
    PUT /api/notes/{id}/rating (a full reload, not a local patch).
    """
    note: NoteResponse
    ratings: List[RatingResponse] = Field(description="Newest first")
    my_rating: Optional[OwnRating] = Field(
        default=None,
        description="The current principal's rating, if they have rated this note",
    )
