"""
NoteShare Backend — Note Request/Response Schemas
===================================================

What:  Pydantic models defining the API contract for notes.
How:   FastAPI uses these models to serialize responses and generate the
       OpenAPI docs. NoteCreate carries the submission form after FastAPI
       has parsed the multipart fields.

Schemas are separate from SQLAlchemy models: a NoteResponse carries joined
names and store-computed aggregates that are not columns of `notes`.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    A note submission.

    `year` is kept as received; the workflow parses it when building the row.
    `content` is only read in text mode.
    """
    title: str = Field(min_length=1, max_length=255)
    subject_id: uuid.UUID
    professor_id: uuid.UUID
    year: Union[int, str] = Field(description="Academic year, expected 2000-2100")
    mode: Literal["file", "text"] = "file"
    content: Optional[str] = None


class UploadedFile(BaseModel):
    """The file part of a submission in file mode."""
    filename: str
    data: bytes


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    A note with its joined names and store-computed aggregates.

    Used for listing items, the detail view, and the 201 body of a submission.
    """
    id: uuid.UUID = Field(description="Unique note identifier")
    title: str
    subject_id: uuid.UUID
    subject_name: Optional[str] = None
    professor_id: uuid.UUID
    professor_name: Optional[str] = None
    year: int
    user_id: uuid.UUID = Field(description="Owning principal")
    author_name: Optional[str] = Field(default=None, description="Owner's display name")
    file_path: Optional[str] = Field(default=None, description="Blob key, null for text notes")
    file_type: Optional[str] = Field(default=None, description="pdf, image or text")
    content: Optional[str] = Field(default=None, description="Typed content, null for uploads")
    created_at: datetime
    download_count: int = 0
    average_rating: float = 0.0

    model_config = {"from_attributes": True}

    @property
    def has_file(self) -> bool:
        return self.file_path is not None


class NoteListResponse(BaseModel):
    """All notes matching the filter, newest first. No pagination."""
    notes: List[NoteResponse]
    total_count: int = Field(description="Number of notes returned")
