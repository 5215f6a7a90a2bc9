"""
NoteShare Backend — Taxonomy Schemas
======================================

What:  Subject/professor entries, the quick-add request body, and the
       choice state of the note form.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field


class TaxonomyEntry(BaseModel):
    """A subject or a professor."""
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class QuickAddRequest(BaseModel):
    """
    Body of POST /api/taxonomy/{kind}.

    Blank names are rejected by TaxonomyService (not here) so the rejection
    is reported as the same validation_error the form shows inline.
    """
    name: str = Field(default="", max_length=200, description="Name of the new entry")


class TaxonomyChoicesResponse(BaseModel):
    """
    The two ordered sequences the note form offers, plus the active choices.

    After a quick-add the new entry is the LAST element of its sequence and
    its id is the selected value.
    """
    subjects: List[TaxonomyEntry] = Field(description="Subjects ordered by name, quick-adds last")
    professors: List[TaxonomyEntry] = Field(description="Professors ordered by name, quick-adds last")
    selected_subject_id: Optional[uuid.UUID] = None
    selected_professor_id: Optional[uuid.UUID] = None
