"""
NoteShare Backend — Taxonomy Service
======================================

What:  Loads the subjects and professors offered by the note form, and adds
       new ones inline ("quick-add").
Who:   Called by the taxonomy routes.

Choice state:
    TaxonomyChoices is a small owned cache scoped to one form: two ordered
    sequences and the selected id for each. It is never persisted and has no
    eviction. A quick-add appends the new entry at the end (no re-sort) and
    selects it. A failed quick-add leaves the choices exactly as they were.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Type, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from noteshare.exceptions import DatabaseError, ValidationError
from noteshare.models.taxonomy import Professor, Subject
from noteshare.schemas.taxonomy import TaxonomyChoicesResponse, TaxonomyEntry

logger = logging.getLogger(__name__)

SUBJECT = "subject"
PROFESSOR = "professor"

_MODELS: Dict[str, Type[Union[Subject, Professor]]] = {
    SUBJECT: Subject,
    PROFESSOR: Professor,
}

# URL segments and form values both map onto the two kinds
_KIND_ALIASES = {
    "subject": SUBJECT,
    "subjects": SUBJECT,
    "professor": PROFESSOR,
    "professors": PROFESSOR,
}


def normalize_kind(kind: str) -> str:
    try:
        return _KIND_ALIASES[kind.lower()]
    except KeyError:
        raise ValidationError(
            message=f"Unknown taxonomy kind '{kind}'. Use 'subjects' or 'professors'.",
            field="kind",
        )


@dataclass
class TaxonomyChoices:
    subjects: List[TaxonomyEntry] = field(default_factory=list)
    professors: List[TaxonomyEntry] = field(default_factory=list)
    selected_subject_id: Optional[UUID] = None
    selected_professor_id: Optional[UUID] = None

    def entries(self, kind: str) -> List[TaxonomyEntry]:
        return self.subjects if kind == SUBJECT else self.professors

    def select(self, kind: str, entry_id: UUID) -> None:
        if kind == SUBJECT:
            self.selected_subject_id = entry_id
        else:
            self.selected_professor_id = entry_id

    def to_response(self) -> TaxonomyChoicesResponse:
        return TaxonomyChoicesResponse(
            subjects=list(self.subjects),
            professors=list(self.professors),
            selected_subject_id=self.selected_subject_id,
            selected_professor_id=self.selected_professor_id,
        )


class TaxonomyService:
    """Load and quick-add operations for subjects and professors."""

    async def _fetch(self, db: AsyncSession, model) -> List[TaxonomyEntry]:
        result = await db.execute(select(model).order_by(model.name))
        return [TaxonomyEntry.model_validate(row) for row in result.scalars().all()]

    async def load(self, db: AsyncSession) -> TaxonomyChoices:
        """
        Fetch all subjects and all professors, each ordered by name.

        Raises:
            DatabaseError: either query failed
        """
        try:
            subjects = await self._fetch(db, Subject)
            professors = await self._fetch(db, Professor)
        except SQLAlchemyError as e:
            logger.error("Failed to load taxonomy: %s", str(e))
            raise DatabaseError(
                message="Could not load subjects and professors. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return TaxonomyChoices(subjects=subjects, professors=professors)

    async def quick_add(
        self,
        db: AsyncSession,
        choices: TaxonomyChoices,
        kind: str,
        name: str,
    ) -> TaxonomyEntry:
        """
        Insert a new subject or professor and make it the active choice.

        Steps:
            1. Reject a blank name (no store call)
            2. Insert {name: trimmed}
            3. Append to the matching sequence and select it

        Raises:
            ValidationError: blank name or unknown kind
            DatabaseError: the insert failed; `choices` is unchanged
        """
        kind = normalize_kind(kind)
        if not name or not name.strip():
            label = "subject" if kind == SUBJECT else "professor"
            raise ValidationError(
                message=f"Please enter a {label} name",
                field="name",
            )

        model = _MODELS[kind]
        try:
            record = model(name=name.strip())
            db.add(record)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Quick-add of %s failed: %s", kind, str(e))
            raise DatabaseError(
                message=f"Could not add the {kind}. Please try again.",
                context={"kind": kind, "error_type": type(e).__name__},
            )

        entry = TaxonomyEntry.model_validate(record)
        choices.entries(kind).append(entry)
        choices.select(kind, entry.id)
        logger.info("Quick-added %s '%s' (%s)", kind, entry.name, entry.id)
        return entry


taxonomy_service = TaxonomyService()
