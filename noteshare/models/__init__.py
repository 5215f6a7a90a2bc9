# Models package init
"""
NoteShare Backend — ORM Models
================================

Importing this package registers every table with `Base.metadata`, which is
what Alembic's autogenerate and the test suite's `create_all` read.
"""

from noteshare.models.note import Note
from noteshare.models.rating import Download, Rating
from noteshare.models.taxonomy import Professor, Subject
from noteshare.models.user import UserProfile

__all__ = ["Download", "Note", "Professor", "Rating", "Subject", "UserProfile"]
