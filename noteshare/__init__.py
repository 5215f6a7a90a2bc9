"""
NoteShare Backend — Application Package Initializer
====================================================

What: Marks the `noteshare` directory as a Python package.
Who:  Imported by uvicorn (`noteshare.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way for every workflow:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Workflows)        │  ← taxonomy, submission, listing,
    │                                     │    detail, rating, download
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database · Blob Store · Identity   │  ← external collaborators
    └─────────────────────────────────────┘

    Services never touch HTTP objects and routes never build queries.
"""

__version__ = "1.0.0"
