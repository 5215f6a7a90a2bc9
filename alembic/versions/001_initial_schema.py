"""Initial schema: taxonomy, profiles, notes, ratings, downloads

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Creates all six tables. Parents first: subjects, professors and
user_profiles, then notes, then ratings and downloads (both cascade on note
delete).

Rollback: downgrade() drops everything in reverse order.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    # ── Taxonomy ──────────────────────────────────────────────────────────
    for table in ("subjects", "professors"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("name", sa.String(200), nullable=False),
            _created_at(),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
        )
        op.create_index(f"idx_{table}_name", table, ["name"])

    # ── Profiles ──────────────────────────────────────────────────────────
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Identity provider user id"),
        sa.Column("username", sa.String(100), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_user_profiles"),
    )

    # ── Notes ─────────────────────────────────────────────────────────────
    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subject_id", sa.Uuid(), nullable=False),
        sa.Column("professor_id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("file_path", sa.String(512), nullable=True, comment="Blob key in the notes bucket"),
        sa.Column("file_type", sa.String(20), nullable=True, comment="pdf, image or text"),
        sa.Column("content", sa.Text(), nullable=True, comment="Typed note content"),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_notes"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], name="fk_notes_subject"),
        sa.ForeignKeyConstraint(["professor_id"], ["professors.id"], name="fk_notes_professor"),
        sa.CheckConstraint(
            "(file_path IS NULL) <> (content IS NULL)",
            name="ck_notes_file_xor_content",
        ),
    )
    op.create_index("idx_notes_created_at", "notes", ["created_at"])
    op.create_index("ix_notes_user_id", "notes", ["user_id"])

    # ── Ratings ───────────────────────────────────────────────────────────
    op.create_table(
        "ratings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("note_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("stars", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_ratings"),
        sa.ForeignKeyConstraint(
            ["note_id"], ["notes.id"], name="fk_ratings_note", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("note_id", "user_id", name="uq_ratings_note_user"),
        sa.CheckConstraint("stars BETWEEN 1 AND 5", name="ck_ratings_stars_range"),
    )
    op.create_index("idx_ratings_note_created_at", "ratings", ["note_id", "created_at"])

    # ── Downloads ─────────────────────────────────────────────────────────
    op.create_table(
        "downloads",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("note_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_downloads"),
        sa.ForeignKeyConstraint(
            ["note_id"], ["notes.id"], name="fk_downloads_note", ondelete="CASCADE"
        ),
    )
    op.create_index("ix_downloads_note_id", "downloads", ["note_id"])


def downgrade() -> None:
    op.drop_index("ix_downloads_note_id", table_name="downloads")
    op.drop_table("downloads")
    op.drop_index("idx_ratings_note_created_at", table_name="ratings")
    op.drop_table("ratings")
    op.drop_index("ix_notes_user_id", table_name="notes")
    op.drop_index("idx_notes_created_at", table_name="notes")
    op.drop_table("notes")
    op.drop_table("user_profiles")
    for table in ("professors", "subjects"):
        op.drop_index(f"idx_{table}_name", table_name=table)
        op.drop_table(table)
