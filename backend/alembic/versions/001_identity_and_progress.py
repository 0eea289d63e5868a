"""Initial schema — users, lessons, progress.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="STUDENT"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "lessons",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_lessons"),
        sa.UniqueConstraint("slug", name="uq_lessons_slug"),
    )

    op.create_table(
        "progress",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "subject_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_progress_subject_id_users"),
            nullable=False,
        ),
        sa.Column(
            "lesson_id", UUID(as_uuid=True),
            sa.ForeignKey("lessons.id", ondelete="CASCADE", name="fk_progress_lesson_id_lessons"),
            nullable=False,
        ),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("score", sa.Integer, nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_progress"),
        sa.UniqueConstraint("subject_id", "lesson_id", name="uq_progress_subject_lesson"),
        sa.CheckConstraint(
            "score IS NULL OR (score >= 0 AND score <= 100)",
            name="ck_progress_score_range",
        ),
    )


def downgrade() -> None:
    op.drop_table("progress")
    op.drop_table("lessons")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
