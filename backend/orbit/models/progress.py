"""Progress ORM — one row per (subject, lesson), replaced wholesale on sync.

Invariants:
    - (subject_id, lesson_id) is unique for the lifetime of the row; it is the
      conflict target of every upsert
    - score is NULL or an integer in [0, 100] (CHECK constraint)
    - updated_at is always written by the server, never taken from a client

Design Decisions:
    - Surrogate UUID id kept alongside the composite key: stable handle for
      privileged deletes outside the core
    - ON DELETE CASCADE from users and lessons: removing either removes its progress
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Integer, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from orbit.db.base import Base

PROGRESS_KEY_COLUMNS = ("subject_id", "lesson_id")


class Progress(Base):
    """Progress entity — completion state of one lesson for one principal."""
    __tablename__ = "progress"
    __table_args__ = (
        UniqueConstraint(*PROGRESS_KEY_COLUMNS, name="uq_progress_subject_lesson"),
        CheckConstraint(
            "score IS NULL OR (score >= 0 AND score <= 100)",
            name="score_range",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    subject_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
