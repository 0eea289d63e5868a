"""Stored Records — immutable snapshots handed across the core/shell boundary.

Invariants:
    - Records are plain frozen dataclasses: no ORM objects escape the shell
    - ProgressRecord.score is None or within [MIN_SCORE, MAX_SCORE]
    - PrincipalRecord never exposes password_hash through public_view()

Design Decisions:
    - Snapshots over live ORM instances: services never hold references across
      invocations, each request rebuilds its working set from storage
"""

from dataclasses import dataclass
from datetime import datetime

from orbit.core.domain_types import (
    LessonId, ProgressId, Role, SubjectId, MIN_SCORE, MAX_SCORE,
)


@dataclass(frozen=True)
class PrincipalRecord:
    id: SubjectId
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: datetime

    def public_view(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class LessonRecord:
    id: LessonId
    title: str
    slug: str
    order: int


@dataclass(frozen=True)
class ProgressRecord:
    id: ProgressId
    subject_id: SubjectId
    lesson_id: LessonId
    completed: bool
    score: int | None
    updated_at: datetime

    def __post_init__(self):
        if self.score is not None and not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(f"score out of range: {self.score}")
