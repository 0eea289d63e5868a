"""Progress Schemas — sync request and stored-record response.

Invariants:
    - completed is a strict boolean; score is null or a strict integer in [0, 100]
    - No client timestamp is accepted: updatedAt is server-assigned only
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import Field, StrictBool, StrictInt

from orbit.core.domain_types import MAX_SCORE, MIN_SCORE
from orbit.schemas.base import ApiModel


class ProgressSyncRequest(ApiModel):
    subject_id: UUID
    lesson_id: UUID
    completed: StrictBool
    score: Annotated[StrictInt, Field(ge=MIN_SCORE, le=MAX_SCORE)] | None = None


class ProgressResponse(ApiModel):
    id: UUID
    subject_id: UUID
    lesson_id: UUID
    completed: bool
    score: int | None
    updated_at: datetime
