"""Lesson Schemas — minimal create payload and response."""

from uuid import UUID

from pydantic import Field

from orbit.schemas.base import ApiModel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class LessonCreate(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=100, pattern=SLUG_PATTERN)
    content: str = ""
    order: int = Field(gt=0)


class LessonResponse(ApiModel):
    id: UUID
    title: str
    slug: str
    order: int
