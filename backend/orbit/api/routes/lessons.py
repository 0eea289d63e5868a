"""Lesson Routes — content creation guarded by manageContent (TEACHER or ADMIN)."""

from fastapi import APIRouter, Depends, status

from orbit.api.dependencies import get_lesson_service, require_capability
from orbit.core.domain_types import Capability, Principal
from orbit.schemas.lesson import LessonCreate, LessonResponse
from orbit.services.manage_lessons import LessonService

router = APIRouter(prefix="/api/v1/lessons", tags=["lessons"])


@router.post(
    "", response_model=LessonResponse, status_code=status.HTTP_201_CREATED,
)
async def create_lesson(
    body: LessonCreate,
    _: Principal = Depends(require_capability(Capability.MANAGE_CONTENT)),
    lessons: LessonService = Depends(get_lesson_service),
):
    lesson = await lessons.create(body.title, body.slug, body.content, body.order)
    return LessonResponse.model_validate(lesson)
