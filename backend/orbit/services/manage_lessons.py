"""Lesson Content — minimal lesson creation behind the manageContent capability.

Invariants:
    - Slugs are unique; a taken slug is a ConflictError (409)
    - Callers have already passed the manageContent gateway check
"""

import logging

from orbit.core.errors import ConflictError
from orbit.core.records import LessonRecord
from orbit.core.repository_protocols import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class LessonService:
    def __init__(self, unit_of_work: UnitOfWorkFactory):
        self._unit_of_work = unit_of_work

    async def create(
        self, title: str, slug: str, content: str, order: int,
    ) -> LessonRecord:
        async with self._unit_of_work() as uow:
            if await uow.lessons.get_by_slug(slug) is not None:
                raise ConflictError(
                    f"A lesson with slug '{slug}' already exists", "SLUG_TAKEN",
                )
            lesson = await uow.lessons.create(title, slug, content, order)
        logger.info(f"Lesson created: {lesson.slug}")
        return lesson
