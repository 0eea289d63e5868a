"""Progress Reconciliation — idempotent full-record replacement keyed by (subject, lesson).

Invariants:
    - sync() never surfaces a duplicate-key or conflict error: first submission
      creates, every later one replaces completed AND score wholesale
    - updated_at is the server receive time, read once per call; client clocks
      are never used for ordering
    - Concurrent submissions for one key serialize on the storage upsert;
      the last committed write wins (no lock, no merge)
    - Authorization (can_modify_resource / can_view_resource) is the caller's job

Design Decisions:
    - Unit-of-work factory injected at construction: no global DB client,
      tests substitute in-memory fakes (ADR: explicit dependency injection)
    - Unknown subject/lesson is a ValidationError raised inside the transaction,
      before the upsert touches the progress table
    - Silent loss of the losing concurrent update is deliberate for now;
      see DESIGN.md open questions before adding divergence signalling
"""

import logging

from orbit.core.domain_types import LessonId, SubjectId
from orbit.core.errors import NotFoundError, ValidationError
from orbit.core.records import ProgressRecord
from orbit.core.repository_protocols import UnitOfWorkFactory
from orbit.core.tokens import Clock, utc_now
from orbit.core.validate_input import check_score

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Applies client-submitted progress updates."""

    def __init__(self, unit_of_work: UnitOfWorkFactory, clock: Clock = utc_now):
        self._unit_of_work = unit_of_work
        self._clock = clock

    async def sync(
        self,
        subject_id: SubjectId,
        lesson_id: LessonId,
        completed: bool,
        score: int | None,
    ) -> ProgressRecord:
        """Create or unconditionally replace the record for (subject, lesson)."""
        score = check_score(score)
        received_at = self._clock()
        async with self._unit_of_work() as uow:
            if await uow.principals.get(subject_id) is None:
                raise ValidationError(
                    "subjectId does not reference a known user", field="subjectId",
                )
            if await uow.lessons.get(lesson_id) is None:
                raise ValidationError(
                    "lessonId does not reference a known lesson", field="lessonId",
                )
            record = await uow.progress.replace(
                subject_id, lesson_id, completed, score, received_at,
            )
        logger.info(
            "Progress synced",
            extra={"subject_id": str(subject_id), "lesson_id": str(lesson_id)},
        )
        return record

    async def get(
        self, subject_id: SubjectId, lesson_id: LessonId,
    ) -> ProgressRecord:
        async with self._unit_of_work() as uow:
            record = await uow.progress.get(subject_id, lesson_id)
        if record is None:
            raise NotFoundError("Progress record")
        return record
