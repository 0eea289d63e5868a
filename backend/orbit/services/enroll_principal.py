"""Enrollment Workflow — upsert a principal and initialize progress for every lesson, atomically.

Invariants:
    - Steps run inside ONE unit of work: principal upsert, lesson read,
      progress initialization — all commit or none do
    - Principal upsert is keyed by email; an existing principal gets a new name
      and password hash, its role is never touched
    - Progress initialization is create-only: existing completed/score survive
    - Input validation happens before the unit of work opens (no storage access)

Design Decisions:
    - Password hashed before the transaction opens: the slow bcrypt call never
      holds a database connection
    - progress_initialized counts lessons covered after the call, so a retry
      reports the same number as the first attempt
"""

import logging
from dataclasses import dataclass

from orbit.core.records import PrincipalRecord
from orbit.core.repository_protocols import PasswordHasher, UnitOfWorkFactory
from orbit.core.tokens import Clock, utc_now
from orbit.core.validate_input import (
    check_required_password, normalize_email, normalize_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentResult:
    principal: PrincipalRecord
    progress_initialized: int


class EnrollmentWorkflow:
    """Retry-safe enrollment of a principal into every known lesson."""

    def __init__(
        self,
        unit_of_work: UnitOfWorkFactory,
        hasher: PasswordHasher,
        clock: Clock = utc_now,
    ):
        self._unit_of_work = unit_of_work
        self._hasher = hasher
        self._clock = clock

    async def enroll(self, name: str, email: str, password: str) -> EnrollmentResult:
        name = normalize_name(name)
        email = normalize_email(email)
        password_hash = await self._hasher.hash(check_required_password(password))
        now = self._clock()

        async with self._unit_of_work() as uow:
            principal = await uow.principals.upsert_by_email(
                name, email, password_hash,
            )
            lessons = await uow.lessons.list_all()
            for lesson in lessons:
                await uow.progress.create_if_absent(principal.id, lesson.id, now)

        logger.info(
            f"Enrolled principal into {len(lessons)} lesson(s)",
            extra={"subject_id": str(principal.id)},
        )
        return EnrollmentResult(
            principal=principal, progress_initialized=len(lessons),
        )
