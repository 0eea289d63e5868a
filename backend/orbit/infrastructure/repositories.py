"""SQL Repositories — SQLAlchemy implementations of the core repository protocols.

Invariants:
    - Every upsert is a single INSERT … ON CONFLICT statement on a declared
      unique key: atomicity comes from the storage engine, never from a
      read-then-write in Python
    - Reads after an upsert use populate_existing so the identity map never
      returns pre-upsert attribute values
    - Only frozen records (core/records.py) leave this module

Design Decisions:
    - Dialect-aware insert construct (PostgreSQL in production, SQLite in tests):
      both support ON CONFLICT with index_elements (ADR: one code path, two engines)
    - Repositories never commit: the owning SqlUnitOfWork decides
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from orbit.core.domain_types import LessonId, ProgressId, Role, SubjectId
from orbit.core.records import LessonRecord, PrincipalRecord, ProgressRecord
from orbit.models.lesson import Lesson
from orbit.models.principal import Principal
from orbit.models.progress import Progress, PROGRESS_KEY_COLUMNS


def _insert_for(session: AsyncSession):
    """Pick the ON CONFLICT-capable insert() for the bound dialect."""
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Upserts are not supported on dialect '{dialect}'")


# ─── Row → Record ────────────────────────────────────────────────

def _principal_record(row: Principal) -> PrincipalRecord:
    return PrincipalRecord(
        id=SubjectId(row.id),
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        role=Role(row.role),
        created_at=row.created_at,
    )


def _lesson_record(row: Lesson) -> LessonRecord:
    return LessonRecord(
        id=LessonId(row.id), title=row.title, slug=row.slug, order=row.order,
    )


def _progress_record(row: Progress) -> ProgressRecord:
    return ProgressRecord(
        id=ProgressId(row.id),
        subject_id=SubjectId(row.subject_id),
        lesson_id=LessonId(row.lesson_id),
        completed=row.completed,
        score=row.score,
        updated_at=row.updated_at,
    )


# ─── Repositories ────────────────────────────────────────────────

class SqlPrincipalRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, subject_id: SubjectId) -> PrincipalRecord | None:
        row = await self._session.get(Principal, subject_id)
        return _principal_record(row) if row else None

    async def get_by_email(self, email: str) -> PrincipalRecord | None:
        result = await self._session.execute(
            select(Principal).where(Principal.email == email),
        )
        row = result.scalar_one_or_none()
        return _principal_record(row) if row else None

    async def create(
        self, name: str, email: str, password_hash: str, role: Role,
    ) -> PrincipalRecord:
        row = Principal(
            name=name, email=email, password_hash=password_hash, role=role.value,
        )
        self._session.add(row)
        await self._session.flush()
        return _principal_record(row)

    async def upsert_by_email(
        self, name: str, email: str, password_hash: str,
    ) -> PrincipalRecord:
        """Insert a STUDENT, or update name + hash of the existing email. Role untouched."""
        insert = _insert_for(self._session)
        stmt = insert(Principal).values(
            name=name, email=email, password_hash=password_hash,
            role=Role.STUDENT.value,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["email"],
            set_={
                "name": stmt.excluded.name,
                "password_hash": stmt.excluded.password_hash,
            },
        )
        await self._session.execute(stmt)
        result = await self._session.execute(
            select(Principal)
            .where(Principal.email == email)
            .execution_options(populate_existing=True),
        )
        return _principal_record(result.scalar_one())


class SqlLessonRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, lesson_id: LessonId) -> LessonRecord | None:
        row = await self._session.get(Lesson, lesson_id)
        return _lesson_record(row) if row else None

    async def list_all(self) -> list[LessonRecord]:
        result = await self._session.execute(
            select(Lesson).order_by(Lesson.order, Lesson.slug),
        )
        return [_lesson_record(row) for row in result.scalars().all()]

    async def get_by_slug(self, slug: str) -> LessonRecord | None:
        result = await self._session.execute(
            select(Lesson).where(Lesson.slug == slug),
        )
        row = result.scalar_one_or_none()
        return _lesson_record(row) if row else None

    async def create(
        self, title: str, slug: str, content: str, order: int,
    ) -> LessonRecord:
        row = Lesson(title=title, slug=slug, content=content, order=order)
        self._session.add(row)
        await self._session.flush()
        return _lesson_record(row)


class SqlProgressRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(
        self, subject_id: SubjectId, lesson_id: LessonId,
    ) -> ProgressRecord | None:
        result = await self._session.execute(
            select(Progress)
            .where(Progress.subject_id == subject_id)
            .where(Progress.lesson_id == lesson_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return _progress_record(row) if row else None

    async def replace(
        self,
        subject_id: SubjectId,
        lesson_id: LessonId,
        completed: bool,
        score: int | None,
        updated_at: datetime,
    ) -> ProgressRecord:
        """Create, or overwrite completed/score/updated_at on the composite key."""
        insert = _insert_for(self._session)
        stmt = insert(Progress).values(
            subject_id=subject_id, lesson_id=lesson_id,
            completed=completed, score=score, updated_at=updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=list(PROGRESS_KEY_COLUMNS),
            set_={
                "completed": stmt.excluded.completed,
                "score": stmt.excluded.score,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._session.execute(stmt)
        result = await self._session.execute(
            select(Progress)
            .where(Progress.subject_id == subject_id)
            .where(Progress.lesson_id == lesson_id)
            .execution_options(populate_existing=True),
        )
        return _progress_record(result.scalar_one())

    async def create_if_absent(
        self, subject_id: SubjectId, lesson_id: LessonId, updated_at: datetime,
    ) -> None:
        """Initialize (not completed, no score); an existing row is left alone."""
        insert = _insert_for(self._session)
        stmt = insert(Progress).values(
            subject_id=subject_id, lesson_id=lesson_id,
            completed=False, score=None, updated_at=updated_at,
        ).on_conflict_do_nothing(index_elements=list(PROGRESS_KEY_COLUMNS))
        await self._session.execute(stmt)


class SqlUnitOfWork:
    """Repositories bound to one AsyncSession (one transaction)."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.principals = SqlPrincipalRepository(session)
        self.lessons = SqlLessonRepository(session)
        self.progress = SqlProgressRepository(session)
