"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - A UnitOfWork commits on clean exit and rolls back on any exception;
      repositories obtained from it share its transaction

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves —
      the shell orchestrates the async calls around the pure logic
    - Upserts are repository primitives: atomicity on the composite key belongs to
      the storage engine, not to the caller
"""

from collections.abc import Callable
from datetime import datetime
from typing import AsyncContextManager, Protocol

from orbit.core.domain_types import Decision, LessonId, Role, SubjectId
from orbit.core.records import LessonRecord, PrincipalRecord, ProgressRecord


class PrincipalRepository(Protocol):
    """Contract for principal persistence — implemented by shell."""
    async def get(self, subject_id: SubjectId) -> PrincipalRecord | None: ...
    async def get_by_email(self, email: str) -> PrincipalRecord | None: ...
    async def create(
        self, name: str, email: str, password_hash: str, role: Role,
    ) -> PrincipalRecord: ...
    async def upsert_by_email(
        self, name: str, email: str, password_hash: str,
    ) -> PrincipalRecord: ...


class LessonRepository(Protocol):
    """Contract for lesson lookup — implemented by shell."""
    async def get(self, lesson_id: LessonId) -> LessonRecord | None: ...
    async def list_all(self) -> list[LessonRecord]: ...
    async def get_by_slug(self, slug: str) -> LessonRecord | None: ...
    async def create(
        self, title: str, slug: str, content: str, order: int,
    ) -> LessonRecord: ...


class ProgressRepository(Protocol):
    """Contract for progress persistence — implemented by shell."""
    async def get(
        self, subject_id: SubjectId, lesson_id: LessonId,
    ) -> ProgressRecord | None: ...
    async def replace(
        self,
        subject_id: SubjectId,
        lesson_id: LessonId,
        completed: bool,
        score: int | None,
        updated_at: datetime,
    ) -> ProgressRecord: ...
    async def create_if_absent(
        self, subject_id: SubjectId, lesson_id: LessonId, updated_at: datetime,
    ) -> None: ...


class UnitOfWork(Protocol):
    """One storage transaction and the repositories bound to it."""
    principals: PrincipalRepository
    lessons: LessonRepository
    progress: ProgressRepository


UnitOfWorkFactory = Callable[[], AsyncContextManager[UnitOfWork]]


class PasswordHasher(Protocol):
    """Contract for the password hash/verify primitive.

    verify_unknown() spends one verification against a fixed hash and always
    returns False: used when no stored hash exists, so timing does not reveal it.
    """
    async def hash(self, plain_password: str) -> str: ...
    async def verify(self, plain_password: str, password_hash: str) -> bool: ...
    async def verify_unknown(self, plain_password: str) -> bool: ...


class AuditSink(Protocol):
    """Receives one (subject_id, role, decision) tuple per gateway decision."""
    def record(
        self, subject_id: str | None, role: str | None, decision: Decision,
    ) -> None: ...
