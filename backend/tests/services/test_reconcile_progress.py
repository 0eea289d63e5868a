"""Progress Reconciliation — verifies idempotent replacement semantics.

Tests:
    - First sync creates; later syncs replace completed AND score wholesale
    - Replaying the same submission leaves one record with the same values
    - updated_at is the server clock, never a client value
    - Unknown subject/lesson and bad scores are rejected before any write
    - Concurrent submissions for one key end in one of the submitted states
"""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from orbit.core.domain_types import LessonId, SubjectId
from orbit.core.errors import NotFoundError, ValidationError
from orbit.services.reconcile_progress import ReconciliationEngine

T0 = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)


class _StepClock:
    def __init__(self):
        self.now = T0

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def seeded(store):
    return store.add_principal(), store.add_lesson()


async def test_first_sync_creates_record(store, seeded):
    principal, lesson = seeded
    engine = ReconciliationEngine(store.unit_of_work)

    record = await engine.sync(principal.id, lesson.id, True, 85)

    assert (record.completed, record.score) == (True, 85)
    assert len(store.progress) == 1


async def test_later_sync_replaces_whole_record(store, seeded):
    principal, lesson = seeded
    engine = ReconciliationEngine(store.unit_of_work)

    first = await engine.sync(principal.id, lesson.id, True, 85)
    second = await engine.sync(principal.id, lesson.id, False, None)

    assert second.id == first.id
    assert (second.completed, second.score) == (False, None)
    assert len(store.progress) == 1


async def test_replayed_submission_is_idempotent(store, seeded):
    principal, lesson = seeded
    engine = ReconciliationEngine(store.unit_of_work)

    for _ in range(3):
        record = await engine.sync(principal.id, lesson.id, True, 70)

    assert len(store.progress) == 1
    assert (record.completed, record.score) == (True, 70)


async def test_updated_at_comes_from_server_clock(store, seeded):
    principal, lesson = seeded
    clock = _StepClock()
    engine = ReconciliationEngine(store.unit_of_work, clock=clock)

    first = await engine.sync(principal.id, lesson.id, False, 10)
    second = await engine.sync(principal.id, lesson.id, True, 90)

    assert first.updated_at == T0 + timedelta(seconds=1)
    assert second.updated_at > first.updated_at


async def test_unknown_subject_rejected(store, seeded):
    _, lesson = seeded
    engine = ReconciliationEngine(store.unit_of_work)
    with pytest.raises(ValidationError) as exc_info:
        await engine.sync(SubjectId(uuid4()), lesson.id, True, 50)
    assert exc_info.value.field == "subjectId"
    assert store.progress == {}


async def test_unknown_lesson_rejected(store, seeded):
    principal, _ = seeded
    engine = ReconciliationEngine(store.unit_of_work)
    with pytest.raises(ValidationError) as exc_info:
        await engine.sync(principal.id, LessonId(uuid4()), True, 50)
    assert exc_info.value.field == "lessonId"


@pytest.mark.parametrize("score", [-1, 101, True])
async def test_bad_score_rejected_without_opening_storage(store, seeded, score):
    principal, lesson = seeded
    engine = ReconciliationEngine(store.unit_of_work)
    with pytest.raises(ValidationError):
        await engine.sync(principal.id, lesson.id, True, score)
    assert store.commits == 0


async def test_concurrent_submissions_end_in_a_submitted_state(store, seeded):
    principal, lesson = seeded
    engine = ReconciliationEngine(store.unit_of_work)
    submissions = [(True, 90), (False, 40), (True, None)]

    await asyncio.gather(*(
        engine.sync(principal.id, lesson.id, completed, score)
        for completed, score in submissions
    ))

    final = store.progress[(principal.id, lesson.id)]
    assert (final.completed, final.score) in submissions
    assert len(store.progress) == 1


async def test_get_missing_record_is_not_found(store, seeded):
    principal, lesson = seeded
    engine = ReconciliationEngine(store.unit_of_work)
    with pytest.raises(NotFoundError):
        await engine.get(principal.id, lesson.id)
