"""Request Schemas — verifies camelCase aliases and strict boundary types.

Tests:
    - ProgressSyncRequest accepts camelCase and snake_case field names
    - completed/score reject coerced strings; score bounded to [0, 100]
    - SignupRequest lower-cases email and defaults role to STUDENT
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from orbit.core.domain_types import Role
from orbit.schemas.auth import SignupRequest
from orbit.schemas.lesson import LessonCreate
from orbit.schemas.progress import ProgressSyncRequest


def test_progress_sync_accepts_camel_case():
    subject, lesson = uuid4(), uuid4()
    body = ProgressSyncRequest.model_validate({
        "subjectId": str(subject), "lessonId": str(lesson),
        "completed": True, "score": 0,
    })
    assert body.subject_id == subject
    assert body.score == 0


def test_progress_sync_score_is_optional():
    body = ProgressSyncRequest(
        subject_id=uuid4(), lesson_id=uuid4(), completed=False,
    )
    assert body.score is None


@pytest.mark.parametrize("field,value", [
    ("completed", "yes"),
    ("completed", 1),
    ("score", "42"),
    ("score", 100.5),
    ("score", 101),
])
def test_progress_sync_rejects_loose_values(field, value):
    data = {
        "subjectId": str(uuid4()), "lessonId": str(uuid4()),
        "completed": True, "score": 10,
    }
    data[field] = value
    with pytest.raises(ValidationError):
        ProgressSyncRequest.model_validate(data)


def test_signup_defaults():
    body = SignupRequest(name=" Ada ", email=" ADA@Example.com", password="password123")
    assert body.name == "Ada"
    assert body.email == "ada@example.com"
    assert body.role is Role.STUDENT


def test_lesson_slug_must_be_url_safe():
    with pytest.raises(ValidationError):
        LessonCreate(title="Orbits", slug="Has Spaces", order=1)
