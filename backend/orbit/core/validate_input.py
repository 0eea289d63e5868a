"""Input Validation — pure checks run before any storage access.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Violations raise ValidationError naming the offending field
    - Emails are returned trimmed and lower-cased (the natural key is case-insensitive)

Design Decisions:
    - Mirrors the Pydantic constraints in schemas/ so services called outside
      HTTP (scripts, tests) get the same guarantees (ADR: validation at every boundary)
"""

import re

from orbit.core.domain_types import MAX_SCORE, MIN_SCORE
from orbit.core.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_NAME_LENGTH = 100
MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format", field="email")
    return email


def normalize_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Name is required", field="name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Name must not exceed {MAX_NAME_LENGTH} characters", field="name",
        )
    return name


def check_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field="password",
        )
    return password


def check_required_password(password: str) -> str:
    """Enrollment rule: any non-empty password; the length policy is signup's."""
    if not password:
        raise ValidationError("Password is required", field="password")
    return password


def check_score(score: int | None) -> int | None:
    if score is None:
        return None
    if (
        isinstance(score, bool)
        or not isinstance(score, int)
        or not MIN_SCORE <= score <= MAX_SCORE
    ):
        raise ValidationError(
            f"Score must be an integer between {MIN_SCORE} and {MAX_SCORE}",
            field="score",
        )
    return score
