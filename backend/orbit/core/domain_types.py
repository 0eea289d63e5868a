"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SubjectId, LessonId, ProgressId wrap UUIDs — never use bare UUID in domain logic
    - Role is a single ordered enum: declaration order IS the hierarchy
      (STUDENT < TEACHER < ADMIN); rank is derived, never stored separately
    - Capability names match the wire names of the permission table
    - Principal is immutable once built from verified claims

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and JWT claims without custom encoders
    - Rank derived from member order: the hierarchy cannot drift from the enum
      (ADR: no parallel lookup structures)
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

SubjectId = NewType("SubjectId", UUID)
LessonId = NewType("LessonId", UUID)
ProgressId = NewType("ProgressId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Score = NewType("Score", int)   # 0–100

MIN_SCORE = 0
MAX_SCORE = 100


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Principal roles, declared lowest privilege first."""
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)

    def at_least(self, minimum: "Role") -> bool:
        return self.rank >= minimum.rank


_ROLE_ORDER: tuple[Role, ...] = tuple(Role)


class Capability(str, Enum):
    """Named permissions checked by the authorization gateway."""
    MANAGE_CONTENT = "manageContent"
    DELETE_ANY = "deleteAny"
    VIEW_ALL_PROGRESS = "viewAllProgress"
    MANAGE_OWN_PROGRESS = "manageOwnProgress"
    UPDATE_OWN_PROFILE = "updateOwnProfile"
    MANAGE_USERS = "manageUsers"


class TokenFailure(str, Enum):
    """Why a token failed verification. Collapsed to INVALID_TOKEN on the wire."""
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


class Decision(str, Enum):
    """Gateway outcome recorded in the audit log."""
    ALLOW = "allow"
    DENY_MISSING_TOKEN = "deny_missing_token"
    DENY_INVALID_TOKEN = "deny_invalid_token"
    DENY_FORBIDDEN = "deny_forbidden"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class Principal:
    """Authenticated identity as seen by a handler."""
    id: SubjectId
    role: Role
