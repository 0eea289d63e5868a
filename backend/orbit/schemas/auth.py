"""Auth Schemas — signup, login and identity payloads.

Invariants:
    - SignupRequest.name: 1-100 chars, stripped; email lower-cased; password >= 8 chars
    - LoginRequest.password only needs to be non-empty (no hints about policy)
    - Responses never include password hashes

Design Decisions:
    - Email checked by pattern, not deliverability: same rule as core/validate_input.py
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from orbit.core.domain_types import Role
from orbit.core.validate_input import (
    EMAIL_PATTERN, MAX_NAME_LENGTH, MIN_PASSWORD_LENGTH,
)
from orbit.schemas.base import ApiModel


class SignupRequest(ApiModel):
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    email: str = Field(pattern=EMAIL_PATTERN.pattern, max_length=320)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    role: Role = Role.STUDENT

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


class LoginRequest(ApiModel):
    email: str = Field(pattern=EMAIL_PATTERN.pattern, max_length=320)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


class PrincipalResponse(ApiModel):
    """Public principal data."""
    id: UUID
    name: str
    email: str
    role: Role
    created_at: datetime


class SessionGrantResponse(ApiModel):
    token: str
    principal: PrincipalResponse


class IdentityResponse(ApiModel):
    """What the bearer token says about its holder."""
    id: UUID
    role: Role
