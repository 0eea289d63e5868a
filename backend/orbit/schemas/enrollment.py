"""Enrollment Schemas — enroll request and result.

Invariants:
    - Same name and email rules as signup; password only needs to be non-empty
      (enrollment sets credentials on behalf of a user, signup enforces the length policy)
    - progressInitialized counts the lessons the principal now has progress for
"""

from pydantic import Field, field_validator

from orbit.core.validate_input import EMAIL_PATTERN, MAX_NAME_LENGTH
from orbit.schemas.auth import PrincipalResponse
from orbit.schemas.base import ApiModel


class EnrollRequest(ApiModel):
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    email: str = Field(pattern=EMAIL_PATTERN.pattern, max_length=320)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


class EnrollResponse(ApiModel):
    principal: PrincipalResponse
    progress_initialized: int
