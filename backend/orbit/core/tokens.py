"""Token Service — issues and verifies signed identity tokens (JWT, HS256).

Invariants:
    - The signing algorithm is pinned here and never read from the token header
    - verify() checks, in order: structure (MALFORMED), expiry (EXPIRED), signature
      (INVALID_SIGNATURE); an expired token is EXPIRED whatever its signature
    - Claims always satisfy expires_at > issued_at and role ∈ Role
    - extract_bearer_token() never raises: any unexpected shape yields None

Design Decisions:
    - PyJWT over hand-rolled HMAC: standard encoding, constant-time comparison
    - Injected clock: expiry is tested without sleeping or freezing time globally
    - Expiry checked against our clock with PyJWT's own exp check disabled, so the
      failure order above is ours and not the library's
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from orbit.core.domain_types import Role, SubjectId, TokenFailure

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 3600
BEARER_SCHEME = "bearer"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenVerificationError(Exception):
    """Raised when a token fails verification."""

    def __init__(self, reason: TokenFailure):
        super().__init__(reason.value)
        self.reason = reason


@dataclass(frozen=True)
class Claims:
    """Decoded payload of a verified token."""
    subject_id: SubjectId
    role: Role
    issued_at: datetime
    expires_at: datetime

    def __post_init__(self):
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be after issued_at")


class TokenService:
    """Signs and verifies identity tokens with a single server-side secret."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Clock = utc_now,
    ):
        if not secret:
            raise RuntimeError("JWT_SECRET is not configured")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def issue(self, subject_id: SubjectId, role: Role) -> str:
        issued_at = int(self._clock().timestamp())
        payload = {
            "sub": str(subject_id),
            "role": role.value,
            "iat": issued_at,
            "exp": issued_at + int(self._ttl.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Claims:
        claims = _parse_claims(token)
        if self._clock() > claims.expires_at:
            raise TokenVerificationError(TokenFailure.EXPIRED)
        try:
            jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "verify_iat": False},
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            raise TokenVerificationError(TokenFailure.INVALID_SIGNATURE) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError(TokenFailure.MALFORMED) from exc
        return claims


def extract_bearer_token(header_value: str | None) -> str | None:
    """Return the token from 'Bearer <token>', or None for any other shape."""
    if not header_value:
        return None
    parts = header_value.split(" ")
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None
    return parts[1] or None


def _parse_claims(token: str) -> Claims:
    """Decode without verifying the signature and validate claim structure."""
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        raise TokenVerificationError(TokenFailure.MALFORMED) from exc

    sub, role, iat, exp = (
        payload.get("sub"), payload.get("role"),
        payload.get("iat"), payload.get("exp"),
    )
    if not isinstance(sub, str) or role not in {r.value for r in Role}:
        raise TokenVerificationError(TokenFailure.MALFORMED)
    if not _is_epoch(iat) or not _is_epoch(exp):
        raise TokenVerificationError(TokenFailure.MALFORMED)
    try:
        return Claims(
            subject_id=SubjectId(UUID(sub)),
            role=Role(role),
            issued_at=datetime.fromtimestamp(iat, timezone.utc),
            expires_at=datetime.fromtimestamp(exp, timezone.utc),
        )
    except (ValueError, OverflowError, OSError) as exc:
        raise TokenVerificationError(TokenFailure.MALFORMED) from exc


def _is_epoch(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
