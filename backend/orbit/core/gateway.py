"""Authorization Gateway — staged Authenticate → Authorize pipeline with discriminated results.

Invariants:
    - Every stage returns either its success type or Denied; nothing raises
    - Missing token → MISSING_TOKEN, any verification failure → INVALID_TOKEN;
      the TokenFailure reason is logged but never sent to the client
    - FORBIDDEN messages name only the allowed role set (plus "resource owner"
      for ownership checks), never the caller's role, the owner, or existence
    - Every terminal decision is written to the audit sink exactly once; a
      non-terminal role check that allows leaves the record to the follow-up
      ownership stage, so an ownership-guarded request audits once

Design Decisions:
    - Result dataclasses over exceptions inside the pipeline: each stage is
      composable and testable on its own; the HTTP shell raises Denied.error
      (ADR: staged pipeline instead of nested handler wrappers)
    - Audit sink injected as a Protocol: the gateway stays free of logging config
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from orbit.core.capabilities import (
    allowed_roles,
    can_modify_resource,
    can_view_resource,
    describe_roles,
    has_permission,
)
from orbit.core.domain_types import (
    Capability, Decision, Principal, Role, SubjectId,
)
from orbit.core.errors import AuthenticationError, AuthorizationError, OrbitError
from orbit.core.repository_protocols import AuditSink
from orbit.core.tokens import (
    Claims, TokenService, TokenVerificationError, extract_bearer_token,
)

logger = logging.getLogger(__name__)

MISSING_TOKEN_MESSAGE = (
    "Missing authentication token. "
    "Please include 'Authorization: Bearer <token>' header."
)
INVALID_TOKEN_MESSAGE = "Invalid or expired token. Please log in again."


# ─── Stage Results ───────────────────────────────────────────────

@dataclass(frozen=True)
class Authenticated:
    claims: Claims


@dataclass(frozen=True)
class Authorized:
    principal: Principal


@dataclass(frozen=True)
class Denied:
    error: OrbitError
    decision: Decision


def forbidden(roles: Iterable[Role], owner_may_act: bool = False) -> AuthorizationError:
    """Opaque 403: names who may act, nothing about the resource."""
    required = describe_roles(roles)
    if owner_may_act:
        required = f"resource owner or {required}"
    return AuthorizationError(f"Access denied. Required role: {required}")


# ─── Stages ──────────────────────────────────────────────────────

def authenticate(
    header_value: str | None, tokens: TokenService,
) -> Authenticated | Denied:
    """Stages 1–2: extract the bearer token, then verify it."""
    token = extract_bearer_token(header_value)
    if token is None:
        return Denied(
            AuthenticationError(MISSING_TOKEN_MESSAGE, "MISSING_TOKEN"),
            Decision.DENY_MISSING_TOKEN,
        )
    try:
        claims = tokens.verify(token)
    except TokenVerificationError as exc:
        logger.info(
            "Token rejected", extra={"reason": exc.reason.value},
        )
        return Denied(
            AuthenticationError(INVALID_TOKEN_MESSAGE, "INVALID_TOKEN"),
            Decision.DENY_INVALID_TOKEN,
        )
    return Authenticated(claims)


def authorize(
    claims: Claims, roles: Iterable[Role],
) -> Authorized | Denied:
    """Stage 3: the token's role must be in the allowed set."""
    roles = frozenset(roles)
    if not has_permission(claims.role, roles):
        return Denied(forbidden(roles), Decision.DENY_FORBIDDEN)
    return Authorized(Principal(id=claims.subject_id, role=claims.role))


def authorize_modify(
    principal: Principal, owner_id: SubjectId,
) -> Authorized | Denied:
    if not can_modify_resource(principal.id, owner_id, principal.role):
        return Denied(
            forbidden({Role.ADMIN}, owner_may_act=True),
            Decision.DENY_FORBIDDEN,
        )
    return Authorized(principal)


def authorize_view(
    principal: Principal, owner_id: SubjectId,
) -> Authorized | Denied:
    if not can_view_resource(principal.id, owner_id, principal.role):
        return Denied(
            forbidden(
                allowed_roles(Capability.VIEW_ALL_PROGRESS), owner_may_act=True,
            ),
            Decision.DENY_FORBIDDEN,
        )
    return Authorized(principal)


# ─── Pipeline ────────────────────────────────────────────────────

class AuthorizationGateway:
    """Composes the stages and records each decision in the audit sink."""

    def __init__(self, tokens: TokenService, audit: AuditSink):
        self._tokens = tokens
        self._audit = audit

    def with_auth(self, header_value: str | None) -> Authenticated | Denied:
        """Authenticate only; the handler receives the verified subject id."""
        result = authenticate(header_value, self._tokens)
        self._record(result)
        return result

    def with_role(
        self,
        header_value: str | None,
        roles: Iterable[Role],
        *,
        terminal: bool = True,
    ) -> Authorized | Denied:
        """Authenticate, then require one of the allowed roles.

        With terminal=False an ALLOW is left unrecorded: a follow-up stage
        (check_ownership) owns the final decision. Denials always record.
        """
        authenticated = authenticate(header_value, self._tokens)
        if isinstance(authenticated, Denied):
            self._record(authenticated)
            return authenticated
        result = authorize(authenticated.claims, roles)
        if terminal or isinstance(result, Denied):
            self._record(result, authenticated.claims)
        return result

    def with_capability(
        self,
        header_value: str | None,
        capability: Capability,
        *,
        terminal: bool = True,
    ) -> Authorized | Denied:
        return self.with_role(
            header_value, allowed_roles(capability), terminal=terminal,
        )

    def check_ownership(
        self, principal: Principal, owner_id: SubjectId, *, modify: bool,
    ) -> Authorized | Denied:
        """Follow-up stage for routes that act on a subject-owned resource."""
        check = authorize_modify if modify else authorize_view
        result = check(principal, owner_id)
        self._audit.record(
            str(principal.id), principal.role.value,
            result.decision if isinstance(result, Denied) else Decision.ALLOW,
        )
        return result

    def _record(
        self,
        result: Authenticated | Authorized | Denied,
        claims: Claims | None = None,
    ) -> None:
        if isinstance(result, Authenticated):
            claims = result.claims
        subject_id = str(claims.subject_id) if claims else None
        role = claims.role.value if claims else None
        decision = (
            result.decision if isinstance(result, Denied) else Decision.ALLOW
        )
        self._audit.record(subject_id, role, decision)
