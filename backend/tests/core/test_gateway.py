"""Authorization Gateway — verifies stage ordering, 401/403 split and audit records.

Tests:
    - Missing / malformed header → MISSING_TOKEN; bad token → INVALID_TOKEN
    - Valid token with the wrong role → FORBIDDEN naming only the allowed roles
    - Ownership checks name "resource owner" and never the owner id
    - Every decision lands in the audit sink exactly once, including the
      role check → ownership check pair used by progress routes
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from orbit.core.domain_types import (
    Capability, Decision, Principal, Role, SubjectId,
)
from orbit.core.errors import AuthenticationError, AuthorizationError
from orbit.core.gateway import (
    Authenticated,
    AuthorizationGateway,
    Authorized,
    Denied,
    INVALID_TOKEN_MESSAGE,
    authenticate,
    authorize,
    forbidden,
)
from orbit.core.tokens import TokenService
from tests.services.fakes import RecordingAuditSink

SECRET = "gateway-test-secret-0123456789abcdef"
NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _tokens(now: datetime = NOW) -> TokenService:
    return TokenService(SECRET, 3600, clock=lambda: now)


def _bearer(role: Role, subject: SubjectId | None = None) -> str:
    return f"Bearer {_tokens().issue(subject or SubjectId(uuid4()), role)}"


def _gateway():
    audit = RecordingAuditSink()
    return AuthorizationGateway(_tokens(), audit), audit


# ─── Authenticate ────────────────────────────────────────────────

def test_missing_header_is_missing_token():
    result = authenticate(None, _tokens())
    assert isinstance(result, Denied)
    assert result.decision is Decision.DENY_MISSING_TOKEN
    assert result.error.code == "MISSING_TOKEN"
    assert result.error.http_status == 401


def test_non_bearer_header_is_missing_token():
    result = authenticate("Token abc", _tokens())
    assert result.error.code == "MISSING_TOKEN"


def test_expired_and_garbage_tokens_look_identical():
    expired = _bearer(Role.STUDENT)
    later = _tokens(NOW + timedelta(hours=2))

    first = authenticate(expired, later)
    second = authenticate("Bearer garbage", later)

    assert first.error.code == second.error.code == "INVALID_TOKEN"
    assert first.error.message == second.error.message == INVALID_TOKEN_MESSAGE
    assert isinstance(first.error, AuthenticationError)


def test_valid_token_is_authenticated():
    subject = SubjectId(uuid4())
    result = authenticate(_bearer(Role.TEACHER, subject), _tokens())
    assert isinstance(result, Authenticated)
    assert result.claims.subject_id == subject


# ─── Authorize ───────────────────────────────────────────────────

def test_wrong_role_is_forbidden_naming_allowed_roles():
    claims = authenticate(_bearer(Role.STUDENT), _tokens()).claims
    result = authorize(claims, {Role.TEACHER, Role.ADMIN})
    assert isinstance(result, Denied)
    assert result.error.http_status == 403
    assert result.error.message == "Access denied. Required role: TEACHER or ADMIN"
    assert "STUDENT" not in result.error.message


def test_forbidden_for_owner_checks():
    error = forbidden({Role.ADMIN}, owner_may_act=True)
    assert isinstance(error, AuthorizationError)
    assert error.message == "Access denied. Required role: resource owner or ADMIN"


# ─── Pipeline + audit ────────────────────────────────────────────

def test_with_capability_authorizes_and_records_allow():
    gateway, audit = _gateway()
    subject = SubjectId(uuid4())

    result = gateway.with_capability(
        _bearer(Role.TEACHER, subject), Capability.MANAGE_CONTENT,
    )

    assert isinstance(result, Authorized)
    assert result.principal == Principal(id=subject, role=Role.TEACHER)
    assert audit.entries == [(str(subject), "TEACHER", Decision.ALLOW)]


def test_with_capability_missing_token_records_once_without_identity():
    gateway, audit = _gateway()
    result = gateway.with_capability(None, Capability.MANAGE_CONTENT)
    assert result.decision is Decision.DENY_MISSING_TOKEN
    assert audit.entries == [(None, None, Decision.DENY_MISSING_TOKEN)]


def test_with_role_forbidden_records_caller_identity():
    gateway, audit = _gateway()
    subject = SubjectId(uuid4())
    gateway.with_role(_bearer(Role.STUDENT, subject), {Role.ADMIN})
    assert audit.entries == [(str(subject), "STUDENT", Decision.DENY_FORBIDDEN)]


def test_with_auth_allows_any_role():
    gateway, audit = _gateway()
    result = gateway.with_auth(_bearer(Role.STUDENT))
    assert isinstance(result, Authenticated)
    assert audit.entries[0][2] is Decision.ALLOW


def test_check_ownership_modify():
    gateway, audit = _gateway()
    owner = SubjectId(uuid4())
    teacher = Principal(id=SubjectId(uuid4()), role=Role.TEACHER)
    admin = Principal(id=SubjectId(uuid4()), role=Role.ADMIN)

    denied = gateway.check_ownership(teacher, owner, modify=True)
    allowed = gateway.check_ownership(admin, owner, modify=True)

    assert isinstance(denied, Denied)
    assert str(owner) not in denied.error.message
    assert isinstance(allowed, Authorized)
    assert [e[2] for e in audit.entries] == [Decision.DENY_FORBIDDEN, Decision.ALLOW]


def test_check_ownership_view_lets_teacher_read():
    gateway, _ = _gateway()
    teacher = Principal(id=SubjectId(uuid4()), role=Role.TEACHER)
    student = Principal(id=SubjectId(uuid4()), role=Role.STUDENT)
    owner = SubjectId(uuid4())

    assert isinstance(gateway.check_ownership(teacher, owner, modify=False), Authorized)
    denied = gateway.check_ownership(student, owner, modify=False)
    assert denied.error.message == (
        "Access denied. Required role: resource owner or TEACHER or ADMIN"
    )


def test_non_terminal_capability_leaves_allow_to_ownership_stage():
    gateway, audit = _gateway()
    subject = SubjectId(uuid4())

    result = gateway.with_capability(
        _bearer(Role.STUDENT, subject), Capability.MANAGE_OWN_PROGRESS,
        terminal=False,
    )
    gateway.check_ownership(result.principal, subject, modify=True)

    assert audit.entries == [(str(subject), "STUDENT", Decision.ALLOW)]


def test_non_terminal_capability_still_records_denials():
    gateway, audit = _gateway()
    subject = SubjectId(uuid4())

    gateway.with_capability(None, Capability.MANAGE_OWN_PROGRESS, terminal=False)
    gateway.with_role(_bearer(Role.STUDENT, subject), {Role.ADMIN}, terminal=False)

    assert [e[2] for e in audit.entries] == [
        Decision.DENY_MISSING_TOKEN, Decision.DENY_FORBIDDEN,
    ]
