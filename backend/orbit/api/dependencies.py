"""API Dependencies — FastAPI wiring for the gateway, services and storage.

Invariants:
    - require_auth / require_capability run the gateway BEFORE the route body;
      a Denied result is raised, so the body never executes on failure
    - The Authorization header is read raw: absence vs. malformed is decided
      by the gateway, not by FastAPI's security helpers
    - Services are built per request around the app's DatabaseSessionManager;
      no module-level storage client

Design Decisions:
    - Depends() factories over global singletons: tests swap any collaborator
      with app.dependency_overrides (ADR: explicit dependency injection)
    - TokenService and hasher built once per process from cached settings
"""

from functools import lru_cache

from fastapi import Depends, Header, Request

from orbit.config import get_settings
from orbit.core.domain_types import Capability, Principal
from orbit.core.gateway import AuthorizationGateway, Denied
from orbit.core.repository_protocols import (
    AuditSink, PasswordHasher, UnitOfWorkFactory,
)
from orbit.core.tokens import Claims, TokenService
from orbit.infrastructure.audit import LoggingAuditSink
from orbit.infrastructure.database import DatabaseSessionManager
from orbit.infrastructure.passwords import BcryptPasswordHasher
from orbit.services.authenticate_credentials import CredentialService
from orbit.services.enroll_principal import EnrollmentWorkflow
from orbit.services.manage_lessons import LessonService
from orbit.services.reconcile_progress import ReconciliationEngine


# ─── Process-wide collaborators ──────────────────────────────────

@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(settings.jwt_secret, settings.jwt_ttl_seconds)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_audit_sink() -> AuditSink:
    return LoggingAuditSink()


def get_gateway(
    tokens: TokenService = Depends(get_token_service),
    audit: AuditSink = Depends(get_audit_sink),
) -> AuthorizationGateway:
    return AuthorizationGateway(tokens, audit)


def get_db_manager(request: Request) -> DatabaseSessionManager:
    manager = getattr(request.app.state, "db_manager", None)
    if manager is None:
        raise RuntimeError("Database not initialized")
    return manager


def get_unit_of_work_factory(
    manager: DatabaseSessionManager = Depends(get_db_manager),
) -> UnitOfWorkFactory:
    return manager.unit_of_work


# ─── Gateway stages as dependencies ──────────────────────────────

def require_auth(
    authorization: str | None = Header(default=None),
    gateway: AuthorizationGateway = Depends(get_gateway),
) -> Claims:
    result = gateway.with_auth(authorization)
    if isinstance(result, Denied):
        raise result.error
    return result.claims


def require_capability(capability: Capability, terminal: bool = True):
    """Dependency factory: authenticate, then require the capability's roles.

    terminal=False for routes that follow up with gateway.check_ownership.
    """

    def dependency(
        authorization: str | None = Header(default=None),
        gateway: AuthorizationGateway = Depends(get_gateway),
    ) -> Principal:
        result = gateway.with_capability(
            authorization, capability, terminal=terminal,
        )
        if isinstance(result, Denied):
            raise result.error
        return result.principal

    return dependency


# ─── Services ────────────────────────────────────────────────────

def get_reconciliation_engine(
    unit_of_work: UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> ReconciliationEngine:
    return ReconciliationEngine(unit_of_work)


def get_enrollment_workflow(
    unit_of_work: UnitOfWorkFactory = Depends(get_unit_of_work_factory),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> EnrollmentWorkflow:
    return EnrollmentWorkflow(unit_of_work, hasher)


def get_credential_service(
    unit_of_work: UnitOfWorkFactory = Depends(get_unit_of_work_factory),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> CredentialService:
    return CredentialService(unit_of_work, hasher, tokens)


def get_lesson_service(
    unit_of_work: UnitOfWorkFactory = Depends(get_unit_of_work_factory),
) -> LessonService:
    return LessonService(unit_of_work)
