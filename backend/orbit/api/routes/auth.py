"""Auth Routes — signup, login and bearer-token identity.

Invariants:
    - Public signup only creates STUDENT principals; any other role runs the
      manageUsers gateway check on the caller's Authorization header first
    - Login failures are indistinguishable (one code, one message)
    - GET /me answers from the verified token alone, no storage read

Design Decisions:
    - Thin routes: validation in schemas, rules in CredentialService (ADR: ExMA impureim sandwich)
"""

import logging

from fastapi import APIRouter, Depends, Header, status

from orbit.api.dependencies import (
    get_credential_service, get_gateway, require_auth,
)
from orbit.core.domain_types import Capability, Principal, Role
from orbit.core.gateway import AuthorizationGateway, Denied
from orbit.core.tokens import Claims
from orbit.schemas.auth import (
    IdentityResponse,
    LoginRequest,
    PrincipalResponse,
    SessionGrantResponse,
    SignupRequest,
)
from orbit.services.authenticate_credentials import CredentialService, SessionGrant

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/signup", response_model=SessionGrantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    body: SignupRequest,
    authorization: str | None = Header(default=None),
    gateway: AuthorizationGateway = Depends(get_gateway),
    credentials: CredentialService = Depends(get_credential_service),
):
    """Register a principal and return a session token."""
    requester: Principal | None = None
    if body.role is not Role.STUDENT:
        result = gateway.with_capability(authorization, Capability.MANAGE_USERS)
        if isinstance(result, Denied):
            raise result.error
        requester = result.principal
    grant = await credentials.signup(
        body.name, body.email, body.password,
        requested_role=body.role, requester=requester,
    )
    return _grant_response(grant)


@router.post("/login", response_model=SessionGrantResponse)
async def login(
    body: LoginRequest,
    credentials: CredentialService = Depends(get_credential_service),
):
    """Exchange email and password for a session token."""
    grant = await credentials.login(body.email, body.password)
    return _grant_response(grant)


@router.get("/me", response_model=IdentityResponse)
async def me(claims: Claims = Depends(require_auth)):
    return IdentityResponse(id=claims.subject_id, role=claims.role)


def _grant_response(grant: SessionGrant) -> SessionGrantResponse:
    return SessionGrantResponse(
        token=grant.token,
        principal=PrincipalResponse.model_validate(grant.principal),
    )
