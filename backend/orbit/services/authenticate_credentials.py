"""Credential Service — signup and login on top of the token service and password hasher.

Invariants:
    - Unknown email and wrong password produce the SAME AuthenticationError
      (code, message); both paths run one bcrypt verification
    - Public signup creates STUDENT principals only; TEACHER/ADMIN require an
      ADMIN requester (manageUsers capability)
    - Duplicate email on signup is a ConflictError (409), never a silent upsert
    - Passwords and hashes are never logged or returned

Design Decisions:
    - Unknown emails go through PasswordHasher.verify_unknown(): the
      enumeration-safe path costs the same as a real verification
    - Token issued from persisted role at login time; later role changes take
      effect at the next login
"""

import logging
from dataclasses import dataclass

from orbit.core.capabilities import allowed_roles, has_permission
from orbit.core.domain_types import Capability, Principal, Role
from orbit.core.errors import AuthenticationError, ConflictError
from orbit.core.gateway import forbidden
from orbit.core.records import PrincipalRecord
from orbit.core.repository_protocols import PasswordHasher, UnitOfWorkFactory
from orbit.core.tokens import TokenService
from orbit.core.validate_input import check_password, normalize_email, normalize_name

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


@dataclass(frozen=True)
class SessionGrant:
    token: str
    principal: PrincipalRecord


class CredentialService:
    """Registers principals and exchanges credentials for tokens."""

    def __init__(
        self,
        unit_of_work: UnitOfWorkFactory,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self._unit_of_work = unit_of_work
        self._hasher = hasher
        self._tokens = tokens

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        requested_role: Role = Role.STUDENT,
        requester: Principal | None = None,
    ) -> SessionGrant:
        name = normalize_name(name)
        email = normalize_email(email)
        check_password(password)
        if requested_role is not Role.STUDENT:
            admin_roles = allowed_roles(Capability.MANAGE_USERS)
            if requester is None or not has_permission(requester.role, admin_roles):
                raise forbidden(admin_roles)

        password_hash = await self._hasher.hash(password)
        async with self._unit_of_work() as uow:
            if await uow.principals.get_by_email(email) is not None:
                raise ConflictError(
                    "An account with this email already exists", "EMAIL_TAKEN",
                )
            principal = await uow.principals.create(
                name, email, password_hash, requested_role,
            )
        logger.info(
            "Principal registered",
            extra={"subject_id": str(principal.id), "role": principal.role.value},
        )
        return SessionGrant(
            token=self._tokens.issue(principal.id, principal.role),
            principal=principal,
        )

    async def login(self, email: str, password: str) -> SessionGrant:
        email = email.strip().lower()
        async with self._unit_of_work() as uow:
            principal = await uow.principals.get_by_email(email)

        if principal is None:
            await self._hasher.verify_unknown(password)
            raise self._invalid_credentials()
        if not await self._hasher.verify(password, principal.password_hash):
            raise self._invalid_credentials()

        return SessionGrant(
            token=self._tokens.issue(principal.id, principal.role),
            principal=principal,
        )

    @staticmethod
    def _invalid_credentials() -> AuthenticationError:
        return AuthenticationError(
            INVALID_CREDENTIALS_MESSAGE, "INVALID_CREDENTIALS",
        )
