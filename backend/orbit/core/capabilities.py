"""Capability Evaluation — static permission table and the four authorization predicates.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - ROLE_PERMISSIONS is total over Capability and read-only at runtime
    - has_permission / has_minimum_role / can_modify_resource / can_view_resource
      are the only authorization logic; everything else composes them
    - has_minimum_role uses Role rank; has_permission uses exact membership

Design Decisions:
    - MappingProxyType over frozen dataclass: same read-only guarantee, keeps
      capability lookup a plain mapping access (ADR: no policy engine)
    - describe_roles orders by rank so 403 messages are deterministic
"""

from collections.abc import Iterable
from types import MappingProxyType
from typing import Mapping

from orbit.core.domain_types import Capability, Role, SubjectId


ROLE_PERMISSIONS: Mapping[Capability, frozenset[Role]] = MappingProxyType({
    Capability.MANAGE_CONTENT: frozenset({Role.TEACHER, Role.ADMIN}),
    Capability.DELETE_ANY: frozenset({Role.ADMIN}),
    Capability.VIEW_ALL_PROGRESS: frozenset({Role.TEACHER, Role.ADMIN}),
    Capability.MANAGE_OWN_PROGRESS: frozenset(
        {Role.STUDENT, Role.TEACHER, Role.ADMIN},
    ),
    Capability.UPDATE_OWN_PROFILE: frozenset(
        {Role.STUDENT, Role.TEACHER, Role.ADMIN},
    ),
    Capability.MANAGE_USERS: frozenset({Role.ADMIN}),
})


def allowed_roles(capability: Capability) -> frozenset[Role]:
    """Roles that hold the given capability."""
    return ROLE_PERMISSIONS[capability]


def has_permission(role: Role, roles: Iterable[Role]) -> bool:
    return role in frozenset(roles)


def has_minimum_role(role: Role, minimum: Role) -> bool:
    return role.at_least(minimum)


def can_modify_resource(
    requester_id: SubjectId, owner_id: SubjectId, role: Role,
) -> bool:
    """Owners modify their own resources; ADMIN modifies anything."""
    return requester_id == owner_id or role is Role.ADMIN


def can_view_resource(
    requester_id: SubjectId, owner_id: SubjectId, role: Role,
) -> bool:
    """Owners view their own resources; viewAllProgress roles view anything."""
    return requester_id == owner_id or has_permission(
        role, ROLE_PERMISSIONS[Capability.VIEW_ALL_PROGRESS],
    )


def describe_roles(roles: Iterable[Role]) -> str:
    """Render a role set for humans, lowest rank first: 'TEACHER or ADMIN'."""
    return " or ".join(r.value for r in sorted(set(roles), key=lambda r: r.rank))
