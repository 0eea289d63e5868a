"""Enrollment Routes — administrative, retry-safe user enrollment.

Invariants:
    - Only manageUsers holders (ADMIN) reach the workflow
    - Repeating the same request yields the same principal id and count (200 both times)
"""

import logging

from fastapi import APIRouter, Depends

from orbit.api.dependencies import get_enrollment_workflow, require_capability
from orbit.core.domain_types import Capability, Principal
from orbit.schemas.auth import PrincipalResponse
from orbit.schemas.enrollment import EnrollRequest, EnrollResponse
from orbit.services.enroll_principal import EnrollmentWorkflow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/enroll", response_model=EnrollResponse)
async def enroll_user(
    body: EnrollRequest,
    admin: Principal = Depends(require_capability(Capability.MANAGE_USERS)),
    workflow: EnrollmentWorkflow = Depends(get_enrollment_workflow),
):
    """Upsert a principal by email and initialize progress for every lesson."""
    result = await workflow.enroll(body.name, body.email, body.password)
    logger.info(
        "Enrollment completed",
        extra={"subject_id": str(admin.id), "role": admin.role.value},
    )
    return EnrollResponse(
        principal=PrincipalResponse.model_validate(result.principal),
        progress_initialized=result.progress_initialized,
    )
