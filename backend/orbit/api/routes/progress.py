"""Progress Routes — sync and read one (subject, lesson) progress record.

Invariants:
    - Gateway order: authenticate → manageOwnProgress role check → ownership
      check → service; the service never runs for a denied request
    - Modifying requires owner or ADMIN; viewing requires owner or viewAllProgress
    - Sync answers 200 for both first write and replacement

Design Decisions:
    - Ownership checked against the subjectId in the request, before storage is
      touched: a 403 never reveals whether the record exists
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from orbit.api.dependencies import (
    get_gateway, get_reconciliation_engine, require_capability,
)
from orbit.core.domain_types import Capability, LessonId, Principal, SubjectId
from orbit.core.gateway import AuthorizationGateway, Denied
from orbit.schemas.progress import ProgressResponse, ProgressSyncRequest
from orbit.services.reconcile_progress import ReconciliationEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/progress", tags=["progress"])

require_own_progress = require_capability(
    Capability.MANAGE_OWN_PROGRESS, terminal=False,
)


@router.post("", response_model=ProgressResponse)
async def sync_progress(
    body: ProgressSyncRequest,
    principal: Principal = Depends(require_own_progress),
    gateway: AuthorizationGateway = Depends(get_gateway),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
):
    """Create or replace the caller's progress for one lesson."""
    subject_id = SubjectId(body.subject_id)
    ownership = gateway.check_ownership(principal, subject_id, modify=True)
    if isinstance(ownership, Denied):
        raise ownership.error
    record = await engine.sync(
        subject_id, LessonId(body.lesson_id), body.completed, body.score,
    )
    return ProgressResponse.model_validate(record)


@router.get("/{subject_id}/{lesson_id}", response_model=ProgressResponse)
async def get_progress(
    subject_id: UUID,
    lesson_id: UUID,
    principal: Principal = Depends(require_own_progress),
    gateway: AuthorizationGateway = Depends(get_gateway),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
):
    ownership = gateway.check_ownership(
        principal, SubjectId(subject_id), modify=False,
    )
    if isinstance(ownership, Denied):
        raise ownership.error
    record = await engine.get(SubjectId(subject_id), LessonId(lesson_id))
    return ProgressResponse.model_validate(record)
