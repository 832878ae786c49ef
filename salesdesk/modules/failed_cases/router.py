"""Failed cases API router."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth.dependencies import require_permission
from salesdesk.auth.rbac import Action, Resource, meeting_scope
from salesdesk.core.database import get_db
from salesdesk.modules.failed_cases import service
from salesdesk.modules.failed_cases.schemas import (
    FailedCaseCreateRequest,
    FailedCaseCreateResponse,
    FailedCaseListResponse,
    FailedCaseResponse,
)
from salesdesk.modules.meetings import service as meetings_service
from salesdesk.schemas.auth import CurrentUser

logger = structlog.get_logger()

router = APIRouter(prefix="/failed-cases", tags=["failed-cases"])


@router.post("", response_model=FailedCaseCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_failed_case(
    body: FailedCaseCreateRequest,
    current_user: CurrentUser = Depends(require_permission(Action.CREATE, Resource.FAILED_CASE)),
    db: AsyncSession = Depends(get_db),
):
    """Record a lost case. The meeting's status becomes ``failed`` in the same transaction."""
    meeting = await meetings_service.get_meeting(db, body.meeting_id, meeting_scope(current_user))
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    failed_case = await service.create_failed_case(db, meeting, body)
    await db.commit()
    return FailedCaseCreateResponse(case_id=failed_case.id)


@router.get("", response_model=FailedCaseListResponse)
async def list_failed_cases(
    current_user: CurrentUser = Depends(require_permission(Action.VIEW, Resource.FAILED_CASE)),
    db: AsyncSession = Depends(get_db),
):
    cases = await service.list_failed_cases(db, owner_id=meeting_scope(current_user))
    return FailedCaseListResponse(
        items=[FailedCaseResponse.model_validate(c) for c in cases],
        total=len(cases),
    )
