"""Meetings API router."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth.dependencies import require_permission
from salesdesk.auth.rbac import Action, Resource, meeting_scope
from salesdesk.core.database import get_db
from salesdesk.modules.ai_analysis import service as analysis_service
from salesdesk.modules.meetings import service
from salesdesk.modules.meetings.schemas import (
    MeetingCreateRequest,
    MeetingCreateResponse,
    MeetingListResponse,
    MeetingResponse,
    SuggestNameRequest,
    SuggestNameResponse,
    UpdateStatusRequest,
)
from salesdesk.schemas.auth import CurrentUser
from salesdesk.services.analysis_adapter import AnalysisAdapter, get_analysis_adapter

logger = structlog.get_logger()

router = APIRouter(prefix="/meetings", tags=["meetings"])


@router.post("", response_model=MeetingCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    body: MeetingCreateRequest,
    current_user: CurrentUser = Depends(require_permission(Action.CREATE, Resource.MEETING)),
    db: AsyncSession = Depends(get_db),
    adapter: AnalysisAdapter = Depends(get_analysis_adapter),
):
    """Log a meeting, then analyse its transcript.

    The meeting is committed before the model is called, so an unavailable
    analysis service never loses the meeting. Only a successful analysis is
    stored; a fallback leaves the meeting ready for a manual retry.
    """
    meeting = await service.create_meeting(db, current_user, body)
    await db.commit()

    outcome = await adapter.analyze(body.transcript_text, body.meeting_stage, body.client_budget)
    if outcome.degraded:
        logger.warning("meeting.analysis_skipped", meeting_id=str(meeting.id))
        return MeetingCreateResponse(meeting_id=meeting.id, analysis_status="fallback")

    await analysis_service.save_analysis(db, meeting.id, outcome.value)
    await db.commit()
    return MeetingCreateResponse(meeting_id=meeting.id, analysis_status="completed")


@router.get("", response_model=MeetingListResponse)
async def list_meetings(
    current_user: CurrentUser = Depends(require_permission(Action.VIEW, Resource.MEETING)),
    db: AsyncSession = Depends(get_db),
):
    """Meetings newest first. Salespeople and guests only see their own."""
    meetings = await service.list_meetings(db, owner_id=meeting_scope(current_user))
    return MeetingListResponse(
        items=[MeetingResponse.model_validate(m) for m in meetings],
        total=len(meetings),
    )


@router.post("/suggest-project-name", response_model=SuggestNameResponse)
async def suggest_project_name(
    body: SuggestNameRequest,
    current_user: CurrentUser = Depends(require_permission(Action.SUGGEST, Resource.MEETING)),
    adapter: AnalysisAdapter = Depends(get_analysis_adapter),
):
    outcome = await adapter.suggest_name(body.transcript_text)
    return SuggestNameResponse(project_name=outcome.value, is_fallback=outcome.degraded)


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(
    meeting_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_permission(Action.VIEW, Resource.MEETING)),
    db: AsyncSession = Depends(get_db),
):
    meeting = await service.get_meeting(db, meeting_id, owner_id=meeting_scope(current_user))
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return MeetingResponse.model_validate(meeting)


@router.patch("/{meeting_id}/status", response_model=MeetingResponse)
async def update_meeting_status(
    meeting_id: uuid.UUID,
    body: UpdateStatusRequest,
    current_user: CurrentUser = Depends(require_permission(Action.EDIT, Resource.MEETING)),
    db: AsyncSession = Depends(get_db),
):
    meeting = await service.update_status(
        db, meeting_id, body.case_status, owner_id=meeting_scope(current_user)
    )
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    await db.commit()
    await db.refresh(meeting)
    return MeetingResponse.model_validate(meeting)


@router.delete("/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meeting(
    meeting_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_permission(Action.DELETE, Resource.MEETING)),
    db: AsyncSession = Depends(get_db),
):
    """Admin only. Removes the meeting with its evaluation, analysis and failed cases."""
    deleted = await service.delete_meeting(db, meeting_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Meeting not found")
    await db.commit()
