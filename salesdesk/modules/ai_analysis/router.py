"""AI analysis API router: read and manually trigger per-meeting analysis."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth.dependencies import require_permission
from salesdesk.auth.rbac import Action, Resource, meeting_scope
from salesdesk.core.database import get_db
from salesdesk.core.errors import ConflictError
from salesdesk.modules.ai_analysis import service
from salesdesk.modules.ai_analysis.schemas import AnalysisResponse
from salesdesk.modules.meetings import service as meetings_service
from salesdesk.schemas.auth import CurrentUser
from salesdesk.services.analysis_adapter import AnalysisAdapter, get_analysis_adapter

logger = structlog.get_logger()

router = APIRouter(prefix="/ai-analysis", tags=["ai-analysis"])


@router.get("/by-meeting/{meeting_id}", response_model=AnalysisResponse | None)
async def get_analysis_by_meeting(
    meeting_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_permission(Action.VIEW, Resource.ANALYSIS)),
    db: AsyncSession = Depends(get_db),
):
    """Return the meeting's analysis, or null when none has been stored yet."""
    meeting = await meetings_service.get_meeting(db, meeting_id, meeting_scope(current_user))
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    analysis = await service.get_by_meeting(db, meeting_id)
    if analysis is None:
        return None
    return AnalysisResponse.model_validate(analysis)


@router.post("/{meeting_id}", response_model=AnalysisResponse)
async def analyze_meeting(
    meeting_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_permission(Action.RUN_ANALYSIS, Resource.ANALYSIS)),
    db: AsyncSession = Depends(get_db),
    adapter: AnalysisAdapter = Depends(get_analysis_adapter),
):
    """Run the analysis for a meeting that does not have one yet.

    A degraded (fallback) answer is returned with ``is_fallback`` set and is
    not stored, so the analysis can be retried later.
    """
    meeting = await meetings_service.get_meeting(db, meeting_id, meeting_scope(current_user))
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    if await service.get_by_meeting(db, meeting_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This meeting already has an analysis",
        )

    outcome = await adapter.analyze(meeting.transcript_text, meeting.meeting_stage, meeting.client_budget)
    if outcome.degraded:
        return AnalysisResponse(meeting_id=meeting_id, is_fallback=True, **outcome.value.model_dump())

    try:
        analysis = await service.save_analysis(db, meeting_id, outcome.value)
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    await db.commit()
    await db.refresh(analysis)
    return AnalysisResponse.model_validate(analysis)
