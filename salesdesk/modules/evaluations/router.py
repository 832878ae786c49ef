"""Evaluations API router."""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth.dependencies import require_permission
from salesdesk.auth.rbac import Action, Resource, meeting_scope
from salesdesk.core.database import get_db
from salesdesk.core.errors import ConflictError
from salesdesk.modules.evaluations import service
from salesdesk.modules.evaluations.schemas import (
    EvaluationCreateRequest,
    EvaluationCreateResponse,
    EvaluationListResponse,
    EvaluationResponse,
    SuggestionRequest,
    SuggestionResponse,
)
from salesdesk.modules.evaluations.scoring import score_evaluation
from salesdesk.modules.meetings import service as meetings_service
from salesdesk.schemas.auth import CurrentUser
from salesdesk.services.analysis_adapter import AnalysisAdapter, get_analysis_adapter

logger = structlog.get_logger()

router = APIRouter(prefix="/evaluations", tags=["evaluations"])


@router.post("", response_model=EvaluationCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_evaluation(
    body: EvaluationCreateRequest,
    current_user: CurrentUser = Depends(require_permission(Action.CREATE, Resource.EVALUATION)),
    db: AsyncSession = Depends(get_db),
):
    """Evaluator or admin. Scores the 20 items and stores the single evaluation of a meeting."""
    meeting = await meetings_service.get_meeting(db, body.meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    try:
        evaluation = await service.create_evaluation(
            db, meeting, current_user, body.scores(), manual_notes=body.manual_notes
        )
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    await db.commit()
    return EvaluationCreateResponse(
        evaluation_id=evaluation.id,
        total_score=evaluation.total_score,
        performance_level=evaluation.performance_level,
    )


@router.get("", response_model=EvaluationListResponse)
async def list_evaluations(
    current_user: CurrentUser = Depends(require_permission(Action.VIEW, Resource.EVALUATION)),
    db: AsyncSession = Depends(get_db),
):
    evaluations = await service.list_evaluations(db, owner_id=meeting_scope(current_user))
    return EvaluationListResponse(
        items=[EvaluationResponse.model_validate(e) for e in evaluations],
        total=len(evaluations),
    )


@router.get("/by-meeting/{meeting_id}", response_model=EvaluationResponse | None)
async def get_evaluation_by_meeting(
    meeting_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_permission(Action.VIEW, Resource.EVALUATION)),
    db: AsyncSession = Depends(get_db),
):
    """Return the meeting's evaluation, or null when it has not been evaluated."""
    meeting = await meetings_service.get_meeting(db, meeting_id, meeting_scope(current_user))
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    evaluation = await service.get_by_meeting(db, meeting_id)
    if evaluation is None:
        return None
    return EvaluationResponse.model_validate(evaluation)


@router.post("/suggestion", response_model=SuggestionResponse)
async def suggest_evaluation(
    body: SuggestionRequest,
    current_user: CurrentUser = Depends(require_permission(Action.SUGGEST, Resource.EVALUATION)),
    db: AsyncSession = Depends(get_db),
    adapter: AnalysisAdapter = Depends(get_analysis_adapter),
):
    """AI-suggested scores for the evaluation form. Falls back to all 3s."""
    meeting = await meetings_service.get_meeting(db, body.meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    outcome = await adapter.suggest_evaluation(meeting.transcript_text, meeting.meeting_stage)
    result = score_evaluation(outcome.value)
    return SuggestionResponse(
        meeting_id=meeting.id,
        scores=outcome.value,
        total_score=result.total_score,
        performance_level=result.performance_level,
        is_fallback=outcome.degraded,
    )
