"""Evaluations service: score, store and list rubric evaluations."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.core.errors import ConflictError
from salesdesk.models.meetings import Evaluation, Meeting
from salesdesk.modules.evaluations.scoring import score_evaluation
from salesdesk.schemas.auth import CurrentUser

logger = structlog.get_logger()


async def get_by_meeting(db: AsyncSession, meeting_id: uuid.UUID) -> Evaluation | None:
    result = await db.execute(select(Evaluation).where(Evaluation.meeting_id == meeting_id))
    return result.scalar_one_or_none()


async def create_evaluation(
    db: AsyncSession,
    meeting: Meeting,
    evaluator: CurrentUser,
    scores: dict[str, int],
    manual_notes: str | None = None,
) -> Evaluation:
    """Score and store the single evaluation of a meeting.

    Raises ConflictError when the meeting already has one and
    ScoreValidationError (a ValueError) for an invalid score set.
    """
    if await get_by_meeting(db, meeting.id) is not None:
        raise ConflictError("This meeting has already been evaluated")

    result = score_evaluation(scores)
    evaluation = Evaluation(
        id=uuid.uuid4(),
        meeting_id=meeting.id,
        evaluator_id=evaluator.user_id,
        evaluator_name=evaluator.name or evaluator.username,
        total_score=result.total_score,
        performance_level=result.performance_level,
        manual_notes=manual_notes,
        **scores,
    )
    db.add(evaluation)
    try:
        await db.flush()
    except IntegrityError as e:
        # A concurrent submission won the unique index on meeting_id
        await db.rollback()
        raise ConflictError("This meeting has already been evaluated") from e

    logger.info(
        "evaluation.created",
        evaluation_id=str(evaluation.id),
        meeting_id=str(meeting.id),
        total_score=result.total_score,
        performance_level=result.performance_level.value,
    )
    return evaluation


async def list_evaluations(db: AsyncSession, owner_id: uuid.UUID | None = None) -> list[Evaluation]:
    """Evaluations newest first; limited to one salesperson's meetings when ``owner_id`` is given."""
    stmt = select(Evaluation).order_by(Evaluation.evaluated_at.desc())
    if owner_id is not None:
        stmt = stmt.join(Meeting, Evaluation.meeting_id == Meeting.id).where(
            Meeting.salesperson_id == owner_id
        )
    result = await db.execute(stmt)
    return list(result.scalars().all())
