"""AI analysis service: persist and look up per-meeting analyses."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.core.errors import ConflictError
from salesdesk.models.meetings import AiAnalysis
from salesdesk.services.analysis_adapter import AnalysisResult

logger = structlog.get_logger()


async def get_by_meeting(db: AsyncSession, meeting_id: uuid.UUID) -> AiAnalysis | None:
    result = await db.execute(select(AiAnalysis).where(AiAnalysis.meeting_id == meeting_id))
    return result.scalar_one_or_none()


async def save_analysis(db: AsyncSession, meeting_id: uuid.UUID, result: AnalysisResult) -> AiAnalysis:
    """Store a successful analysis. Fallback results are never passed here."""
    analysis = AiAnalysis(
        id=uuid.uuid4(),
        meeting_id=meeting_id,
        **result.model_dump(),
    )
    db.add(analysis)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("This meeting already has an analysis") from e
    logger.info(
        "analysis.saved",
        meeting_id=str(meeting_id),
        client_type=result.client_type.value,
        sentiment=result.sentiment_overall.value,
    )
    return analysis
