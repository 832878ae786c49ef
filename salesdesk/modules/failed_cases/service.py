"""Failed cases service."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.models.enums import CaseStatus
from salesdesk.models.meetings import FailedCase, Meeting
from salesdesk.modules.failed_cases.schemas import FailedCaseCreateRequest

logger = structlog.get_logger()


async def create_failed_case(
    db: AsyncSession,
    meeting: Meeting,
    body: FailedCaseCreateRequest,
) -> FailedCase:
    """Record why a meeting was lost and mark the meeting as failed."""
    failed_case = FailedCase(
        id=uuid.uuid4(),
        meeting_id=meeting.id,
        salesperson_id=meeting.salesperson_id,
        client_name=body.client_name or meeting.client_name,
        failure_stage=body.failure_stage,
        failure_reasons=body.failure_reasons,
        detailed_analysis=body.detailed_analysis,
        lessons_learned=body.lessons_learned,
    )
    db.add(failed_case)
    meeting.case_status = CaseStatus.FAILED
    await db.flush()
    logger.info(
        "failed_case.created",
        case_id=str(failed_case.id),
        meeting_id=str(meeting.id),
        failure_stage=body.failure_stage.value,
    )
    return failed_case


async def list_failed_cases(db: AsyncSession, owner_id: uuid.UUID | None = None) -> list[FailedCase]:
    stmt = select(FailedCase).order_by(FailedCase.created_at.desc())
    if owner_id is not None:
        stmt = stmt.where(FailedCase.salesperson_id == owner_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())
