"""Meetings service: CRUD, owner scoping, status updates and cascade delete."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.models.enums import CaseStatus
from salesdesk.models.meetings import AiAnalysis, Evaluation, FailedCase, Meeting
from salesdesk.modules.meetings.schemas import MeetingCreateRequest
from salesdesk.schemas.auth import CurrentUser

logger = structlog.get_logger()


async def create_meeting(
    db: AsyncSession,
    current_user: CurrentUser,
    body: MeetingCreateRequest,
) -> Meeting:
    meeting = Meeting(
        id=uuid.uuid4(),
        salesperson_id=current_user.user_id,
        salesperson_name=current_user.name or current_user.username,
        **body.model_dump(),
    )
    db.add(meeting)
    await db.flush()
    logger.info("meeting.created", meeting_id=str(meeting.id), salesperson_id=str(current_user.user_id))
    return meeting


async def list_meetings(db: AsyncSession, owner_id: uuid.UUID | None = None) -> list[Meeting]:
    """All meetings newest first; restricted to one owner when ``owner_id`` is given."""
    stmt = select(Meeting).order_by(Meeting.meeting_date.desc(), Meeting.created_at.desc())
    if owner_id is not None:
        stmt = stmt.where(Meeting.salesperson_id == owner_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_meeting(
    db: AsyncSession,
    meeting_id: uuid.UUID,
    owner_id: uuid.UUID | None = None,
) -> Meeting | None:
    stmt = select(Meeting).where(Meeting.id == meeting_id)
    if owner_id is not None:
        stmt = stmt.where(Meeting.salesperson_id == owner_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def update_status(
    db: AsyncSession,
    meeting_id: uuid.UUID,
    case_status: CaseStatus,
    owner_id: uuid.UUID | None = None,
) -> Meeting | None:
    """Set ``case_status``. Any status may follow any other."""
    meeting = await get_meeting(db, meeting_id, owner_id)
    if meeting is None:
        return None
    previous = meeting.case_status
    meeting.case_status = case_status
    await db.flush()
    logger.info(
        "meeting.status_updated",
        meeting_id=str(meeting_id),
        previous=previous.value,
        current=case_status.value,
    )
    return meeting


async def delete_meeting(db: AsyncSession, meeting_id: uuid.UUID) -> bool:
    """Delete a meeting together with its evaluation, analysis and failed cases."""
    meeting = await get_meeting(db, meeting_id)
    if meeting is None:
        return False

    await db.execute(delete(Evaluation).where(Evaluation.meeting_id == meeting_id))
    await db.execute(delete(AiAnalysis).where(AiAnalysis.meeting_id == meeting_id))
    await db.execute(delete(FailedCase).where(FailedCase.meeting_id == meeting_id))
    await db.delete(meeting)
    await db.flush()
    logger.info("meeting.deleted", meeting_id=str(meeting_id))
    return True
