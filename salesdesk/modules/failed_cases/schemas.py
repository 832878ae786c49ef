"""Failed cases: Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from salesdesk.models.enums import MeetingStage


class FailedCaseCreateRequest(BaseModel):
    meeting_id: uuid.UUID
    client_name: str | None = Field(None, max_length=255)  # defaults to the meeting's client
    failure_stage: MeetingStage
    failure_reasons: list[str] = Field(..., min_length=1)
    detailed_analysis: str = Field(..., min_length=1)
    lessons_learned: str | None = None


class FailedCaseCreateResponse(BaseModel):
    case_id: uuid.UUID


class FailedCaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    meeting_id: uuid.UUID
    salesperson_id: uuid.UUID
    client_name: str | None
    failure_stage: MeetingStage
    failure_reasons: list[str]
    detailed_analysis: str
    lessons_learned: str | None
    created_at: datetime


class FailedCaseListResponse(BaseModel):
    items: list[FailedCaseResponse]
    total: int
