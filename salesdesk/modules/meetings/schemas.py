"""Meetings: Pydantic schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from salesdesk.models.enums import CaseStatus, MeetingStage, TranscriptSource

# Upper bound of the INTEGER client_budget column
MAX_CLIENT_BUDGET = 2_147_483_647


class MeetingCreateRequest(BaseModel):
    project_name: str = Field(..., min_length=1, max_length=255)
    sales_designer: str | None = Field(None, max_length=255)
    drawing_designer: str | None = Field(None, max_length=255)
    client_name: str | None = Field(None, max_length=255)
    client_contact: str | None = Field(None, max_length=255)
    client_budget: int | None = Field(None, ge=0, le=MAX_CLIENT_BUDGET)
    project_type: str | None = Field(None, max_length=100)  # residence / retail / office
    meeting_stage: MeetingStage
    meeting_date: datetime
    transcript_source: TranscriptSource
    transcript_text: str = Field(..., min_length=1)
    audio_file_url: str | None = Field(None, max_length=1024)
    notes: str | None = None


class MeetingCreateResponse(BaseModel):
    meeting_id: uuid.UUID
    analysis_status: Literal["completed", "fallback"]


class MeetingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    salesperson_id: uuid.UUID
    salesperson_name: str | None
    project_name: str
    sales_designer: str | None
    drawing_designer: str | None
    client_name: str | None
    client_contact: str | None
    client_budget: int | None
    project_type: str | None
    meeting_stage: MeetingStage
    meeting_date: datetime
    transcript_source: TranscriptSource
    transcript_text: str
    audio_file_url: str | None
    case_status: CaseStatus
    notes: str | None
    created_at: datetime
    updated_at: datetime


class MeetingListResponse(BaseModel):
    items: list[MeetingResponse]
    total: int


class UpdateStatusRequest(BaseModel):
    case_status: CaseStatus


class SuggestNameRequest(BaseModel):
    transcript_text: str = Field(..., min_length=1)


class SuggestNameResponse(BaseModel):
    project_name: str
    is_fallback: bool
