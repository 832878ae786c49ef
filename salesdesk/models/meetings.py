"""Meeting models: Meeting, Evaluation, AiAnalysis, FailedCase."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from salesdesk.models.base import BaseModel, utcnow
from salesdesk.models.enums import (
    CaseStatus,
    ClientType,
    MeetingStage,
    PerformanceLevel,
    SentimentLabel,
    TranscriptSource,
)


class Meeting(BaseModel):
    __tablename__ = "meetings"
    __table_args__ = (
        Index("ix_meetings_salesperson_id", "salesperson_id"),
        Index("ix_meetings_meeting_date", "meeting_date"),
        Index("ix_meetings_case_status", "case_status"),
    )

    salesperson_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    salesperson_name: Mapped[str | None] = mapped_column(String(255))
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sales_designer: Mapped[str | None] = mapped_column(String(255))
    drawing_designer: Mapped[str | None] = mapped_column(String(255))
    client_name: Mapped[str | None] = mapped_column(String(255))
    client_contact: Mapped[str | None] = mapped_column(String(255))
    client_budget: Mapped[int | None] = mapped_column(Integer)
    project_type: Mapped[str | None] = mapped_column(String(100))
    meeting_stage: Mapped[MeetingStage] = mapped_column(nullable=False)
    meeting_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    transcript_source: Mapped[TranscriptSource] = mapped_column(nullable=False)
    transcript_text: Mapped[str] = mapped_column(Text, nullable=False)
    audio_file_url: Mapped[str | None] = mapped_column(String(1024))
    case_status: Mapped[CaseStatus] = mapped_column(
        nullable=False, default=CaseStatus.IN_PROGRESS
    )
    notes: Mapped[str | None] = mapped_column(Text)


class Evaluation(BaseModel):
    __tablename__ = "evaluations"
    __table_args__ = (
        # One evaluation per meeting
        Index("ix_evaluations_meeting_id", "meeting_id", unique=True),
        Index("ix_evaluations_evaluator_id", "evaluator_id"),
    )

    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )
    evaluator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    evaluator_name: Mapped[str | None] = mapped_column(String(255))
    score1: Mapped[int] = mapped_column(nullable=False)
    score2: Mapped[int] = mapped_column(nullable=False)
    score3: Mapped[int] = mapped_column(nullable=False)
    score4: Mapped[int] = mapped_column(nullable=False)
    score5: Mapped[int] = mapped_column(nullable=False)
    score6: Mapped[int] = mapped_column(nullable=False)
    score7: Mapped[int] = mapped_column(nullable=False)
    score8: Mapped[int] = mapped_column(nullable=False)
    score9: Mapped[int] = mapped_column(nullable=False)
    score10: Mapped[int] = mapped_column(nullable=False)
    score11: Mapped[int] = mapped_column(nullable=False)
    score12: Mapped[int] = mapped_column(nullable=False)
    score13: Mapped[int] = mapped_column(nullable=False)
    score14: Mapped[int] = mapped_column(nullable=False)
    score15: Mapped[int] = mapped_column(nullable=False)
    score16: Mapped[int] = mapped_column(nullable=False)
    score17: Mapped[int] = mapped_column(nullable=False)
    score18: Mapped[int] = mapped_column(nullable=False)
    score19: Mapped[int] = mapped_column(nullable=False)
    score20: Mapped[int] = mapped_column(nullable=False)
    total_score: Mapped[int] = mapped_column(nullable=False)
    performance_level: Mapped[PerformanceLevel] = mapped_column(nullable=False)
    manual_notes: Mapped[str | None] = mapped_column(Text)
    evaluated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )


class AiAnalysis(BaseModel):
    __tablename__ = "ai_analyses"
    __table_args__ = (Index("ix_ai_analyses_meeting_id", "meeting_id", unique=True),)

    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )
    keywords: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    sentiment_overall: Mapped[SentimentLabel] = mapped_column(nullable=False)
    sentiment_score: Mapped[int] = mapped_column(nullable=False)
    success_factors: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    question_quality: Mapped[int] = mapped_column(nullable=False)
    response_completeness: Mapped[int] = mapped_column(nullable=False)
    professional_term_usage: Mapped[int] = mapped_column(nullable=False)
    control_level: Mapped[int] = mapped_column(nullable=False)
    client_type: Mapped[ClientType] = mapped_column(nullable=False)
    client_type_confidence: Mapped[int] = mapped_column(nullable=False)
    improvement_suggestions: Mapped[list[Any]] = mapped_column(
        JSON, nullable=False, default=list
    )
    analyzed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )


class FailedCase(BaseModel):
    __tablename__ = "failed_cases"
    __table_args__ = (
        Index("ix_failed_cases_meeting_id", "meeting_id"),
        Index("ix_failed_cases_salesperson_id", "salesperson_id"),
    )

    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )
    salesperson_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    client_name: Mapped[str | None] = mapped_column(String(255))
    failure_stage: Mapped[MeetingStage] = mapped_column(nullable=False)
    failure_reasons: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    detailed_analysis: Mapped[str] = mapped_column(Text, nullable=False)
    lessons_learned: Mapped[str | None] = mapped_column(Text)
