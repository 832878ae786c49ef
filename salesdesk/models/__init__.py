"""SQLAlchemy models package: import all models so Base.metadata is populated."""

from salesdesk.models.base import BaseModel
from salesdesk.models.core import User
from salesdesk.models.enums import (
    CaseStatus,
    ClientType,
    LoginMethod,
    MeetingStage,
    PerformanceLevel,
    SentimentLabel,
    TranscriptSource,
    UserRole,
)
from salesdesk.models.meetings import AiAnalysis, Evaluation, FailedCase, Meeting

__all__ = [
    "AiAnalysis",
    "BaseModel",
    "CaseStatus",
    "ClientType",
    "Evaluation",
    "FailedCase",
    "LoginMethod",
    "Meeting",
    "MeetingStage",
    "PerformanceLevel",
    "SentimentLabel",
    "TranscriptSource",
    "User",
    "UserRole",
]
