"""AI analysis: Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from salesdesk.models.enums import ClientType, SentimentLabel


class AnalysisResponse(BaseModel):
    """A stored analysis, or an unsaved fallback when ``is_fallback`` is set."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID | None = None
    meeting_id: uuid.UUID
    keywords: list[str]
    sentiment_overall: SentimentLabel
    sentiment_score: int
    success_factors: list[str]
    question_quality: int
    response_completeness: int
    professional_term_usage: int
    control_level: int
    client_type: ClientType
    client_type_confidence: int
    improvement_suggestions: list[str]
    analyzed_at: datetime | None = None
    is_fallback: bool = False
