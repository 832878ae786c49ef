"""Evaluations: Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from salesdesk.models.enums import PerformanceLevel
from salesdesk.modules.evaluations.scoring import SCORE_KEYS

ItemScore = Literal[1, 3, 5]


class RubricScores(BaseModel):
    """The 20 rubric items, each 1 (not done), 3 (done) or 5 (done well)."""

    score1: ItemScore
    score2: ItemScore
    score3: ItemScore
    score4: ItemScore
    score5: ItemScore
    score6: ItemScore
    score7: ItemScore
    score8: ItemScore
    score9: ItemScore
    score10: ItemScore
    score11: ItemScore
    score12: ItemScore
    score13: ItemScore
    score14: ItemScore
    score15: ItemScore
    score16: ItemScore
    score17: ItemScore
    score18: ItemScore
    score19: ItemScore
    score20: ItemScore

    def scores(self) -> dict[str, int]:
        return {key: getattr(self, key) for key in SCORE_KEYS}


class EvaluationCreateRequest(RubricScores):
    meeting_id: uuid.UUID
    manual_notes: str | None = Field(None, max_length=10_000)


class EvaluationCreateResponse(BaseModel):
    evaluation_id: uuid.UUID
    total_score: int
    performance_level: PerformanceLevel


class EvaluationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    meeting_id: uuid.UUID
    evaluator_id: uuid.UUID
    evaluator_name: str | None
    score1: int
    score2: int
    score3: int
    score4: int
    score5: int
    score6: int
    score7: int
    score8: int
    score9: int
    score10: int
    score11: int
    score12: int
    score13: int
    score14: int
    score15: int
    score16: int
    score17: int
    score18: int
    score19: int
    score20: int
    total_score: int
    performance_level: PerformanceLevel
    manual_notes: str | None
    evaluated_at: datetime


class EvaluationListResponse(BaseModel):
    items: list[EvaluationResponse]
    total: int


class SuggestionRequest(BaseModel):
    meeting_id: uuid.UUID


class SuggestionResponse(BaseModel):
    meeting_id: uuid.UUID
    scores: dict[str, int]
    total_score: int
    performance_level: PerformanceLevel
    is_fallback: bool
