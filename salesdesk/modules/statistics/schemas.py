"""Statistics: Pydantic response schemas."""

import uuid

from pydantic import BaseModel

from salesdesk.models.enums import CaseStatus, ClientType


class SuccessRateResponse(BaseModel):
    total: int
    success: int
    failed: int
    in_progress: int
    success_rate: float  # percent, 0 when there are no meetings


class SalespersonPerformanceResponse(BaseModel):
    salesperson_id: uuid.UUID
    total_meetings: int
    success_count: int
    failed_count: int
    success_rate: float
    avg_score: float


class ClientTypeCount(BaseModel):
    client_type: ClientType
    count: int


class MonthlyTrendPoint(BaseModel):
    month: str  # YYYY-MM
    count: int
    success_count: int


class StatusCount(BaseModel):
    status: CaseStatus
    count: int


class EvaluationStats(BaseModel):
    count: int
    avg_score: float


class OverviewResponse(BaseModel):
    case_status: list[StatusCount]
    evaluations: EvaluationStats


class TeamMemberPerformance(BaseModel):
    salesperson_id: uuid.UUID
    salesperson_name: str | None
    total: int
    success: int
    failed: int
    in_progress: int
