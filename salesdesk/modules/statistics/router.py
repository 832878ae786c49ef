"""Statistics API router. All endpoints are read-only."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth.dependencies import require_permission
from salesdesk.auth.rbac import Action, Resource
from salesdesk.core.database import get_db
from salesdesk.modules.statistics import service
from salesdesk.modules.statistics.schemas import (
    ClientTypeCount,
    MonthlyTrendPoint,
    OverviewResponse,
    SalespersonPerformanceResponse,
    SuccessRateResponse,
    TeamMemberPerformance,
)
from salesdesk.schemas.auth import CurrentUser

router = APIRouter(prefix="/statistics", tags=["statistics"])

_can_view = require_permission(Action.VIEW, Resource.STATISTICS)


@router.get("/success-rate", response_model=SuccessRateResponse)
async def get_success_rate(
    current_user: CurrentUser = Depends(_can_view),
    db: AsyncSession = Depends(get_db),
):
    return await service.success_rate(db)


@router.get("/salesperson-performance", response_model=SalespersonPerformanceResponse)
async def get_salesperson_performance(
    salesperson_id: uuid.UUID | None = Query(None, description="Defaults to the caller"),
    current_user: CurrentUser = Depends(_can_view),
    db: AsyncSession = Depends(get_db),
):
    return await service.salesperson_performance(db, salesperson_id or current_user.user_id)


@router.get("/client-type-distribution", response_model=list[ClientTypeCount])
async def get_client_type_distribution(
    current_user: CurrentUser = Depends(_can_view),
    db: AsyncSession = Depends(get_db),
):
    return await service.client_type_distribution(db)


@router.get("/monthly-trend", response_model=list[MonthlyTrendPoint])
async def get_monthly_trend(
    current_user: CurrentUser = Depends(_can_view),
    db: AsyncSession = Depends(get_db),
):
    return await service.monthly_trend(db)


@router.get("/overview", response_model=OverviewResponse)
async def get_overview(
    current_user: CurrentUser = Depends(_can_view),
    db: AsyncSession = Depends(get_db),
):
    """Case-status counts plus evaluation count and average score."""
    return await service.overview(db)


@router.get("/team-performance", response_model=list[TeamMemberPerformance])
async def get_team_performance(
    current_user: CurrentUser = Depends(_can_view),
    db: AsyncSession = Depends(get_db),
):
    return await service.team_performance(db)
