"""Tests for the AI analysis router: lookup and manual trigger."""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.core.errors import ConflictError
from salesdesk.models.enums import ClientType
from salesdesk.models.meetings import AiAnalysis
from salesdesk.modules.ai_analysis import service
from salesdesk.services.analysis_adapter import FALLBACK_ANALYSIS, AnalysisAdapter, Fallback, Ok
from tests.conftest import (
    EVALUATOR,
    GUEST,
    OTHER_SALESPERSON,
    SALESPERSON,
    SAMPLE_ANALYSIS,
    make_analysis,
    make_meeting,
    override_auth,
)

pytestmark = pytest.mark.asyncio


async def _analysis_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(AiAnalysis))).scalar_one()


class TestGetByMeeting:
    async def test_returns_null_when_missing(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.get(f"/v1/ai-analysis/by-meeting/{meeting.id}")

        assert response.status_code == 200
        assert response.json() is None

    async def test_returns_stored_analysis(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db)
        await make_analysis(db, meeting, ClientType.QUALITY)
        await db.commit()
        override_auth(app, EVALUATOR)

        response = await client.get(f"/v1/ai-analysis/by-meeting/{meeting.id}")

        body = response.json()
        assert body["client_type"] == "quality"
        assert body["is_fallback"] is False
        assert body["analyzed_at"] is not None

    async def test_other_salespersons_meeting_is_404(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, OTHER_SALESPERSON)
        await make_analysis(db, meeting)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.get(f"/v1/ai-analysis/by-meeting/{meeting.id}")

        assert response.status_code == 404


class TestManualTrigger:
    async def test_analyzes_and_stores(
        self, app, client: AsyncClient, db: AsyncSession, adapter: AnalysisAdapter
    ):
        meeting = await make_meeting(db)
        await db.commit()
        override_auth(app, SALESPERSON)
        with patch.object(
            adapter, "analyze", new_callable=AsyncMock, return_value=Ok(SAMPLE_ANALYSIS)
        ) as analyze:
            response = await client.post(f"/v1/ai-analysis/{meeting.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["meeting_id"] == str(meeting.id)
        assert body["id"] is not None
        assert body["sentiment_score"] == SAMPLE_ANALYSIS.sentiment_score
        analyze.assert_awaited_once_with(
            meeting.transcript_text, meeting.meeting_stage, meeting.client_budget
        )
        assert await _analysis_count(db) == 1

    async def test_existing_analysis_is_409_without_model_call(
        self, app, client: AsyncClient, db: AsyncSession, adapter: AnalysisAdapter
    ):
        meeting = await make_meeting(db)
        await make_analysis(db, meeting)
        await db.commit()
        override_auth(app, SALESPERSON)
        with patch.object(adapter, "analyze", new_callable=AsyncMock) as analyze:
            response = await client.post(f"/v1/ai-analysis/{meeting.id}")

        assert response.status_code == 409
        assert response.json()["message"] == "This meeting already has an analysis"
        analyze.assert_not_awaited()

    async def test_fallback_is_returned_but_not_stored(
        self, app, client: AsyncClient, db: AsyncSession, adapter: AnalysisAdapter
    ):
        meeting = await make_meeting(db, GUEST)
        await db.commit()
        override_auth(app, GUEST)
        outcome = Fallback(FALLBACK_ANALYSIS, reason="timeout")
        with patch.object(adapter, "analyze", new_callable=AsyncMock, return_value=outcome):
            response = await client.post(f"/v1/ai-analysis/{meeting.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["is_fallback"] is True
        assert body["id"] is None
        assert body["keywords"] == FALLBACK_ANALYSIS.keywords
        assert await _analysis_count(db) == 0

    async def test_unknown_meeting_is_404(self, app, client: AsyncClient, adapter: AnalysisAdapter):
        override_auth(app, EVALUATOR)
        with patch.object(adapter, "analyze", new_callable=AsyncMock) as analyze:
            response = await client.post(f"/v1/ai-analysis/{uuid.uuid4()}")

        assert response.status_code == 404
        analyze.assert_not_awaited()


class TestOneAnalysisPerMeeting:
    async def test_unique_index_rejects_second_row(self, db: AsyncSession):
        meeting = await make_meeting(db)
        await make_analysis(db, meeting)

        with pytest.raises(IntegrityError):
            await make_analysis(db, meeting, ClientType.BUDGET)
        await db.rollback()

    async def test_second_save_becomes_conflict(self, db: AsyncSession):
        meeting = await make_meeting(db)
        await service.save_analysis(db, meeting.id, SAMPLE_ANALYSIS)
        await db.commit()

        with pytest.raises(ConflictError, match="already has an analysis"):
            await service.save_analysis(db, meeting.id, SAMPLE_ANALYSIS)

        assert await _analysis_count(db) == 1

    async def test_concurrent_trigger_is_409(
        self, app, client: AsyncClient, db: AsyncSession, adapter: AnalysisAdapter
    ):
        meeting = await make_meeting(db)
        await make_analysis(db, meeting, ClientType.QUALITY)
        await db.commit()
        override_auth(app, SALESPERSON)

        # The pre-check misses the row, as it would for a racing request
        with (
            patch.object(service, "get_by_meeting", new_callable=AsyncMock, return_value=None),
            patch.object(adapter, "analyze", new_callable=AsyncMock, return_value=Ok(SAMPLE_ANALYSIS)),
        ):
            response = await client.post(f"/v1/ai-analysis/{meeting.id}")

        assert response.status_code == 409
        assert await _analysis_count(db) == 1
