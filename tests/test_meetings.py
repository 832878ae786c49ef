"""Tests for the meetings module: create + analysis, scoping, status, delete."""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.core.errors import NOT_ADMIN_ERR_MSG
from salesdesk.models.enums import CaseStatus, MeetingStage
from salesdesk.models.meetings import AiAnalysis, Evaluation, FailedCase, Meeting
from salesdesk.services.analysis_adapter import FALLBACK_ANALYSIS, AnalysisAdapter, Fallback, Ok
from tests.conftest import (
    ADMIN,
    EVALUATOR,
    GUEST,
    OTHER_SALESPERSON,
    SALESPERSON,
    SAMPLE_ANALYSIS,
    SAMPLE_TRANSCRIPT,
    make_analysis,
    make_evaluation,
    make_meeting,
    override_auth,
)

pytestmark = pytest.mark.asyncio


def _create_payload(**overrides) -> dict:
    payload = {
        "project_name": "Xinyi Nordic Apartment",
        "client_name": "Mr. Lin",
        "client_budget": 2_000_000,
        "project_type": "residence",
        "meeting_stage": "initial",
        "meeting_date": "2026-05-10T14:00:00Z",
        "transcript_source": "manual",
        "transcript_text": SAMPLE_TRANSCRIPT,
    }
    payload.update(overrides)
    return payload


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


class TestCreateMeeting:
    async def test_create_stores_meeting_and_analysis(
        self, app, client: AsyncClient, db: AsyncSession, adapter: AnalysisAdapter, users
    ):
        override_auth(app, SALESPERSON)
        with patch.object(
            adapter, "analyze", new_callable=AsyncMock, return_value=Ok(SAMPLE_ANALYSIS)
        ) as analyze:
            response = await client.post("/v1/meetings", json=_create_payload())

        assert response.status_code == 201
        body = response.json()
        assert body["analysis_status"] == "completed"
        analyze.assert_awaited_once_with(SAMPLE_TRANSCRIPT, MeetingStage.INITIAL, 2_000_000)

        meeting_id = uuid.UUID(body["meeting_id"])
        meeting = await db.get(Meeting, meeting_id)
        assert meeting.salesperson_id == SALESPERSON.user_id
        assert meeting.salesperson_name == SALESPERSON.name
        assert meeting.case_status == CaseStatus.IN_PROGRESS

        stmt = select(AiAnalysis).where(AiAnalysis.meeting_id == meeting_id)
        analysis = (await db.execute(stmt)).scalar_one()
        assert analysis.client_type == SAMPLE_ANALYSIS.client_type
        assert analysis.keywords == SAMPLE_ANALYSIS.keywords

    async def test_fallback_keeps_meeting_without_analysis(
        self, app, client: AsyncClient, db: AsyncSession, adapter: AnalysisAdapter, users
    ):
        override_auth(app, SALESPERSON)
        outcome = Fallback(FALLBACK_ANALYSIS, reason="timeout")
        with patch.object(adapter, "analyze", new_callable=AsyncMock, return_value=outcome):
            response = await client.post("/v1/meetings", json=_create_payload())

        assert response.status_code == 201
        assert response.json()["analysis_status"] == "fallback"
        assert await _count(db, Meeting) == 1
        assert await _count(db, AiAnalysis) == 0

    async def test_missing_project_name_is_422(self, app, client: AsyncClient, adapter: AnalysisAdapter):
        override_auth(app, SALESPERSON)
        payload = _create_payload()
        del payload["project_name"]
        with patch.object(adapter, "analyze", new_callable=AsyncMock) as analyze:
            response = await client.post("/v1/meetings", json=payload)

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
        analyze.assert_not_awaited()

    async def test_unknown_stage_is_422(self, app, client: AsyncClient):
        override_auth(app, SALESPERSON)
        response = await client.post("/v1/meetings", json=_create_payload(meeting_stage="fourth"))
        assert response.status_code == 422

    @pytest.mark.parametrize("budget", [-1, 2_147_483_648])
    async def test_budget_outside_column_range_is_422(
        self, app, client: AsyncClient, db: AsyncSession, adapter: AnalysisAdapter, budget
    ):
        override_auth(app, SALESPERSON)
        with patch.object(adapter, "analyze", new_callable=AsyncMock) as analyze:
            response = await client.post("/v1/meetings", json=_create_payload(client_budget=budget))

        assert response.status_code == 422
        analyze.assert_not_awaited()
        assert await _count(db, Meeting) == 0

    async def test_largest_budget_is_accepted(self, app, client: AsyncClient, adapter: AnalysisAdapter):
        override_auth(app, SALESPERSON)
        outcome = Fallback(FALLBACK_ANALYSIS, reason="timeout")
        with patch.object(adapter, "analyze", new_callable=AsyncMock, return_value=outcome):
            response = await client.post("/v1/meetings", json=_create_payload(client_budget=2_147_483_647))

        assert response.status_code == 201


class TestMeetingScoping:
    async def test_salesperson_lists_only_own_meetings_newest_first(
        self, app, client: AsyncClient, db: AsyncSession
    ):
        older = await make_meeting(db, SALESPERSON, meeting_date=datetime(2026, 3, 1, tzinfo=timezone.utc))
        newer = await make_meeting(db, SALESPERSON, meeting_date=datetime(2026, 4, 1, tzinfo=timezone.utc))
        await make_meeting(db, OTHER_SALESPERSON)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.get("/v1/meetings")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert [item["id"] for item in body["items"]] == [str(newer.id), str(older.id)]

    @pytest.mark.parametrize("user", [ADMIN, EVALUATOR])
    async def test_evaluator_and_admin_see_all(self, app, client: AsyncClient, db: AsyncSession, user):
        await make_meeting(db, SALESPERSON)
        await make_meeting(db, OTHER_SALESPERSON)
        await db.commit()
        override_auth(app, user)

        response = await client.get("/v1/meetings")

        assert response.json()["total"] == 2

    async def test_guest_sees_nothing_of_others(self, app, client: AsyncClient, db: AsyncSession):
        await make_meeting(db, SALESPERSON)
        await db.commit()
        override_auth(app, GUEST)

        response = await client.get("/v1/meetings")

        assert response.json() == {"items": [], "total": 0}

    async def test_get_own_meeting(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, SALESPERSON)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.get(f"/v1/meetings/{meeting.id}")

        assert response.status_code == 200
        assert response.json()["project_name"] == meeting.project_name

    async def test_get_other_salespersons_meeting_is_404(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, OTHER_SALESPERSON)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.get(f"/v1/meetings/{meeting.id}")

        assert response.status_code == 404

    async def test_get_unknown_meeting_is_404(self, app, client: AsyncClient):
        override_auth(app, ADMIN)
        response = await client.get(f"/v1/meetings/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["message"] == "Meeting not found"


class TestUpdateStatus:
    async def test_any_transition_is_allowed(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, SALESPERSON, case_status=CaseStatus.SUCCESS)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.patch(
            f"/v1/meetings/{meeting.id}/status", json={"case_status": "in_progress"}
        )

        assert response.status_code == 200
        assert response.json()["case_status"] == "in_progress"

    async def test_invalid_status_is_422(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, SALESPERSON)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.patch(f"/v1/meetings/{meeting.id}/status", json={"case_status": "won"})

        assert response.status_code == 422

    async def test_cannot_update_other_salespersons_meeting(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, OTHER_SALESPERSON)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.patch(f"/v1/meetings/{meeting.id}/status", json={"case_status": "success"})

        assert response.status_code == 404
        db.expire_all()
        refreshed = await db.get(Meeting, meeting.id)
        assert refreshed.case_status == CaseStatus.IN_PROGRESS


class TestDeleteMeeting:
    async def test_salesperson_cannot_delete(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, SALESPERSON)
        await db.commit()
        override_auth(app, SALESPERSON)

        response = await client.delete(f"/v1/meetings/{meeting.id}")

        assert response.status_code == 403
        assert response.json()["message"] == NOT_ADMIN_ERR_MSG

    async def test_admin_delete_removes_dependents(self, app, client: AsyncClient, db: AsyncSession):
        meeting = await make_meeting(db, SALESPERSON)
        await make_evaluation(db, meeting)
        await make_analysis(db, meeting)
        db.add(
            FailedCase(
                id=uuid.uuid4(),
                meeting_id=meeting.id,
                salesperson_id=SALESPERSON.user_id,
                failure_stage=MeetingStage.INITIAL,
                failure_reasons=["budget"],
                detailed_analysis="Client chose a cheaper studio.",
            )
        )
        survivor = await make_meeting(db, OTHER_SALESPERSON)
        await make_evaluation(db, survivor)
        await db.commit()
        override_auth(app, ADMIN)

        response = await client.delete(f"/v1/meetings/{meeting.id}")

        assert response.status_code == 204
        db.expire_all()
        assert await db.get(Meeting, meeting.id) is None
        assert await _count(db, Meeting) == 1
        assert await _count(db, Evaluation) == 1
        assert await _count(db, AiAnalysis) == 0
        assert await _count(db, FailedCase) == 0

    async def test_delete_unknown_is_404(self, app, client: AsyncClient):
        override_auth(app, ADMIN)
        response = await client.delete(f"/v1/meetings/{uuid.uuid4()}")
        assert response.status_code == 404


class TestSuggestProjectName:
    async def test_returns_model_name(self, app, client: AsyncClient, adapter: AnalysisAdapter):
        override_auth(app, SALESPERSON)
        outcome = Ok("Xinyi Nordic Home")
        with patch.object(adapter, "suggest_name", new_callable=AsyncMock, return_value=outcome):
            response = await client.post(
                "/v1/meetings/suggest-project-name", json={"transcript_text": SAMPLE_TRANSCRIPT}
            )

        assert response.status_code == 200
        assert response.json() == {"project_name": "Xinyi Nordic Home", "is_fallback": False}

    async def test_fallback_name_is_flagged(self, app, client: AsyncClient, adapter: AnalysisAdapter):
        override_auth(app, GUEST)
        outcome = Fallback("Untitled project", reason="timeout")
        with patch.object(adapter, "suggest_name", new_callable=AsyncMock, return_value=outcome):
            response = await client.post(
                "/v1/meetings/suggest-project-name", json={"transcript_text": SAMPLE_TRANSCRIPT}
            )

        assert response.json() == {"project_name": "Untitled project", "is_fallback": True}

    async def test_empty_transcript_is_422(self, app, client: AsyncClient):
        override_auth(app, SALESPERSON)
        response = await client.post("/v1/meetings/suggest-project-name", json={"transcript_text": ""})
        assert response.status_code == 422
