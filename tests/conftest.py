"""Shared test fixtures for the SalesDesk API test suite."""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from salesdesk.auth.dependencies import get_current_user
from salesdesk.core.database import Database
from salesdesk.main import create_app
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
from salesdesk.models.meetings import AiAnalysis, Evaluation, Meeting
from salesdesk.modules.evaluations.scoring import SCORE_KEYS
from salesdesk.schemas.auth import CurrentUser
from salesdesk.services.analysis_adapter import AnalysisAdapter, AnalysisResult

# ── Test Data ─────────────────────────────────────────────────────────────

ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
EVALUATOR_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
SALESPERSON_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
OTHER_SALESPERSON_ID = uuid.UUID("00000000-0000-0000-0000-000000000004")
GUEST_ID = uuid.UUID("00000000-0000-0000-0000-000000000005")

ADMIN = CurrentUser(user_id=ADMIN_ID, role=UserRole.ADMIN, name="Alice Admin", username="alice")
EVALUATOR = CurrentUser(user_id=EVALUATOR_ID, role=UserRole.EVALUATOR, name="Eve Evaluator", username="eve")
SALESPERSON = CurrentUser(
    user_id=SALESPERSON_ID, role=UserRole.SALESPERSON, name="Sam Sales", username="sam"
)
OTHER_SALESPERSON = CurrentUser(
    user_id=OTHER_SALESPERSON_ID, role=UserRole.SALESPERSON, name="Olive Other", username="olive"
)
GUEST = CurrentUser(user_id=GUEST_ID, role=UserRole.GUEST, name="Gus Guest", username="gus")

ALL_USERS = (ADMIN, EVALUATOR, SALESPERSON, OTHER_SALESPERSON, GUEST)

SAMPLE_TRANSCRIPT = (
    "Salesperson: Thanks for coming in. How many people will live in the apartment?\n"
    "Client: Two adults and a cat. We like warm wood and a quiet Nordic style.\n"
    "Salesperson: What budget did you have in mind for the renovation?\n"
    "Client: Around two million, and we need to move in before March."
)

SAMPLE_ANALYSIS = AnalysisResult(
    keywords=["nordic", "wood", "budget", "move-in date"],
    sentiment_overall=SentimentLabel.POSITIVE,
    sentiment_score=78,
    success_factors=["Asked about household early", "Clarified the budget"],
    question_quality=72,
    response_completeness=65,
    professional_term_usage=60,
    control_level=70,
    client_type=ClientType.TIMELINE,
    client_type_confidence=81,
    improvement_suggestions=["Show past Nordic projects", "Propose a site measurement date"],
)


def all_scores(value: int = 3) -> dict[str, int]:
    return {key: value for key in SCORE_KEYS}


# ── Helpers ───────────────────────────────────────────────────────────────


def override_auth(app: FastAPI, user: CurrentUser) -> None:
    """Make every request on ``app`` run as ``user``."""
    app.dependency_overrides[get_current_user] = lambda: user


async def make_meeting(
    db: AsyncSession,
    owner: CurrentUser = SALESPERSON,
    *,
    meeting_date: datetime | None = None,
    case_status: CaseStatus = CaseStatus.IN_PROGRESS,
    **overrides: Any,
) -> Meeting:
    fields: dict[str, Any] = {
        "project_name": "Xinyi Nordic Apartment",
        "client_name": "Mr. Lin",
        "client_budget": 2_000_000,
        "meeting_stage": MeetingStage.INITIAL,
        "transcript_source": TranscriptSource.MANUAL,
        "transcript_text": SAMPLE_TRANSCRIPT,
    }
    fields.update(overrides)
    meeting = Meeting(
        id=uuid.uuid4(),
        salesperson_id=owner.user_id,
        salesperson_name=owner.name,
        meeting_date=meeting_date or datetime(2026, 5, 10, 14, 0, tzinfo=timezone.utc),
        case_status=case_status,
        **fields,
    )
    db.add(meeting)
    await db.flush()
    return meeting


async def make_evaluation(
    db: AsyncSession,
    meeting: Meeting,
    *,
    total_score: int = 60,
    performance_level: PerformanceLevel = PerformanceLevel.DEVELOPING,
) -> Evaluation:
    evaluation = Evaluation(
        id=uuid.uuid4(),
        meeting_id=meeting.id,
        evaluator_id=EVALUATOR_ID,
        evaluator_name=EVALUATOR.name,
        total_score=total_score,
        performance_level=performance_level,
        **all_scores(3),
    )
    db.add(evaluation)
    await db.flush()
    return evaluation


async def make_analysis(
    db: AsyncSession,
    meeting: Meeting,
    client_type: ClientType = ClientType.TIMELINE,
) -> AiAnalysis:
    analysis = AiAnalysis(
        id=uuid.uuid4(),
        meeting_id=meeting.id,
        **SAMPLE_ANALYSIS.model_copy(update={"client_type": client_type}).model_dump(),
    )
    db.add(analysis)
    await db.flush()
    return analysis


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory SQLite database per test, shared by every session."""
    database = Database(
        "sqlite+aiosqlite://",
        engine_kwargs={
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        },
    )
    database.open()
    await database.create_all()
    try:
        yield database
    finally:
        await database.close()


@pytest.fixture
async def db(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
async def users(db: AsyncSession) -> list[User]:
    """One user row per sample identity (no passwords, hashing is slow)."""
    rows = [
        User(
            id=u.user_id,
            username=u.username,
            name=u.name,
            role=u.role,
            login_method=LoginMethod.PASSWORD,
        )
        for u in ALL_USERS
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.fixture
def adapter() -> AnalysisAdapter:
    return AnalysisAdapter(model="gemini/test-model", api_key="test-key", timeout=5.0)


@pytest.fixture
def app(database: Database, adapter: AnalysisAdapter) -> FastAPI:
    application = create_app(database=database, analysis_adapter=adapter)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
