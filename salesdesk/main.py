"""SalesDesk API application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from salesdesk import __version__
from salesdesk.auth.router import router as auth_router
from salesdesk.core.config import Settings, settings as default_settings
from salesdesk.core.database import Database
from salesdesk.core.errors import register_exception_handlers
from salesdesk.core.logging import configure_logging
from salesdesk.core.sentry import init_sentry
from salesdesk.middleware.audit import AuditMiddleware
from salesdesk.middleware.logging import RequestLoggingMiddleware
from salesdesk.middleware.security import RequestBodySizeLimitMiddleware, SecurityHeadersMiddleware
from salesdesk.modules.ai_analysis.router import router as ai_analysis_router
from salesdesk.modules.evaluations.router import router as evaluations_router
from salesdesk.modules.failed_cases.router import router as failed_cases_router
from salesdesk.modules.meetings.router import router as meetings_router
from salesdesk.modules.statistics.router import router as statistics_router
from salesdesk.modules.users.router import router as users_router
from salesdesk.services.analysis_adapter import AnalysisAdapter

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    database: Database = app.state.database
    logger.info("Starting SalesDesk API", env=app.state.settings.APP_ENV)
    database.open()
    yield
    logger.info("Shutting down SalesDesk API")
    await database.close()


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    analysis_adapter: AnalysisAdapter | None = None,
) -> FastAPI:
    """Build the API. The database client and analysis adapter can be injected (tests)."""
    settings = settings or default_settings
    configure_logging(settings)
    # Sentry must be initialised before the FastAPI app is created
    init_sentry(settings.SENTRY_DSN, settings.SENTRY_ENVIRONMENT, settings.APP_VERSION)

    is_prod = settings.APP_ENV == "production"

    app = FastAPI(
        title="SalesDesk API",
        description="Meeting logs, conduct evaluations and AI analysis for interior-design sales teams.",
        version=__version__,
        docs_url=None if is_prod else "/docs",
        redoc_url=None if is_prod else "/redoc",
        openapi_url=None if is_prod else "/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database(
        settings.DATABASE_URL,
        echo=settings.APP_DEBUG,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
    )
    app.state.analysis_adapter = analysis_adapter or AnalysisAdapter.from_settings(settings)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(AuditMiddleware)
    # Added last = outermost = first to see requests, last to touch responses
    app.add_middleware(
        RequestBodySizeLimitMiddleware,  # type: ignore[arg-type]
        max_bytes=settings.MAX_REQUEST_BODY_BYTES,
    )
    app.add_middleware(
        SecurityHeadersMiddleware,  # type: ignore[arg-type]
        is_production=is_prod,
    )
    app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]

    @app.get("/health")
    async def health_check(request: Request) -> dict:
        """Probe the database; ``degraded`` when it cannot answer."""
        db_client: Database = request.app.state.database
        checks: dict[str, dict] = {}
        try:
            async with db_client.session() as db:
                await db.execute(text("SELECT 1"))
            checks["database"] = {"status": "healthy"}
        except Exception as exc:
            checks["database"] = {"status": "unhealthy", "error": str(exc)}

        overall = "healthy" if all(c["status"] == "healthy" for c in checks.values()) else "degraded"
        return {"status": overall, "service": "salesdesk-api", "version": __version__, "checks": checks}

    # ── /v1 versioned router ──────────────────────────────────────────────────

    api_v1 = APIRouter(prefix="/v1")
    api_v1.include_router(auth_router)
    api_v1.include_router(meetings_router)
    api_v1.include_router(evaluations_router)
    api_v1.include_router(ai_analysis_router)
    api_v1.include_router(failed_cases_router)
    api_v1.include_router(statistics_router)
    api_v1.include_router(users_router)
    app.include_router(api_v1)

    return app


app = create_app()
