"""initial_schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels = None
depends_on = None

# Enum columns store member names
_ENUMS = {
    "userrole": ("ADMIN", "EVALUATOR", "SALESPERSON", "GUEST"),
    "loginmethod": ("PASSWORD", "OAUTH"),
    "meetingstage": ("INITIAL", "SECOND", "THIRD", "DESIGN_CONTRACT", "CONSTRUCTION_CONTRACT"),
    "transcriptsource": ("RECORDING", "UPLOAD", "MANUAL"),
    "casestatus": ("IN_PROGRESS", "SUCCESS", "FAILED"),
    "performancelevel": ("NEEDS_IMPROVEMENT", "BASIC", "DEVELOPING", "COMPETENT", "EXCELLENT"),
    "sentimentlabel": ("POSITIVE", "NEUTRAL", "NEGATIVE"),
    "clienttype": ("BUDGET", "DESIGN", "QUALITY", "TIMELINE", "HESITANT"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*_ENUMS[name], name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _meeting_fk() -> sa.Column:
    return sa.Column(
        "meeting_id",
        sa.Uuid(),
        sa.ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in _ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(64)),
        sa.Column("open_id", sa.String(64)),
        sa.Column("name", sa.String(255)),
        sa.Column("email", sa.String(320)),
        sa.Column("login_method", _enum("loginmethod"), nullable=False),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("role", _enum("userrole"), nullable=False),
        sa.Column("department", sa.String(100)),
        sa.Column("last_signed_in", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_open_id", "users", ["open_id"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    # ── meetings ──────────────────────────────────────────────────────────────
    op.create_table(
        "meetings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "salesperson_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("salesperson_name", sa.String(255)),
        sa.Column("project_name", sa.String(255), nullable=False),
        sa.Column("sales_designer", sa.String(255)),
        sa.Column("drawing_designer", sa.String(255)),
        sa.Column("client_name", sa.String(255)),
        sa.Column("client_contact", sa.String(255)),
        sa.Column("client_budget", sa.Integer()),
        sa.Column("project_type", sa.String(100)),
        sa.Column("meeting_stage", _enum("meetingstage"), nullable=False),
        sa.Column("meeting_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("transcript_source", _enum("transcriptsource"), nullable=False),
        sa.Column("transcript_text", sa.Text(), nullable=False),
        sa.Column("audio_file_url", sa.String(1024)),
        sa.Column("case_status", _enum("casestatus"), nullable=False),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_meetings_salesperson_id", "meetings", ["salesperson_id"])
    op.create_index("ix_meetings_meeting_date", "meetings", ["meeting_date"])
    op.create_index("ix_meetings_case_status", "meetings", ["case_status"])

    # ── evaluations ───────────────────────────────────────────────────────────
    op.create_table(
        "evaluations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _meeting_fk(),
        sa.Column(
            "evaluator_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("evaluator_name", sa.String(255)),
        *[sa.Column(f"score{i}", sa.Integer(), nullable=False) for i in range(1, 21)],
        sa.Column("total_score", sa.Integer(), nullable=False),
        sa.Column("performance_level", _enum("performancelevel"), nullable=False),
        sa.Column("manual_notes", sa.Text()),
        sa.Column("evaluated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_evaluations_meeting_id", "evaluations", ["meeting_id"], unique=True)
    op.create_index("ix_evaluations_evaluator_id", "evaluations", ["evaluator_id"])

    # ── ai_analyses ───────────────────────────────────────────────────────────
    op.create_table(
        "ai_analyses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _meeting_fk(),
        sa.Column("keywords", sa.JSON(), nullable=False),
        sa.Column("sentiment_overall", _enum("sentimentlabel"), nullable=False),
        sa.Column("sentiment_score", sa.Integer(), nullable=False),
        sa.Column("success_factors", sa.JSON(), nullable=False),
        sa.Column("question_quality", sa.Integer(), nullable=False),
        sa.Column("response_completeness", sa.Integer(), nullable=False),
        sa.Column("professional_term_usage", sa.Integer(), nullable=False),
        sa.Column("control_level", sa.Integer(), nullable=False),
        sa.Column("client_type", _enum("clienttype"), nullable=False),
        sa.Column("client_type_confidence", sa.Integer(), nullable=False),
        sa.Column("improvement_suggestions", sa.JSON(), nullable=False),
        sa.Column("analyzed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_ai_analyses_meeting_id", "ai_analyses", ["meeting_id"], unique=True)

    # ── failed_cases ──────────────────────────────────────────────────────────
    op.create_table(
        "failed_cases",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _meeting_fk(),
        sa.Column(
            "salesperson_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("client_name", sa.String(255)),
        sa.Column("failure_stage", _enum("meetingstage"), nullable=False),
        sa.Column("failure_reasons", sa.JSON(), nullable=False),
        sa.Column("detailed_analysis", sa.Text(), nullable=False),
        sa.Column("lessons_learned", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_failed_cases_meeting_id", "failed_cases", ["meeting_id"])
    op.create_index("ix_failed_cases_salesperson_id", "failed_cases", ["salesperson_id"])


def downgrade() -> None:
    op.drop_table("failed_cases")
    op.drop_table("ai_analyses")
    op.drop_table("evaluations")
    op.drop_table("meetings")
    op.drop_table("users")

    bind = op.get_bind()
    for name in reversed(list(_ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
