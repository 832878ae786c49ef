"""Statistics service: read-only aggregates over meetings, evaluations and analyses.

Every function is idempotent and returns zeros or empty lists on an empty
database.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.models.enums import CaseStatus
from salesdesk.models.meetings import AiAnalysis, Evaluation, Meeting


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 2) if total else 0.0


async def _status_counts(db: AsyncSession, salesperson_id: uuid.UUID | None = None) -> dict[CaseStatus, int]:
    stmt = select(Meeting.case_status, func.count(Meeting.id)).group_by(Meeting.case_status)
    if salesperson_id is not None:
        stmt = stmt.where(Meeting.salesperson_id == salesperson_id)
    rows = (await db.execute(stmt)).all()
    return {status: count for status, count in rows}


async def success_rate(db: AsyncSession) -> dict[str, Any]:
    counts = await _status_counts(db)
    total = sum(counts.values())
    success = counts.get(CaseStatus.SUCCESS, 0)
    return {
        "total": total,
        "success": success,
        "failed": counts.get(CaseStatus.FAILED, 0),
        "in_progress": counts.get(CaseStatus.IN_PROGRESS, 0),
        "success_rate": _rate(success, total),
    }


async def salesperson_performance(db: AsyncSession, salesperson_id: uuid.UUID) -> dict[str, Any]:
    """Meeting outcomes and average evaluation score for one salesperson.

    Evaluations are attributed through the meeting owner, not the evaluator.
    """
    counts = await _status_counts(db, salesperson_id)
    total = sum(counts.values())
    success = counts.get(CaseStatus.SUCCESS, 0)

    avg_stmt = (
        select(func.avg(Evaluation.total_score))
        .join(Meeting, Evaluation.meeting_id == Meeting.id)
        .where(Meeting.salesperson_id == salesperson_id)
    )
    avg_score = (await db.execute(avg_stmt)).scalar_one_or_none()

    return {
        "salesperson_id": salesperson_id,
        "total_meetings": total,
        "success_count": success,
        "failed_count": counts.get(CaseStatus.FAILED, 0),
        "success_rate": _rate(success, total),
        "avg_score": round(float(avg_score), 2) if avg_score is not None else 0.0,
    }


async def client_type_distribution(db: AsyncSession) -> list[dict[str, Any]]:
    stmt = select(AiAnalysis.client_type, func.count(AiAnalysis.id)).group_by(AiAnalysis.client_type)
    rows = (await db.execute(stmt)).all()
    items = [{"client_type": client_type, "count": count} for client_type, count in rows]
    items.sort(key=lambda item: (-item["count"], item["client_type"].value))
    return items


async def monthly_trend(db: AsyncSession) -> list[dict[str, Any]]:
    """Meetings and successes per calendar month of ``meeting_date``, oldest first."""
    rows = (await db.execute(select(Meeting.meeting_date, Meeting.case_status))).all()
    # Bucketed in Python: month truncation differs between PostgreSQL and SQLite
    buckets: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for meeting_date, case_status in rows:
        bucket = buckets[meeting_date.strftime("%Y-%m")]
        bucket[0] += 1
        if case_status == CaseStatus.SUCCESS:
            bucket[1] += 1
    return [
        {"month": month, "count": count, "success_count": success}
        for month, (count, success) in sorted(buckets.items())
    ]


async def overview(db: AsyncSession) -> dict[str, Any]:
    counts = await _status_counts(db)
    eval_count, eval_avg = (
        await db.execute(select(func.count(Evaluation.id), func.avg(Evaluation.total_score)))
    ).one()
    return {
        "case_status": [
            {"status": status, "count": counts[status]} for status in CaseStatus if status in counts
        ],
        "evaluations": {
            "count": eval_count or 0,
            "avg_score": round(float(eval_avg), 2) if eval_avg is not None else 0.0,
        },
    }


async def team_performance(db: AsyncSession) -> list[dict[str, Any]]:
    """One row per salesperson who owns at least one meeting, busiest first."""
    stmt = select(
        Meeting.salesperson_id,
        func.max(Meeting.salesperson_name),
        Meeting.case_status,
        func.count(Meeting.id),
    ).group_by(Meeting.salesperson_id, Meeting.case_status)
    rows = (await db.execute(stmt)).all()

    team: dict[uuid.UUID, dict[str, Any]] = {}
    for salesperson_id, name, case_status, count in rows:
        entry = team.setdefault(
            salesperson_id,
            {
                "salesperson_id": salesperson_id,
                "salesperson_name": name,
                "total": 0,
                "success": 0,
                "failed": 0,
                "in_progress": 0,
            },
        )
        entry["salesperson_name"] = entry["salesperson_name"] or name
        entry["total"] += count
        entry[case_status.value] += count
    return sorted(team.values(), key=lambda e: (-e["total"], e["salesperson_name"] or ""))
