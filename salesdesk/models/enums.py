"""Domain enums shared by models, schemas and services."""

import enum


# ── Users ────────────────────────────────────────────────────────────────────


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EVALUATOR = "evaluator"
    SALESPERSON = "salesperson"
    GUEST = "guest"


class LoginMethod(str, enum.Enum):
    PASSWORD = "password"
    OAUTH = "oauth"


# ── Meetings ─────────────────────────────────────────────────────────────────


class MeetingStage(str, enum.Enum):
    """Ordered sales funnel."""

    INITIAL = "initial"
    SECOND = "second"
    THIRD = "third"
    DESIGN_CONTRACT = "design_contract"
    CONSTRUCTION_CONTRACT = "construction_contract"


class TranscriptSource(str, enum.Enum):
    RECORDING = "recording"
    UPLOAD = "upload"
    MANUAL = "manual"


class CaseStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILED = "failed"


# ── Evaluations ──────────────────────────────────────────────────────────────


class PerformanceLevel(str, enum.Enum):
    NEEDS_IMPROVEMENT = "needs_improvement"
    BASIC = "basic"
    DEVELOPING = "developing"
    COMPETENT = "competent"
    EXCELLENT = "excellent"


# ── AI Analysis ──────────────────────────────────────────────────────────────


class SentimentLabel(str, enum.Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ClientType(str, enum.Enum):
    BUDGET = "budget"
    DESIGN = "design"
    QUALITY = "quality"
    TIMELINE = "timeline"
    HESITANT = "hesitant"
