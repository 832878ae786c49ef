"""Scoring engine for the 20-item meeting conduct rubric.

Every item is scored 1 (not done), 3 (done) or 5 (done well), so a complete
evaluation totals between 20 and 100. The total maps onto five performance
bands. All functions here are pure.
"""

from dataclasses import dataclass

from salesdesk.models.enums import PerformanceLevel

VALID_ITEM_SCORES: frozenset[int] = frozenset({1, 3, 5})

ITEM_COUNT = 20
MIN_TOTAL = ITEM_COUNT * min(VALID_ITEM_SCORES)
MAX_TOTAL = ITEM_COUNT * max(VALID_ITEM_SCORES)


@dataclass(frozen=True)
class RubricItem:
    key: str
    category: str
    description: str


# ── Rubric ─────────────────────────────────────────────────────────────────

_NEEDS = "needs_discovery"
_DESIGN = "design_expertise"
_BUDGET = "budget_schedule_site"
_PRO = "professionalism_communication"

RUBRIC: tuple[RubricItem, ...] = (
    RubricItem("score1", _NEEDS, "Asks about space use, household members and living habits"),
    RubricItem("score2", _NEEDS, "Listens patiently and follows up on stated needs"),
    RubricItem("score3", _NEEDS, "Pins down the client's key requirements precisely"),
    RubricItem("score4", _DESIGN, "Draws out liked and disliked styles, colours and materials"),
    RubricItem("score5", _DESIGN, "Asks which furniture and appliance brands are kept or moved in"),
    RubricItem("score6", _DESIGN, "Explains the design concept with examples (website, past cases, images)"),
    RubricItem("score7", _DESIGN, "Demonstrates professional knowledge"),
    RubricItem("score8", _DESIGN, "Uses company material to present strengths (ISO9001, on-site layout checks, TTQS)"),
    RubricItem("score9", _BUDGET, "Asks about the budget and helps the client understand its allocation"),
    RubricItem("score10", _BUDGET, "Discusses design and construction timelines and any special timing needs"),
    RubricItem("score11", _BUDGET, "Notes that preliminary dimensions may differ and need careful site measurement"),
    RubricItem("score12", _BUDGET, "Asks the client's preferred follow-up frequency and channel"),
    RubricItem("score13", _BUDGET, "Explains the design process, stage milestones and expected deliverables"),
    RubricItem("score14", _PRO, "Demeanour, speech and eye contact convey a professional image"),
    RubricItem("score15", _PRO, "Answers questions persuasively or records them as follow-up items"),
    RubricItem("score16", _PRO, "Keeps the lead and steers the topics and pace of the meeting"),
    RubricItem("score17", _PRO, "Proactively proposes the next step (site measurement, another meeting)"),
    RubricItem("score18", _PRO, "The client's needs are visibly taken seriously"),
    RubricItem("score19", _PRO, "The meeting is smooth, pleasant and builds trust"),
    RubricItem("score20", _PRO, "Politely but firmly corrects unreasonable requests or misconceptions"),
)

SCORE_KEYS: tuple[str, ...] = tuple(item.key for item in RUBRIC)

# (upper bound inclusive, level), checked in order
_BANDS: tuple[tuple[int, PerformanceLevel], ...] = (
    (35, PerformanceLevel.NEEDS_IMPROVEMENT),
    (50, PerformanceLevel.BASIC),
    (65, PerformanceLevel.DEVELOPING),
    (80, PerformanceLevel.COMPETENT),
)


class ScoreValidationError(ValueError):
    """Raised when a score set is incomplete or holds a value outside {1, 3, 5}."""


@dataclass(frozen=True)
class ScoreResult:
    total_score: int
    performance_level: PerformanceLevel


def validate_scores(scores: dict[str, int]) -> None:
    missing = [key for key in SCORE_KEYS if key not in scores]
    if missing:
        raise ScoreValidationError(f"Missing rubric items: {', '.join(missing)}")
    unknown = sorted(set(scores) - set(SCORE_KEYS))
    if unknown:
        raise ScoreValidationError(f"Unknown rubric items: {', '.join(unknown)}")
    for key in SCORE_KEYS:
        value = scores[key]
        # bool is an int subclass
        if isinstance(value, bool) or value not in VALID_ITEM_SCORES:
            raise ScoreValidationError(f"{key} must be one of 1, 3, 5 (got {value!r})")


def compute_total_score(scores: dict[str, int]) -> int:
    validate_scores(scores)
    return sum(scores[key] for key in SCORE_KEYS)


def classify_performance(total: int) -> PerformanceLevel:
    for upper, level in _BANDS:
        if total <= upper:
            return level
    return PerformanceLevel.EXCELLENT


def score_evaluation(scores: dict[str, int]) -> ScoreResult:
    total = compute_total_score(scores)
    return ScoreResult(total_score=total, performance_level=classify_performance(total))
