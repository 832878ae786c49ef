"""Analysis adapter: structured transcript analysis via litellm.

Every public method makes a single model call with the configured transport
timeout and never raises. A failed call (network error, timeout, empty
content, unparseable JSON, schema mismatch) is returned as a ``Fallback``
carrying a fixed, clearly labelled default, so callers can tell a degraded
answer from a real one.
"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

import litellm
import structlog
from fastapi import Request
from pydantic import BaseModel, Field

from salesdesk.core.config import Settings
from salesdesk.models.enums import ClientType, MeetingStage, SentimentLabel
from salesdesk.modules.evaluations.scoring import RUBRIC, SCORE_KEYS, validate_scores

logger = structlog.get_logger()

litellm.set_verbose = False

T = TypeVar("T")


# ── Outcomes ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    degraded: ClassVar[bool] = False


@dataclass(frozen=True)
class Fallback(Generic[T]):
    value: T
    reason: str
    degraded: ClassVar[bool] = True


# ── Result shape ──────────────────────────────────────────────────────────


class AnalysisResult(BaseModel):
    keywords: list[str]
    sentiment_overall: SentimentLabel
    sentiment_score: int = Field(ge=0, le=100)
    success_factors: list[str]
    question_quality: int = Field(ge=0, le=100)
    response_completeness: int = Field(ge=0, le=100)
    professional_term_usage: int = Field(ge=0, le=100)
    control_level: int = Field(ge=0, le=100)
    client_type: ClientType
    client_type_confidence: int = Field(ge=0, le=100)
    improvement_suggestions: list[str]


FALLBACK_ANALYSIS = AnalysisResult(
    keywords=["analysis failed"],
    sentiment_overall=SentimentLabel.NEUTRAL,
    sentiment_score=50,
    success_factors=["AI analysis temporarily unavailable"],
    question_quality=50,
    response_completeness=50,
    professional_term_usage=50,
    control_level=50,
    client_type=ClientType.HESITANT,
    client_type_confidence=0,
    improvement_suggestions=["Please retry the AI analysis later"],
)

FALLBACK_PROJECT_NAME = "Untitled project"

FALLBACK_EVALUATION: dict[str, int] = {key: 3 for key in SCORE_KEYS}


# ── Prompts ───────────────────────────────────────────────────────────────

_ANALYSIS_SYSTEM_PROMPT = """You are an expert analyst of interior-design sales conversations between a salesperson and a client.
Analyse the conversation along these dimensions:

1. Keywords: the important terms raised (style, materials, budget, schedule, ...), 5-10 items.
2. Sentiment: the overall tone (positive / neutral / negative) and a 0-100 score, higher is more positive.
3. Success factors: what helped or hindered closing the deal.
4. Conversation quality, each 0-100:
   - question_quality: use and depth of open questions
   - response_completeness: whether answers were complete and resolved the client's concerns
   - professional_term_usage: how well professional knowledge was shown
   - control_level: how well the salesperson steered the conversation
5. Client type:
   - budget: price sensitive, keeps returning to cost
   - design: values aesthetics and creativity
   - quality: focuses on materials, workmanship and build quality
   - timeline: under time pressure, focused on completion dates
   - hesitant: needs several meetings, slow to decide
6. Improvement suggestions: 3-5 concrete, actionable improvements for the weakest areas.

Be objective and practical."""

_NAME_SYSTEM_PROMPT = """You are an interior-design sales assistant who names projects from meeting transcripts.

Naming rules:
1. Prefer the location the client mentions (district, street, building).
2. Combine it with the project type (residence, retail, office, luxury home, ...).
3. Add a distinctive feature (layout, style) when there is one.
4. Keep it short, two to six words.

Examples: "Xinyi Luxury Residence", "Banqiao New Build", "Neihu Three-Bedroom Renovation".

Reply with the project name only, no other text."""

_EVALUATION_SYSTEM_PROMPT = (
    "You are an expert evaluator of interior-design sales meetings. Suggest a score for each "
    "of the 20 rubric items below: 1 = not done, 3 = done, 5 = done well. If the transcript "
    "shows no clear evidence of an item, give it a low score.\n\nRubric items:\n"
    + "\n".join(f"{key}: {item.description}" for key, item in zip(SCORE_KEYS, RUBRIC))
)

_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "keywords": {"type": "array", "items": {"type": "string"}},
        "sentiment_overall": {"type": "string", "enum": [s.value for s in SentimentLabel]},
        "sentiment_score": {"type": "integer"},
        "success_factors": {"type": "array", "items": {"type": "string"}},
        "question_quality": {"type": "integer"},
        "response_completeness": {"type": "integer"},
        "professional_term_usage": {"type": "integer"},
        "control_level": {"type": "integer"},
        "client_type": {"type": "string", "enum": [c.value for c in ClientType]},
        "client_type_confidence": {"type": "integer"},
        "improvement_suggestions": {"type": "array", "items": {"type": "string"}},
    },
    "required": list(AnalysisResult.model_fields),
    "additionalProperties": False,
}

_EVALUATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {key: {"type": "integer", "enum": [1, 3, 5]} for key in SCORE_KEYS},
    "required": list(SCORE_KEYS),
    "additionalProperties": False,
}


def _json_schema_format(name: str, schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "strict": True, "schema": schema},
    }


def _stage_label(stage: MeetingStage | str) -> str:
    return stage.value if isinstance(stage, MeetingStage) else str(stage)


# ── Adapter ───────────────────────────────────────────────────────────────


class AnalysisAdapter:
    """Thin wrapper around one litellm model for the three analysis operations."""

    def __init__(self, model: str, api_key: str | None = None, timeout: float = 60.0) -> None:
        self.model = model
        self.api_key = api_key or None
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalysisAdapter":
        return cls(
            model=settings.LLM_MODEL,
            api_key=settings.LLM_API_KEY,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        response_format: dict[str, Any] | None = None,
    ) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "timeout": self.timeout,
            "num_retries": 0,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if response_format:
            kwargs["response_format"] = response_format

        response = await litellm.acompletion(**kwargs)
        content = response.choices[0].message.content
        if not isinstance(content, str) or not content.strip():
            raise ValueError("Model returned empty content")
        return content.strip()

    async def analyze(
        self,
        transcript: str,
        stage: MeetingStage | str,
        client_budget: int | None = None,
    ) -> Ok[AnalysisResult] | Fallback[AnalysisResult]:
        """Analyse a meeting transcript into an ``AnalysisResult``."""
        budget_line = f"Client budget: {client_budget:,}\n" if client_budget else ""
        user_prompt = (
            f"Meeting stage: {_stage_label(stage)}\n{budget_line}\n"
            f"Transcript:\n{transcript}\n\nReturn the analysis as JSON."
        )
        try:
            content = await self._complete(
                _ANALYSIS_SYSTEM_PROMPT,
                user_prompt,
                _json_schema_format("meeting_analysis", _ANALYSIS_SCHEMA),
            )
            result = AnalysisResult.model_validate_json(content)
        except Exception as exc:
            logger.warning("analysis.fallback", operation="analyze", model=self.model, error=str(exc))
            return Fallback(FALLBACK_ANALYSIS.model_copy(deep=True), reason=str(exc))

        logger.info("analysis.completed", model=self.model, client_type=result.client_type.value)
        return Ok(result)

    async def suggest_name(self, transcript: str) -> Ok[str] | Fallback[str]:
        """Suggest a short project name for a transcript."""
        try:
            content = await self._complete(
                _NAME_SYSTEM_PROMPT,
                f"Suggest a project name for this meeting transcript:\n\n{transcript}",
            )
            name = content.strip('"').strip()
            if not name:
                raise ValueError("Model returned an empty name")
        except Exception as exc:
            logger.warning("analysis.fallback", operation="suggest_name", model=self.model, error=str(exc))
            return Fallback(FALLBACK_PROJECT_NAME, reason=str(exc))

        return Ok(name)

    async def suggest_evaluation(
        self,
        transcript: str,
        stage: MeetingStage | str,
    ) -> Ok[dict[str, int]] | Fallback[dict[str, int]]:
        """Suggest a score in {1, 3, 5} for each of the 20 rubric items."""
        user_prompt = (
            f"Meeting stage: {_stage_label(stage)}\n\n"
            f"Transcript:\n{transcript}\n\nReturn the suggested scores as JSON."
        )
        try:
            content = await self._complete(
                _EVALUATION_SYSTEM_PROMPT,
                user_prompt,
                _json_schema_format("evaluation_suggestion", _EVALUATION_SCHEMA),
            )
            scores = json.loads(content)
            if not isinstance(scores, dict):
                raise ValueError("Expected a JSON object of scores")
            validate_scores(scores)
        except Exception as exc:
            logger.warning(
                "analysis.fallback", operation="suggest_evaluation", model=self.model, error=str(exc)
            )
            return Fallback(dict(FALLBACK_EVALUATION), reason=str(exc))

        return Ok({key: scores[key] for key in SCORE_KEYS})


def get_analysis_adapter(request: Request) -> AnalysisAdapter:
    """FastAPI dependency: the adapter built by the application factory."""
    return request.app.state.analysis_adapter
