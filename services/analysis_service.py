from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from core.config import settings
from schemas.analysis import AnalysisResult, PossibleCondition, Reassurance, Resource
from schemas.assessment import AnalyzeRequest
from services.errors import InvalidInput, RateLimited, UnparseableResponse
from services.llm_client import LLMClient
from services.prompt_builder import build_analysis_prompt, reassurance_title
from services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

_FENCE_START = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```\s*$")
# Greedy: first "{" through the last "}".
_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

URGENCY_VALUES = ("low", "moderate", "high")
DEFAULT_URGENCY = "moderate"
DEFAULT_SUMMARY = (
    "Thank you for sharing the details of your pain. We put together the guidance below "
    "from what you told us."
)
DEFAULT_REASSURANCE_MESSAGE = (
    "Most muscle and joint pain is common, treatable and improves with time and the right care. "
    "Taking the time to understand it is a great first step."
)
DEFAULT_TIMELINE = (
    "Recovery time varies from person to person. If your pain persists, worsens, or you are unsure, "
    "please consult a qualified healthcare professional."
)
DEFAULT_LIKELIHOOD = "Possible"
DEFAULT_RESOURCE_TYPE = "Approach"


def _strip_fences(text: str) -> str:
    return _FENCE_END.sub("", _FENCE_START.sub("", text.strip()))


def _fix_trailing_commas(text: str) -> str:
    text = re.sub(r",\s*}", "}", text)
    return re.sub(r",\s*]", "]", text)


def extract_json_object(raw: str) -> dict[str, Any]:
    """Pull the JSON object out of a model reply that may be wrapped in prose or fences."""
    match = _JSON_SPAN.search(_strip_fences(raw))
    if not match:
        raise UnparseableResponse(raw_text=raw, error="no JSON object found", kind="no_json")

    candidate = match.group(0)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        try:
            data = json.loads(_fix_trailing_commas(candidate))
        except json.JSONDecodeError as e:
            raise UnparseableResponse(raw_text=raw, error=str(e), kind="json_decode") from e

    if not isinstance(data, dict):
        raise UnparseableResponse(raw_text=raw, error="top-level JSON is not an object", kind="not_object")
    return data


def _str(value: Any, default: str = "") -> str:
    return value.strip() if isinstance(value, str) and value.strip() else default


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _conditions(value: Any) -> list[PossibleCondition]:
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        if isinstance(item, str) and item.strip():
            out.append(PossibleCondition(name=item.strip(), likelihood=DEFAULT_LIKELIHOOD, description=""))
        elif isinstance(item, dict) and _str(item.get("name")):
            out.append(
                PossibleCondition(
                    name=_str(item.get("name")),
                    likelihood=_str(item.get("likelihood"), DEFAULT_LIKELIHOOD),
                    description=_str(item.get("description")),
                )
            )
    return out


def _resources(value: Any) -> list[Resource]:
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        if isinstance(item, dict) and _str(item.get("name")):
            out.append(
                Resource(
                    name=_str(item.get("name")),
                    type=_str(item.get("type"), DEFAULT_RESOURCE_TYPE),
                    why=_str(item.get("why")),
                )
            )
    return out


def salvage_analysis(data: dict[str, Any]) -> AnalysisResult:
    """Build a usable result from a reply that failed validation. Never raises."""
    urgency = data.get("urgency")
    if not isinstance(urgency, str) or urgency.strip().lower() not in URGENCY_VALUES:
        urgency = DEFAULT_URGENCY
    urgency = urgency.strip().lower()

    raw_reassurance = data.get("reassurance")
    if isinstance(raw_reassurance, dict):
        reassurance = Reassurance(
            title=_str(raw_reassurance.get("title"), reassurance_title(urgency)),
            message=_str(raw_reassurance.get("message"), DEFAULT_REASSURANCE_MESSAGE),
        )
    else:
        # Older prompt versions returned the reassurance as a bare string.
        reassurance = Reassurance(
            title=reassurance_title(urgency),
            message=_str(raw_reassurance, DEFAULT_REASSURANCE_MESSAGE),
        )

    return AnalysisResult(
        summary=_str(data.get("summary"), DEFAULT_SUMMARY),
        urgency=urgency,
        understanding_whats_happening=_str(data.get("understandingWhatsHappening")),
        reassurance=reassurance,
        possible_conditions=_conditions(data.get("possibleConditions")),
        watch_for=_str_list(data.get("watchFor")),
        recovery_principles=_str_list(data.get("recoveryPrinciples")),
        avoid=_str_list(data.get("avoid")),
        safe_to_try=_str_list(data.get("safeToTry")),
        timeline=_str(data.get("timeline"), DEFAULT_TIMELINE),
        resources=_resources(data.get("resources")),
    )


def parse_analysis(raw: str) -> AnalysisResult:
    data = extract_json_object(raw)
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        logger.warning("AI analysis failed validation (%d errors); salvaging fields", e.error_count())
        return salvage_analysis(data)


class AnalysisService:
    def __init__(self, rate_limiter: RateLimiter, llm: LLMClient, max_tokens: int | None = None):
        self.rate_limiter = rate_limiter
        self.llm = llm
        self.max_tokens = max_tokens or settings.analysis_max_tokens

    def analyze(self, payload: Any, client_key: str) -> AnalysisResult:
        decision = self.rate_limiter.check(client_key)
        if not decision.allowed:
            raise RateLimited(
                retry_after_seconds=decision.retry_after_seconds or 1,
                message=decision.message or "Too many requests.",
            )

        # The rate-limit slot is already spent at this point, even for bad input.
        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8", errors="replace")
            if isinstance(payload, str):
                request = AnalyzeRequest.model_validate_json(payload)
            else:
                request = AnalyzeRequest.model_validate(payload)
        except ValidationError as e:
            raise InvalidInput(details=e.errors(include_url=False, include_context=False)) from e

        prompt = build_analysis_prompt(
            request.selected_area_labels,
            request.pain_point_count,
            request.form_data,
        )
        raw = self.llm.complete(prompt, max_tokens=self.max_tokens)
        result = parse_analysis(raw)
        logger.info(
            "Analysis complete for %d area(s), urgency=%s", len(request.selected_area_labels), result.urgency
        )
        return result
