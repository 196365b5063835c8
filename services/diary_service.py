from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import ValidationError

from core.config import settings
from schemas.diary import DiaryAssessmentContext, DiaryFeedbackRequest, DiaryInsights, RecentEntry
from services.analysis_service import extract_json_object
from services.errors import EmptyModelOutput, InvalidInput, UnparseableResponse
from services.llm_client import LLMClient
from services.prompt_builder import build_diary_prompt, build_follow_up_prompt, build_insights_prompt

logger = logging.getLogger(__name__)


class DiaryFeedbackService:
    """Best-effort AI commentary on diary entries.

    Unlike the analysis pipeline there is no rate limiting and no salvage: the
    reply is plain prose. Callers saving an entry must treat any failure here
    as "no feedback" rather than as a failed save.
    """

    def __init__(self, llm: LLMClient, max_tokens: int | None = None):
        self.llm = llm
        self.max_tokens = max_tokens or settings.diary_max_tokens

    def _complete(self, prompt: str) -> str:
        text = self.llm.complete(prompt, max_tokens=self.max_tokens).strip()
        if not text:
            raise EmptyModelOutput()
        return text

    def get_feedback(self, request: DiaryFeedbackRequest) -> str:
        prompt = build_diary_prompt(
            entry_type=request.entry_type,
            entry_text=request.entry_text,
            pain_level=request.pain_level,
            assessment=request.assessment,
            recent_entries=request.recent_entries,
        )
        return self._complete(prompt)

    def answer_follow_up(
        self,
        entry_type: str,
        entry_text: str,
        ai_response: str | None,
        question: str,
        assessment: DiaryAssessmentContext,
    ) -> str:
        prompt = build_follow_up_prompt(entry_type, entry_text, ai_response, question, assessment)
        return self._complete(prompt)

    def get_insights(self, entries: Sequence[RecentEntry], assessment: DiaryAssessmentContext) -> DiaryInsights:
        if not entries:
            raise InvalidInput(details="At least one diary entry is required for insights.")

        raw = self._complete(build_insights_prompt(entries, assessment))
        data = extract_json_object(raw)
        try:
            return DiaryInsights.model_validate(data)
        except ValidationError as e:
            logger.warning("Diary insights failed validation: %s", e.error_count())
            raise UnparseableResponse(raw_text=raw, error=str(e), kind="schema_validation") from e
