from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from schemas.common import CamelModel, NaiveUTCDatetime

EntryType = Literal["pain", "workout", "progression", "general"]
InsightCategory = Literal["trend", "correlation", "progress", "suggestion"]


class DiaryAssessmentContext(CamelModel):
    """What the diary prompts need to know about the linked assessment."""

    selected_muscles: list[str] = Field(default_factory=list)
    pain_level: int | None = Field(None, ge=1, le=10)
    goals: str = ""
    story: str = ""
    triggers_and_relief: str = ""
    # Stored analysis as the client cached it; only the reassurance is read.
    analysis: dict[str, Any] | None = None
    created_at: NaiveUTCDatetime | None = None

    @property
    def reassurance_message(self) -> str:
        reassurance = (self.analysis or {}).get("reassurance")
        if isinstance(reassurance, dict) and isinstance(reassurance.get("message"), str):
            return reassurance["message"]
        return ""


class RecentEntry(CamelModel):
    entry_type: EntryType = "general"
    pain_level: int | None = Field(None, ge=1, le=10)
    entry_text: str = ""
    created_at: NaiveUTCDatetime | None = None


class DiaryFeedbackRequest(CamelModel):
    entry_type: EntryType
    entry_text: str = Field(..., min_length=1, max_length=5000)
    pain_level: int | None = Field(None, ge=1, le=10)
    sentiment: int | None = Field(None, ge=1, le=5)
    recent_entries: list[RecentEntry] = Field(default_factory=list)
    assessment: DiaryAssessmentContext


class DiaryFeedbackResponse(CamelModel):
    feedback: str


class DiaryInsightsRequest(CamelModel):
    entries: list[RecentEntry] = Field(default_factory=list, max_length=50)
    assessment: DiaryAssessmentContext


class DiaryInsight(CamelModel):
    title: str
    description: str
    category: InsightCategory


class DiaryInsights(CamelModel):
    date_range: str
    entry_count: int
    time_span_days: int
    insights: list[DiaryInsight]


class FollowUp(CamelModel):
    question: str
    response: str | None = None
    created_at: datetime


class DiaryEntryCreate(CamelModel):
    entry_type: EntryType
    entry_text: str = Field(..., min_length=1, max_length=5000)
    pain_level: int | None = Field(None, ge=1, le=10)
    sentiment: int | None = Field(None, ge=1, le=5)
    request_ai_feedback: bool = False


class DiaryEntryUpdate(CamelModel):
    entry_text: str = Field(..., min_length=1, max_length=5000)


class FollowUpCreate(CamelModel):
    question: str = Field(..., min_length=1, max_length=2000)


class DiaryEntryResponse(CamelModel):
    id: str
    assessment_id: str
    entry_type: EntryType
    pain_level: int | None = None
    sentiment: int | None = None
    entry_text: str
    ai_response: str | None = None
    follow_up: FollowUp | None = None
    created_at: datetime


class DiaryEntryListResponse(CamelModel):
    entries: list[DiaryEntryResponse]
