from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from schemas.analysis import AnalysisResult
from schemas.common import CamelModel, NaiveUTCDatetime


class PainPoint(CamelModel):
    x: float
    y: float
    view: Literal["Front", "Back"]
    size: float | None = None

    @field_validator("view", mode="before")
    @classmethod
    def _normalise_view(cls, v):
        if isinstance(v, str) and v.lower() in {"front", "back"}:
            return v.capitalize()
        return v


class FormData(CamelModel):
    pain_level: int = Field(..., ge=1, le=10)
    pain_types: list[str] = Field(default_factory=list)
    frequency: str = ""
    duration: str = ""
    causes: list[str] = Field(default_factory=list)

    # Free-text narrative
    story: str = ""
    progress: str = ""
    triggers_and_relief: str = ""
    tried_so_far: str = ""

    activities: list[str] = Field(default_factory=list)
    intensity: str = ""
    goals: str = ""

    concern_level: int | None = Field(None, ge=1, le=10)
    concern_reason: str = ""


class AnalyzeRequest(CamelModel):
    selected_area_labels: list[str] = Field(..., min_length=1)
    pain_point_count: int = Field(0, ge=0)
    form_data: FormData

    @field_validator("selected_area_labels")
    @classmethod
    def _labels_not_blank(cls, v: list[str]) -> list[str]:
        labels = [label.strip() for label in v if label and label.strip()]
        if not labels:
            raise ValueError("at least one affected area is required")
        return labels


class AssessmentCreate(CamelModel):
    selected_muscles: list[str] = Field(default_factory=list)
    pain_points: list[PainPoint] = Field(default_factory=list)
    form_data: FormData
    analysis: AnalysisResult | None = None
    created_at: NaiveUTCDatetime | None = None

    @field_validator("selected_muscles")
    @classmethod
    def _dedupe_muscles(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class AssessmentResponse(AssessmentCreate):
    id: str
    created_at: datetime


class AssessmentListResponse(CamelModel):
    assessments: list[AssessmentResponse]
