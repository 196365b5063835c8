from typing import Literal

from pydantic import Field

from schemas.common import CamelModel

Urgency = Literal["low", "moderate", "high"]


class Reassurance(CamelModel):
    title: str
    message: str


class PossibleCondition(CamelModel):
    name: str
    likelihood: str
    description: str


class Resource(CamelModel):
    name: str
    type: str
    why: str


class AnalysisResult(CamelModel):
    summary: str
    urgency: Urgency
    understanding_whats_happening: str
    reassurance: Reassurance
    possible_conditions: list[PossibleCondition]
    watch_for: list[str]
    recovery_principles: list[str]
    avoid: list[str]
    safe_to_try: list[str]
    timeline: str
    resources: list[Resource] = Field(default_factory=list)
