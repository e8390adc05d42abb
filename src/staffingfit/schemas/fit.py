"""Fit scoring and ranking value types."""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import Field

from .base import EngineModel
from .person import Assignment
from .rates import RateBreakdown, RatePolicy

FitReasonType = Literal[
    "skill_match",
    "experience",
    "availability",
    "location",
    "rate",
    "certification",
]
SortKey = Literal["fitScore", "rate", "availability", "experience"]
SortOrder = Literal["asc", "desc"]
ErrorStage = Literal["fit", "rate_preview"]


class FitReason(EngineModel):
    """Single factor contribution, in fit points."""

    type: FitReasonType
    score: float
    explanation: str
    details: dict[str, Any] = Field(default_factory=dict)


class AvailabilitySummary(EngineModel):
    can_start: date | None = None
    available_hours: float = 0.0
    conflicting_assignments: list[Assignment] = Field(default_factory=list)


class PersonFit(EngineModel):
    """Scored candidate."""

    person_id: int
    fit_score: float = Field(ge=0.0, le=100.0)
    confidence: float = Field(ge=0.0, le=100.0)
    disqualified: bool = False
    reasoning: list[FitReason] = Field(default_factory=list)
    rate_preview: RateBreakdown | None = None
    availability: AvailabilitySummary = Field(default_factory=AvailabilitySummary)
    hourly_rate: float = 0.0
    total_experience: float = 0.0


class RankingOptions(EngineModel):
    """Sorting, truncation, filtering and rate preview settings for a ranking run."""

    sort_by: SortKey = "fitScore"
    sort_order: SortOrder | None = None
    max_results: int | None = Field(default=None, ge=1)
    include_rate_preview: bool = False
    rate_policy: RatePolicy | None = None
    min_fit_score: float | None = Field(default=None, ge=0.0, le=100.0)
    min_availability: float | None = Field(default=None, ge=0.0, le=100.0)
    max_rate: float | None = Field(default=None, ge=0.0)
    statuses: list[str] | None = None
    include_disqualified: bool = True


class CandidateError(EngineModel):
    """Per-candidate failure reported alongside ranking results.

    ``index`` is the candidate's position in the pool passed to the ranker.
    """

    person_id: int | None = None
    index: int
    stage: ErrorStage = "fit"
    field: str | None = None
    message: str


class EngineContext(EngineModel):
    """Explicit caller context; nothing here is defaulted from globals."""

    tenant_id: str = Field(min_length=1)
    request_version: str | None = None
    as_of: date | None = None
