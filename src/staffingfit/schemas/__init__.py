"""Pydantic schema definitions for staffing requests, people, fits and rates."""

from __future__ import annotations

from .fit import (
    AvailabilitySummary,
    CandidateError,
    EngineContext,
    FitReason,
    PersonFit,
    RankingOptions,
)
from .person import Assignment, Person, PersonSkill
from .rates import (
    AbsolutePremium,
    PercentagePremium,
    RateBreakdown,
    RateOverride,
    RatePolicy,
    round_to_minor_unit,
)
from .request import Budget, DurationWindow, RequiredSkill, StaffingRequest

__all__ = [
    "AbsolutePremium",
    "Assignment",
    "AvailabilitySummary",
    "Budget",
    "CandidateError",
    "DurationWindow",
    "EngineContext",
    "FitReason",
    "PercentagePremium",
    "Person",
    "PersonFit",
    "PersonSkill",
    "RankingOptions",
    "RateBreakdown",
    "RateOverride",
    "RatePolicy",
    "RequiredSkill",
    "StaffingRequest",
    "round_to_minor_unit",
]
