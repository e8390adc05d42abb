from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import Field, model_validator

from .base import EngineModel

Urgency = Literal["Low", "Medium", "High", "Critical"]


class RequiredSkill(EngineModel):
    """Skill demanded by a staffing request.

    ``weight`` is relative importance; weights are normalized by the scorer
    and need not sum to one. ``required`` marks a hard constraint.
    """

    name: str = Field(min_length=1)
    category: str = ""
    minimum_proficiency: int = Field(ge=1, le=5)
    weight: float = Field(default=1.0, ge=0.0, allow_inf_nan=False)
    required: bool = False


class Budget(EngineModel):
    """Hourly budget range."""

    min: float = Field(default=0.0, ge=0.0, allow_inf_nan=False)
    max: float = Field(ge=0.0, allow_inf_nan=False)
    currency: str = "USD"

    @model_validator(mode="after")
    def _check_range(self) -> "Budget":
        if self.min > self.max:
            raise ValueError("budget min must not exceed max")
        return self


class DurationWindow(EngineModel):
    """Engagement window and weekly hours."""

    start: date
    end: date
    hours_per_week: float = Field(default=0.0, ge=0.0, allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_window(self) -> "DurationWindow":
        if self.end < self.start:
            raise ValueError("duration end must not precede start")
        return self


class StaffingRequest(EngineModel):
    """Request to staff a role."""

    id: int
    title: str = ""
    description: str = ""
    required_skills: list[RequiredSkill] = Field(default_factory=list)
    budget: Budget | None = None
    duration: DurationWindow | None = None
    location: str = ""
    timezone: str | None = None
    remote: bool = False
    urgency: Urgency = "Medium"
    domain_keywords: list[str] = Field(default_factory=list)
