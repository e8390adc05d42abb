from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import Field, field_validator, model_validator

from ..dates import parse_date
from .base import EngineModel

PersonStatus = Literal["Active", "Inactive", "On Leave"]
AssignmentStatus = Literal["Scheduled", "Active", "Completed", "Cancelled"]


class PersonSkill(EngineModel):
    """Skill held by a person.

    ``confidence`` is a fraction in [0, 1]; percentages are rejected rather
    than rescaled.
    """

    name: str = Field(min_length=1)
    category: str = "Technical"
    proficiency: int = Field(ge=1, le=5)
    confidence: float = Field(ge=0.0, le=1.0)
    last_used: str | None = None
    years_experience: float = Field(default=0.0, ge=0.0)

    @field_validator("last_used")
    @classmethod
    def _check_last_used(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        if parse_date(value) is None:
            raise ValueError("last_used must be YYYY-MM or an ISO-8601 date")
        return value


class Assignment(EngineModel):
    """Existing project allocation for a person."""

    id: int | None = None
    project_name: str = ""
    start_date: date
    end_date: date
    hours_per_week: float = Field(default=0.0, ge=0.0)
    status: AssignmentStatus = "Scheduled"

    @model_validator(mode="after")
    def _check_dates(self) -> "Assignment":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class Person(EngineModel):
    """Candidate profile as supplied by the calling application."""

    id: int
    name: str = ""
    title: str = ""
    level: str | None = None
    status: PersonStatus = "Active"
    location: str = ""
    timezone: str | None = None
    total_experience: float = Field(default=0.0, ge=0.0)
    skills: list[PersonSkill] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    hourly_rate: float = Field(ge=0.0, allow_inf_nan=False)
    currency: str = "USD"
    availability: float = Field(ge=0.0, le=100.0)
    assignments: list[Assignment] = Field(default_factory=list)
