"""Availability factor and availability summary."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from ...schemas import Assignment, AvailabilitySummary, Person
from .context import FactorContext


@dataclass
class AvailabilityConfig:
    """Working-week assumptions for converting availability percentages."""

    standard_week_hours: float = 40.0
    active_statuses: tuple[str, ...] = ("Active",)
    conflict_statuses: tuple[str, ...] = ("Scheduled", "Active")


class AvailabilityEvaluator:
    """Compare the candidate's free weekly hours with the requested hours."""

    method = "availability"

    def __init__(self, *, config: AvailabilityConfig | None = None) -> None:
        self._config = config or AvailabilityConfig()

    def evaluate(self, person: Person, context: FactorContext) -> dict[str, Any]:
        summary = self.summarize(person, context)
        duration = context.request.duration
        required_hours = duration.hours_per_week if duration else 0.0
        available_hours = summary.available_hours
        booked_out = duration is not None and available_hours > 0.0 and summary.can_start is None

        if available_hours <= 0.0 or booked_out:
            score = 0.0
        elif required_hours > 0.0:
            score = min(1.0, available_hours / required_hours)
        else:
            score = available_hours / self._config.standard_week_hours

        if person.status not in self._config.active_statuses:
            explanation = f"Status {person.status!r}: no hours available"
        elif booked_out:
            explanation = (
                "Existing assignments run past the requested window; "
                f"{available_hours:g}h/week is not enough to start"
            )
        elif required_hours > 0.0:
            explanation = (
                f"{available_hours:g}h/week available against "
                f"{required_hours:g}h/week requested"
            )
        else:
            explanation = f"{person.availability:g}% available"

        return {
            "method": self.method,
            "applies": True,
            "scores": {"availability": min(score, 1.0)},
            "metadata": {
                "explanation": explanation,
                "available_hours": available_hours,
                "required_hours": required_hours,
                "summary": summary,
            },
        }

    def available_hours(self, person: Person) -> float:
        if person.status not in self._config.active_statuses:
            return 0.0
        return person.availability / 100.0 * self._config.standard_week_hours

    def summarize(self, person: Person, context: FactorContext) -> AvailabilitySummary:
        available_hours = self.available_hours(person)
        duration = context.request.duration
        if duration is None:
            return AvailabilitySummary(
                can_start=context.as_of if available_hours > 0 else None,
                available_hours=available_hours,
            )

        conflicts = [
            assignment
            for assignment in person.assignments
            if assignment.status in self._config.conflict_statuses
            and self._overlaps(assignment, duration.start, duration.end)
        ]
        can_start: date | None = duration.start
        if available_hours <= 0.0:
            can_start = None
        elif conflicts and available_hours < duration.hours_per_week:
            can_start = max(item.end_date for item in conflicts) + timedelta(days=1)
            if can_start > duration.end:
                can_start = None
        return AvailabilitySummary(
            can_start=can_start,
            available_hours=available_hours,
            conflicting_assignments=sorted(
                conflicts, key=lambda item: (item.start_date, item.end_date)
            ),
        )

    @staticmethod
    def _overlaps(assignment: Assignment, start: date, end: date) -> bool:
        return assignment.start_date <= end and assignment.end_date >= start
