"""Shared per-candidate evaluation context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ...schemas import PersonSkill, StaffingRequest


@dataclass(frozen=True, slots=True)
class FactorContext:
    """Inputs every factor evaluator sees for one candidate.

    ``matches`` maps each requested skill name to the best skill the candidate
    holds under that name, or ``None``.
    """

    request: StaffingRequest
    as_of: date
    matches: dict[str, PersonSkill | None] = field(default_factory=dict)
