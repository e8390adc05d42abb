"""Relevant experience factor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import Person
from .context import FactorContext


@dataclass
class ExperienceConfig:
    """Years of relevant experience that earn the full factor."""

    reference_years: float = 10.0


class ExperienceEvaluator:
    """Normalize relevant years of experience against a reference ceiling."""

    method = "experience"

    def __init__(self, *, config: ExperienceConfig | None = None) -> None:
        self._config = config or ExperienceConfig()

    def evaluate(self, person: Person, context: FactorContext) -> dict[str, Any]:
        years, basis = self._relevant_years(person, context)
        ceiling = self._config.reference_years
        score = min(1.0, years / ceiling) if ceiling > 0 else 1.0
        return {
            "method": self.method,
            "applies": True,
            "scores": {"experience": score},
            "metadata": {
                "explanation": (
                    f"{years:.1f} years of relevant experience "
                    f"against a {ceiling:g}-year reference"
                ),
                "relevant_years": years,
                "reference_years": ceiling,
                "basis": basis,
            },
        }

    @staticmethod
    def _relevant_years(person: Person, context: FactorContext) -> tuple[float, str]:
        required = context.request.required_skills
        if not required:
            return person.total_experience, "total_experience"
        weights = [item.weight for item in required]
        if sum(weights) <= 0.0:
            weights = [1.0] * len(required)
        weighted = 0.0
        for item, weight in zip(required, weights):
            held = context.matches.get(item.name)
            if held is not None:
                weighted += held.years_experience * weight
        return weighted / sum(weights), "requested_skills"
