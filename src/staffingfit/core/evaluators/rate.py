"""Budget fit factor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...schemas import Person
from ..errors import InvalidInputError
from .context import FactorContext


@dataclass
class RateFitConfig:
    """Fraction above the budget ceiling at which the factor reaches zero."""

    overage_tolerance: float = 0.5


class RateFitEvaluator:
    """Compare the candidate's base rate with the request budget."""

    method = "rate"

    def __init__(self, *, config: RateFitConfig | None = None) -> None:
        self._config = config or RateFitConfig()

    def evaluate(self, person: Person, context: FactorContext) -> dict[str, Any]:
        budget = context.request.budget
        if budget is None:
            return {"method": self.method, "applies": False, "scores": {}, "metadata": {}}
        if budget.currency.upper() != person.currency.upper():
            raise InvalidInputError(
                "currency",
                f"candidate rate is in {person.currency} but the budget is in {budget.currency}",
                value=person.currency,
            )

        rate = person.hourly_rate
        ceiling = budget.max
        if rate <= ceiling:
            score = 1.0
            overage = 0.0
            explanation = f"{rate:g} {budget.currency}/h is within the {ceiling:g} budget ceiling"
        else:
            overage = (rate - ceiling) / ceiling if ceiling > 0 else float("inf")
            tolerance = self._config.overage_tolerance
            score = max(0.0, 1.0 - overage / tolerance) if tolerance > 0 else 0.0
            explanation = (
                f"{rate:g} {budget.currency}/h exceeds the {ceiling:g} budget ceiling"
                + (f" by {overage:.0%}" if ceiling > 0 else "")
            )

        return {
            "method": self.method,
            "applies": True,
            "scores": {"rate": score},
            "metadata": {
                "explanation": explanation,
                "hourly_rate": rate,
                "budget_min": budget.min,
                "budget_max": ceiling,
                "overage_ratio": overage if overage != float("inf") else None,
            },
        }
