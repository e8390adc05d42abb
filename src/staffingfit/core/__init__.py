"""Core fit scoring, rate composition and ranking components."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

# NOTE: keep imports explicit for export clarity.
from .errors import InvalidInputError
from .evaluators import (
    AvailabilityEvaluator,
    CertificationEvaluator,
    ExperienceEvaluator,
    FactorContext,
    LocationEvaluator,
    RateFitEvaluator,
    SkillMatcher,
    SkillMatchEvaluator,
)
from .ranking import RankingAggregator, RankingResult, cache_key
from .rates import RateComposer, compose
from .scoring import EvaluationResult, FitScorer
from ..schemas import Person


@runtime_checkable
class FactorEvaluator(Protocol):
    """Evaluator contract for a single fit factor."""

    method: str

    def evaluate(self, person: Person, context: FactorContext) -> dict[str, Any]:
        """Return ``method``, ``applies``, ``scores`` and ``metadata`` for a candidate."""


__all__ = [
    "AvailabilityEvaluator",
    "CertificationEvaluator",
    "EvaluationResult",
    "ExperienceEvaluator",
    "FactorEvaluator",
    "FitScorer",
    "InvalidInputError",
    "LocationEvaluator",
    "RankingAggregator",
    "RankingResult",
    "RateComposer",
    "RateFitEvaluator",
    "SkillMatchEvaluator",
    "SkillMatcher",
    "cache_key",
    "compose",
]
