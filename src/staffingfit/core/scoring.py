"""Fit scoring orchestration."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog
from pydantic import ValidationError

from ..dates import resolve_as_of
from ..schemas import (
    AvailabilitySummary,
    EngineContext,
    FitReason,
    Person,
    PersonFit,
    StaffingRequest,
)
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

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class EvaluationResult:
    """Normalized evaluator output."""

    method: str
    applies: bool
    scores: dict[str, float]
    metadata: dict[str, Any] = field(default_factory=dict)


class FitScorer:
    """Scores one candidate against a staffing request.

    Factors are combined as a weighted sum of values in [0, 1]. Factors that do
    not apply to the request (no requested skills, no budget) are dropped and
    the remaining weights renormalized. The certification bonus is added on
    top and the result clamped to [0, 100].
    """

    DEFAULT_WEIGHTS: dict[str, float] = {
        "skill_match": 0.50,
        "experience": 0.15,
        "availability": 0.15,
        "location": 0.10,
        "rate": 0.10,
    }

    def __init__(
        self,
        *,
        matcher: SkillMatcher | None = None,
        skill_evaluator: SkillMatchEvaluator | None = None,
        experience_evaluator: ExperienceEvaluator | None = None,
        availability_evaluator: AvailabilityEvaluator | None = None,
        location_evaluator: LocationEvaluator | None = None,
        rate_evaluator: RateFitEvaluator | None = None,
        certification_evaluator: CertificationEvaluator | None = None,
        score_weights: dict[str, float] | None = None,
        require_availability: bool | None = None,
    ) -> None:
        self._matcher = matcher or SkillMatcher()
        self._availability = availability_evaluator or AvailabilityEvaluator()
        self._certification = certification_evaluator or CertificationEvaluator()
        self._evaluators = [
            skill_evaluator or SkillMatchEvaluator(),
            experience_evaluator or ExperienceEvaluator(),
            self._availability,
            location_evaluator or LocationEvaluator(),
            rate_evaluator or RateFitEvaluator(),
        ]
        weights = self.DEFAULT_WEIGHTS.copy()
        for name in score_weights or {}:
            if name not in weights:
                raise InvalidInputError(
                    f"score_weights.{name}",
                    f"unknown factor; expected one of {', '.join(weights)}",
                    value=name,
                )
        if score_weights:
            weights.update(score_weights)
        for name, weight in weights.items():
            if not math.isfinite(weight):
                raise InvalidInputError(f"score_weights.{name}", "weight must be finite", value=weight)
            if weight < 0:
                raise InvalidInputError(f"score_weights.{name}", "weight must be >= 0", value=weight)
        self._score_weights = weights
        self._require_availability = bool(require_availability)

    @property
    def matcher(self) -> SkillMatcher:
        return self._matcher

    @property
    def availability_evaluator(self) -> AvailabilityEvaluator:
        return self._availability

    def score(
        self,
        request: StaffingRequest,
        candidate: Person | Mapping[str, Any],
        *,
        context: EngineContext,
    ) -> PersonFit:
        person = coerce_person(candidate)
        factor_context = FactorContext(
            request=request,
            as_of=resolve_as_of(
                context.as_of,
                request.duration.start if request.duration else None,
            ),
            matches=self._matcher.match_all(request.required_skills, person.skills),
        )
        summary = self._availability.summarize(person, factor_context)

        failures = self._required_skill_failures(request, factor_context)
        if failures:
            return self._disqualified(
                person,
                summary,
                FitReason(
                    type="skill_match",
                    score=0.0,
                    explanation="Missing required skills: "
                    + ", ".join(
                        f"{item['skill']} (minimum {item['minimum_proficiency']})"
                        for item in failures
                    ),
                    details={"failed_requirements": failures},
                ),
            )
        if self._require_availability and (
            summary.available_hours <= 0.0 or summary.can_start is None
        ):
            return self._disqualified(
                person,
                summary,
                FitReason(
                    type="availability",
                    score=0.0,
                    explanation="Not available within the requested window and availability is required",
                    details={
                        "available_hours": summary.available_hours,
                        "conflicting_assignments": len(summary.conflicting_assignments),
                    },
                ),
            )

        evaluations = [
            self._normalize_evaluation_result(evaluator.evaluate(person, factor_context))
            for evaluator in self._evaluators
        ]
        active = [item for item in evaluations if item.applies]
        total_weight = sum(self._score_weights.get(item.method, 0.0) for item in active)

        reasons: list[FitReason] = []
        base_score = 0.0
        for item in active:
            value = item.scores.get(item.method, 0.0)
            weight = self._score_weights.get(item.method, 0.0)
            share = weight / total_weight if total_weight > 0 else 0.0
            contribution = 100.0 * share * value
            base_score += contribution
            reasons.append(
                FitReason(
                    type=item.method,  # type: ignore[arg-type]
                    score=contribution,
                    explanation=str(item.metadata.get("explanation", "")),
                    details=self._reason_details(item, value, share),
                )
            )
        base_score = min(max(base_score, 0.0), 100.0)

        certification = self._normalize_evaluation_result(
            self._certification.evaluate(person, factor_context)
        )
        bonus = min(certification.scores.get("certification_bonus", 0.0), 100.0 - base_score)
        reasons.append(
            FitReason(
                type="certification",
                score=bonus,
                explanation=str(certification.metadata.get("explanation", "")),
                details={
                    "matched": certification.metadata.get("matched", []),
                    "max_bonus": self._certification.max_bonus,
                },
            )
        )
        fit_score = min(max(base_score + bonus, 0.0), 100.0)

        skill_result = next((item for item in active if item.method == "skill_match"), None)
        confidence_inputs = skill_result.metadata.get("confidence_inputs", []) if skill_result else []
        confidence = 100.0 * min(confidence_inputs) if confidence_inputs else 0.0

        logger.debug(
            "fit.scored",
            person_id=person.id,
            request_id=request.id,
            tenant_id=context.tenant_id,
            fit_score=fit_score,
            confidence=confidence,
        )
        return PersonFit(
            person_id=person.id,
            fit_score=fit_score,
            confidence=confidence,
            reasoning=reasons,
            availability=summary,
            hourly_rate=person.hourly_rate,
            total_experience=person.total_experience,
        )

    @staticmethod
    def _normalize_evaluation_result(payload: dict[str, Any]) -> EvaluationResult:
        method = payload.get("method")
        scores = payload.get("scores") or {}
        if method is None:
            raise ValueError("Evaluator result must include 'method'.")
        if not isinstance(scores, dict):
            raise ValueError("Evaluator result 'scores' must be a mapping.")
        return EvaluationResult(
            method=str(method),
            applies=bool(payload.get("applies", True)),
            scores={k: float(v) for k, v in scores.items()},
            metadata=dict(payload.get("metadata") or {}),
        )

    @staticmethod
    def _reason_details(item: EvaluationResult, value: float, share: float) -> dict[str, Any]:
        details = {
            key: entry
            for key, entry in item.metadata.items()
            if key not in {"explanation", "summary", "confidence_inputs"}
        }
        details["factor"] = value
        details["weight"] = share
        return details

    @staticmethod
    def _required_skill_failures(
        request: StaffingRequest,
        context: FactorContext,
    ) -> list[dict[str, Any]]:
        failures: list[dict[str, Any]] = []
        for item in request.required_skills:
            if not item.required:
                continue
            held = context.matches.get(item.name)
            if held is not None and held.proficiency >= item.minimum_proficiency:
                continue
            failures.append(
                {
                    "skill": item.name,
                    "minimum_proficiency": item.minimum_proficiency,
                    "held_proficiency": held.proficiency if held is not None else None,
                }
            )
        return failures

    @staticmethod
    def _disqualified(
        person: Person,
        summary: AvailabilitySummary,
        reason: FitReason,
    ) -> PersonFit:
        logger.debug("fit.disqualified", person_id=person.id, reason=reason.type)
        return PersonFit(
            person_id=person.id,
            fit_score=0.0,
            confidence=0.0,
            disqualified=True,
            reasoning=[reason],
            availability=summary,
            hourly_rate=person.hourly_rate,
            total_experience=person.total_experience,
        )


def coerce_person(candidate: Person | Mapping[str, Any]) -> Person:
    """Return ``candidate`` as a validated :class:`Person`."""
    if isinstance(candidate, Person):
        return candidate
    try:
        return Person.model_validate(candidate)
    except ValidationError as exc:
        raise InvalidInputError.from_validation_error(exc) from exc

