"""Candidate ranking over a pool."""

from __future__ import annotations

import hashlib
import json
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Literal, Mapping

import structlog

from ..schemas import (
    CandidateError,
    EngineContext,
    Person,
    PersonFit,
    RankingOptions,
    StaffingRequest,
)
from .errors import InvalidInputError
from .rates import RateComposer
from .scoring import FitScorer, coerce_person

EnvelopeStatus = Literal["success", "partial"]

_DESCENDING_BY_DEFAULT = {"fitScore": True, "availability": True, "experience": True, "rate": False}


@dataclass(slots=True)
class RankingResult:
    """Sorted fits plus per-candidate errors."""

    results: list[PersonFit]
    errors: list[CandidateError] = field(default_factory=list)
    total: int = 0
    complete: bool = True
    skipped: int = 0
    tenant_id: str | None = None

    @property
    def status(self) -> EnvelopeStatus:
        return "success" if self.complete and not self.errors else "partial"

    def to_envelope(self) -> dict[str, Any]:
        """Render the ``{status, data, meta}`` envelope used by the application."""
        return {
            "status": self.status,
            "data": [item.model_dump(mode="json", by_alias=True) for item in self.results],
            "meta": {
                "total": self.total,
                "returned": len(self.results),
                "errors": [item.model_dump(mode="json", by_alias=True) for item in self.errors],
                "complete": self.complete,
                "skipped": self.skipped,
                "tenant_id": self.tenant_id,
            },
        }


@dataclass(frozen=True, slots=True)
class _Ranked:
    index: int
    person: Person
    fit: PersonFit


class RankingAggregator:
    """Scores a candidate pool, then sorts, filters and truncates the fits.

    Ordering is total: the selected sort key first, then fit score (desc),
    confidence (desc), available hours (desc) and person id (asc).
    """

    def __init__(
        self,
        *,
        scorer: FitScorer | None = None,
        composer: RateComposer | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._scorer = scorer or FitScorer()
        self._composer = composer or RateComposer(matcher=self._scorer.matcher)
        self._max_workers = max_workers or 1
        self._logger = structlog.get_logger(__name__)

    def rank(
        self,
        request: StaffingRequest,
        candidates: Iterable[Person | Mapping[str, Any]],
        options: RankingOptions | None = None,
        *,
        context: EngineContext,
        should_stop: Callable[[], bool] | None = None,
    ) -> RankingResult:
        options = options or RankingOptions()
        pool = list(candidates)
        scored, submitted = self._score_pool(request, pool, context, should_stop)

        errors = [item for item in scored if isinstance(item, CandidateError)]
        for error in errors:
            self._logger.warning(
                "ranking.candidate_error",
                tenant_id=context.tenant_id,
                request_id=request.id,
                person_id=error.person_id,
                index=error.index,
                field=error.field,
                message=error.message,
            )

        valid = [item for item in scored if isinstance(item, _Ranked)]
        filtered = [item for item in valid if self._passes_filters(item, options)]
        ordered = sorted(filtered, key=self._sort_key(options))
        if options.max_results is not None:
            ordered = ordered[: options.max_results]

        results: list[PersonFit] = []
        for item in ordered:
            fit = item.fit
            if options.include_rate_preview:
                try:
                    preview = self._composer.preview(item.person, request, options.rate_policy)
                except InvalidInputError as exc:
                    error = CandidateError(
                        person_id=item.person.id,
                        index=item.index,
                        stage="rate_preview",
                        field=exc.field,
                        message=exc.message,
                    )
                    errors.append(error)
                    self._logger.warning(
                        "ranking.rate_preview_error",
                        tenant_id=context.tenant_id,
                        person_id=item.person.id,
                        field=exc.field,
                        message=exc.message,
                    )
                else:
                    fit = fit.model_copy(update={"rate_preview": preview})
            results.append(fit)

        skipped = len(pool) - submitted
        result = RankingResult(
            results=results,
            errors=errors,
            total=len(filtered),
            complete=skipped == 0,
            skipped=skipped,
            tenant_id=context.tenant_id,
        )
        self._logger.info(
            "ranking.completed",
            tenant_id=context.tenant_id,
            request_id=request.id,
            candidates=len(pool),
            scored=len(valid),
            returned=len(results),
            errors=len(errors),
            skipped=skipped,
        )
        return result

    def _score_pool(
        self,
        request: StaffingRequest,
        pool: list[Person | Mapping[str, Any]],
        context: EngineContext,
        should_stop: Callable[[], bool] | None,
    ) -> tuple[list[_Ranked | CandidateError], int]:
        if self._max_workers <= 1:
            scored: list[_Ranked | CandidateError] = []
            for index, candidate in enumerate(pool):
                if should_stop is not None and should_stop():
                    break
                scored.append(self._score_one(request, index, candidate, context))
            return scored, len(scored)

        futures: list[Future[_Ranked | CandidateError]] = []
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            for index, candidate in enumerate(pool):
                if should_stop is not None and should_stop():
                    break
                futures.append(
                    executor.submit(self._score_one, request, index, candidate, context)
                )
        return [future.result() for future in futures], len(futures)

    def _score_one(
        self,
        request: StaffingRequest,
        index: int,
        candidate: Person | Mapping[str, Any],
        context: EngineContext,
    ) -> _Ranked | CandidateError:
        person_id = _peek_person_id(candidate)
        try:
            person = coerce_person(candidate)
            fit = self._scorer.score(request, person, context=context)
        except InvalidInputError as exc:
            return CandidateError(
                person_id=person_id,
                index=index,
                stage="fit",
                field=exc.field,
                message=exc.message,
            )
        return _Ranked(index=index, person=person, fit=fit)

    @staticmethod
    def _passes_filters(item: _Ranked, options: RankingOptions) -> bool:
        fit = item.fit
        person = item.person
        if fit.disqualified and not options.include_disqualified:
            return False
        if options.min_fit_score is not None and fit.fit_score < options.min_fit_score:
            return False
        if options.min_availability is not None and person.availability < options.min_availability:
            return False
        if options.max_rate is not None and person.hourly_rate > options.max_rate:
            return False
        if options.statuses is not None and person.status not in options.statuses:
            return False
        return True

    @staticmethod
    def _sort_key(options: RankingOptions) -> Callable[[_Ranked], tuple[Any, ...]]:
        descending = _DESCENDING_BY_DEFAULT[options.sort_by]
        if options.sort_order is not None:
            descending = options.sort_order == "desc"
        sign = -1.0 if descending else 1.0

        def primary(fit: PersonFit) -> float:
            if options.sort_by == "rate":
                return fit.hourly_rate
            if options.sort_by == "availability":
                return fit.availability.available_hours
            if options.sort_by == "experience":
                return fit.total_experience
            return fit.fit_score

        def key(item: _Ranked) -> tuple[Any, ...]:
            fit = item.fit
            return (
                sign * primary(fit),
                -fit.fit_score,
                -fit.confidence,
                -fit.availability.available_hours,
                fit.person_id,
            )

        return key


def cache_key(
    request: StaffingRequest,
    options: RankingOptions | None,
    context: EngineContext,
) -> str:
    """Stable key for caching a ranking run."""
    payload = {
        "tenant_id": context.tenant_id,
        "request_id": request.id,
        "request_version": context.request_version,
        "as_of": context.as_of.isoformat() if context.as_of else None,
        "options": (options or RankingOptions()).model_dump(mode="json"),
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def _peek_person_id(candidate: Person | Mapping[str, Any]) -> int | None:
    if isinstance(candidate, Person):
        return candidate.id
    if not isinstance(candidate, Mapping):
        return None
    raw = candidate.get("id", candidate.get("personId"))
    try:
        return int(raw) if raw is not None and not isinstance(raw, bool) else None
    except (TypeError, ValueError):
        return None


__all__ = ["RankingAggregator", "RankingResult", "cache_key"]
