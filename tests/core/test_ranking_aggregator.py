from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from staffingfit.core import RankingAggregator, SkillMatcher, cache_key
from staffingfit.schemas import (
    AvailabilitySummary,
    Budget,
    DurationWindow,
    EngineContext,
    Person,
    PersonFit,
    PersonSkill,
    RankingOptions,
    RateOverride,
    RatePolicy,
    RequiredSkill,
    StaffingRequest,
)

CONTEXT = EngineContext(tenant_id="acme", as_of=date(2025, 1, 15))

REQUEST = StaffingRequest(
    id=42,
    title="Data Engineer",
    required_skills=[
        RequiredSkill(name="Python", minimum_proficiency=3, weight=2),
        RequiredSkill(name="SQL", minimum_proficiency=3),
    ],
    budget=Budget(max=140),
    duration=DurationWindow(start=date(2025, 2, 1), end=date(2025, 7, 31), hours_per_week=40),
    remote=True,
)


class StubScorer:
    """Returns preset fits and counts how often it was asked."""

    def __init__(self, fits: dict[int, PersonFit]):
        self.fits = fits
        self.calls = 0
        self.matcher = SkillMatcher()

    def score(self, request, candidate, *, context):
        self.calls += 1
        return self.fits[candidate.id]


def make_fit(person_id: int, fit_score: float, confidence: float = 80.0, hours: float = 40.0, **kwargs: Any) -> PersonFit:
    return PersonFit(
        person_id=person_id,
        fit_score=fit_score,
        confidence=confidence,
        availability=AvailabilitySummary(available_hours=hours),
        **kwargs,
    )


def make_people(*ids: int, rate: float = 100.0) -> list[Person]:
    return [Person(id=person_id, hourly_rate=rate + person_id, availability=100) for person_id in ids]


def candidate_payload(person_id: int, proficiency: int, **kwargs: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": person_id,
        "name": f"Candidate {person_id}",
        "hourlyRate": 100 + person_id * 10,
        "availability": 100,
        "totalExperience": person_id,
        "skills": [
            {"name": "Python", "proficiency": proficiency, "confidence": 0.9, "yearsExperience": person_id},
            {"name": "SQL", "proficiency": 3, "confidence": 0.7, "yearsExperience": 2},
        ],
    }
    payload.update(kwargs)
    return payload


def test_batch_isolates_invalid_candidate():
    pool = [
        candidate_payload(1, 5),
        candidate_payload(2, 4),
        candidate_payload(3, -1),
        candidate_payload(4, 3),
        candidate_payload(5, 2),
    ]

    result = RankingAggregator().rank(REQUEST, pool, context=CONTEXT)

    assert len(result.results) == 4
    assert {fit.person_id for fit in result.results} == {1, 2, 4, 5}
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.person_id == 3
    assert error.index == 2
    assert error.stage == "fit"
    assert error.field == "skills.0.proficiency"
    assert result.status == "partial"
    assert result.total == 4
    assert result.tenant_id == "acme"


def test_results_sorted_by_fit_score_descending():
    pool = [candidate_payload(1, 3), candidate_payload(2, 5), candidate_payload(3, 4)]

    result = RankingAggregator().rank(REQUEST, pool, context=CONTEXT)

    scores = [fit.fit_score for fit in result.results]
    assert scores == sorted(scores, reverse=True)
    # Python coverage is capped at the minimum, so relevant years decide.
    assert [fit.person_id for fit in result.results] == [3, 2, 1]
    assert result.status == "success"


def test_ties_break_on_confidence_hours_then_id():
    fits = {
        1: make_fit(1, 80, confidence=90, hours=20),
        2: make_fit(2, 80, confidence=70, hours=40),
        3: make_fit(3, 80, confidence=90, hours=40),
        4: make_fit(4, 80, confidence=90, hours=40),
        5: make_fit(5, 95),
    }
    aggregator = RankingAggregator(scorer=StubScorer(fits))

    result = aggregator.rank(REQUEST, make_people(4, 2, 1, 5, 3), context=CONTEXT)

    assert [fit.person_id for fit in result.results] == [5, 3, 4, 1, 2]


def test_order_is_independent_of_input_order():
    fits = {person_id: make_fit(person_id, 70) for person_id in range(1, 6)}
    aggregator = RankingAggregator(scorer=StubScorer(fits))

    forward = aggregator.rank(REQUEST, make_people(1, 2, 3, 4, 5), context=CONTEXT)
    backward = aggregator.rank(REQUEST, make_people(5, 4, 3, 2, 1), context=CONTEXT)

    assert [fit.person_id for fit in forward.results] == [1, 2, 3, 4, 5]
    assert [fit.person_id for fit in backward.results] == [1, 2, 3, 4, 5]


def test_sort_by_rate_defaults_to_ascending():
    fits = {
        1: make_fit(1, 60, hourly_rate=150),
        2: make_fit(2, 90, hourly_rate=120),
        3: make_fit(3, 75, hourly_rate=90),
    }
    aggregator = RankingAggregator(scorer=StubScorer(fits))

    ascending = aggregator.rank(REQUEST, make_people(1, 2, 3), RankingOptions(sort_by="rate"), context=CONTEXT)
    descending = aggregator.rank(
        REQUEST,
        make_people(1, 2, 3),
        RankingOptions(sort_by="rate", sort_order="desc"),
        context=CONTEXT,
    )

    assert [fit.person_id for fit in ascending.results] == [3, 2, 1]
    assert [fit.person_id for fit in descending.results] == [1, 2, 3]


def test_max_results_truncates_after_sorting():
    fits = {
        1: make_fit(1, 10),
        2: make_fit(2, 50),
        3: make_fit(3, 90),
        4: make_fit(4, 70),
        5: make_fit(5, 30),
    }
    scorer = StubScorer(fits)

    result = RankingAggregator(scorer=scorer).rank(
        REQUEST,
        make_people(1, 2, 3, 4, 5),
        RankingOptions(max_results=2),
        context=CONTEXT,
    )

    assert scorer.calls == 5
    assert [fit.person_id for fit in result.results] == [3, 4]
    assert result.total == 5
    assert result.to_envelope()["meta"]["returned"] == 2


def test_filters_drop_candidates_before_ranking():
    fits = {
        1: make_fit(1, 0, confidence=0, disqualified=True),
        2: make_fit(2, 40),
        3: make_fit(3, 85),
    }
    people = make_people(1, 2, 3)
    aggregator = RankingAggregator(scorer=StubScorer(fits))

    result = aggregator.rank(
        REQUEST,
        people,
        RankingOptions(include_disqualified=False, min_fit_score=50),
        context=CONTEXT,
    )

    assert [fit.person_id for fit in result.results] == [3]
    assert result.total == 1


def test_disqualified_candidates_sort_last_by_default():
    pool = [
        candidate_payload(1, 4),
        candidate_payload(2, 5),
    ]
    request = REQUEST.model_copy(
        update={"required_skills": [RequiredSkill(name="Python", minimum_proficiency=5, required=True)]}
    )

    result = RankingAggregator().rank(request, pool, context=CONTEXT)

    assert [fit.person_id for fit in result.results] == [2, 1]
    assert result.results[1].disqualified is True


def test_rate_preview_failure_keeps_fit():
    fits = {1: make_fit(1, 90), 2: make_fit(2, 80)}
    policy = RatePolicy(overrides={2: RateOverride(value=-10, source="Finance")})
    aggregator = RankingAggregator(scorer=StubScorer(fits))

    result = aggregator.rank(
        REQUEST,
        make_people(1, 2),
        RankingOptions(include_rate_preview=True, rate_policy=policy),
        context=CONTEXT,
    )

    assert [fit.person_id for fit in result.results] == [1, 2]
    assert result.results[0].rate_preview is not None
    assert result.results[0].rate_preview.total == pytest.approx(101.0)
    assert result.results[1].rate_preview is None
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.person_id == 2
    assert error.stage == "rate_preview"
    assert error.field == "override.value"
    assert result.status == "partial"


def test_cooperative_stop_returns_partial_batch():
    fits = {person_id: make_fit(person_id, 50 + person_id) for person_id in range(1, 6)}
    scorer = StubScorer(fits)

    result = RankingAggregator(scorer=scorer).rank(
        REQUEST,
        make_people(1, 2, 3, 4, 5),
        context=CONTEXT,
        should_stop=lambda: scorer.calls >= 2,
    )

    assert [fit.person_id for fit in result.results] == [2, 1]
    assert result.complete is False
    assert result.skipped == 3
    assert result.status == "partial"


def test_parallel_scoring_matches_sequential():
    pool = [candidate_payload(person_id, 1 + person_id % 5) for person_id in range(1, 13)]

    sequential = RankingAggregator().rank(REQUEST, pool, context=CONTEXT)
    parallel = RankingAggregator(max_workers=4).rank(REQUEST, pool, context=CONTEXT)

    assert [fit.person_id for fit in parallel.results] == [fit.person_id for fit in sequential.results]
    assert [fit.fit_score for fit in parallel.results] == [fit.fit_score for fit in sequential.results]


def test_envelope_uses_camel_case_fields():
    pool = [candidate_payload(1, 4), {"id": 9, "hourlyRate": -5, "availability": 100}]

    envelope = RankingAggregator().rank(REQUEST, pool, context=CONTEXT).to_envelope()

    assert envelope["status"] == "partial"
    assert envelope["data"][0]["personId"] == 1
    assert "fitScore" in envelope["data"][0]
    assert envelope["meta"]["total"] == 1
    assert envelope["meta"]["errors"][0]["personId"] == 9
    assert envelope["meta"]["errors"][0]["field"] == "hourlyRate"
    assert envelope["meta"]["tenant_id"] == "acme"


def test_cache_key_is_stable_and_scoped():
    options = RankingOptions(max_results=5)

    first = cache_key(REQUEST, options, CONTEXT)
    second = cache_key(REQUEST, RankingOptions(max_results=5), CONTEXT)
    other_tenant = cache_key(REQUEST, options, EngineContext(tenant_id="globex", as_of=date(2025, 1, 15)))
    other_options = cache_key(REQUEST, RankingOptions(max_results=10), CONTEXT)

    assert first == second
    assert first != other_tenant
    assert first != other_options


def test_context_requires_tenant():
    with pytest.raises(ValueError):
        EngineContext(tenant_id="")
