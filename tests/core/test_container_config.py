from __future__ import annotations

from staffingfit.container import create_container
from staffingfit.core import FitScorer, RankingAggregator
from staffingfit.schemas.config import AppConfig, load_config


def test_create_container_with_overrides():
    container = create_container(
        settings={
            "core": {"score_weights": {"skill_match": 0.6, "rate": 0.0}, "require_availability": True},
            "evaluators": {
                "skill": {"min_similarity": 80, "synonyms": {"Kubernetes": ["k8s"]}},
                "experience": {"reference_years": 6},
                "availability": {"active_statuses": ["Active", "On Leave"]},
                "rate": {"overage_tolerance": 0.25},
                "certification": {"max_bonus": 2.5},
            },
            "ranking": {"max_workers": 3},
        }
    )

    scorer = container.fit_scorer()
    aggregator = container.aggregator()

    assert container.skill_matcher().config.min_similarity == 80
    assert container.skill_matcher().same_skill("K8s", "kubernetes")
    assert container.experience_evaluator()._config.reference_years == 6
    assert container.availability_evaluator()._config.active_statuses == ("Active", "On Leave")
    assert container.rate_evaluator()._config.overage_tolerance == 0.25
    assert container.certification_evaluator().max_bonus == 2.5
    assert scorer._score_weights["skill_match"] == 0.6
    assert scorer._score_weights["rate"] == 0.0
    assert scorer._score_weights["experience"] == 0.15
    assert scorer._require_availability is True
    assert scorer.matcher is container.skill_matcher()
    assert aggregator._max_workers == 3


def test_default_container_uses_builtin_weights():
    container = create_container()

    scorer = container.fit_scorer()
    aggregator = container.aggregator()

    assert isinstance(scorer, FitScorer)
    assert isinstance(aggregator, RankingAggregator)
    assert scorer._score_weights == FitScorer.DEFAULT_WEIGHTS
    assert scorer._require_availability is False
    assert aggregator._max_workers == 1
    assert container.fit_scorer() is scorer


def test_load_config_feeds_container():
    data = {
        "core": {"score_weights": {"location": 0.3}},
        "evaluators": {"location": {"region_score": 0.5}},
    }
    app_config = load_config(data)
    assert isinstance(app_config, AppConfig)

    container = create_container(settings=app_config.to_settings())

    assert container.fit_scorer()._score_weights["location"] == 0.3
    assert container.location_evaluator()._config.region_score == 0.5
