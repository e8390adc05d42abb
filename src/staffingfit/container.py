"""Dependency injection container for the ranking engine."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .core import (
    AvailabilityEvaluator,
    CertificationEvaluator,
    ExperienceEvaluator,
    FitScorer,
    LocationEvaluator,
    RankingAggregator,
    RateComposer,
    RateFitEvaluator,
    SkillMatcher,
    SkillMatchEvaluator,
)
from .core.evaluators import (
    AvailabilityConfig,
    CertificationConfig,
    ExperienceConfig,
    LocationConfig,
    RateFitConfig,
    SkillMatchConfig,
)
from .pipeline import RankingPipeline


class EngineContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    skill_matcher = providers.Singleton(SkillMatcher)

    skill_evaluator = providers.Singleton(SkillMatchEvaluator)
    experience_evaluator = providers.Singleton(ExperienceEvaluator)
    availability_evaluator = providers.Singleton(AvailabilityEvaluator)
    location_evaluator = providers.Singleton(LocationEvaluator)
    rate_evaluator = providers.Singleton(RateFitEvaluator)
    certification_evaluator = providers.Singleton(CertificationEvaluator)

    fit_scorer = providers.Singleton(
        FitScorer,
        matcher=skill_matcher,
        skill_evaluator=skill_evaluator,
        experience_evaluator=experience_evaluator,
        availability_evaluator=availability_evaluator,
        location_evaluator=location_evaluator,
        rate_evaluator=rate_evaluator,
        certification_evaluator=certification_evaluator,
        score_weights=config.core.score_weights,
        require_availability=config.core.require_availability,
    )

    rate_composer = providers.Singleton(RateComposer, matcher=skill_matcher)

    aggregator = providers.Singleton(
        RankingAggregator,
        scorer=fit_scorer,
        composer=rate_composer,
        max_workers=config.ranking.max_workers,
    )

    pipeline = providers.Factory(RankingPipeline, aggregator=aggregator)


def create_container(*, settings: dict[str, Any] | None = None) -> EngineContainer:
    """Instantiate container with optional overrides."""

    container = EngineContainer()

    if not settings or not isinstance(settings, dict):
        return container

    container.config.from_dict(
        {
            "core": settings.get("core", {}),
            "ranking": settings.get("ranking", {}),
        }
    )

    evaluator_settings = settings.get("evaluators", {})

    if "skill" in evaluator_settings:
        skill_config = SkillMatchConfig(**evaluator_settings["skill"])
        container.skill_matcher.override(providers.Singleton(SkillMatcher, config=skill_config))

    if "experience" in evaluator_settings:
        experience_config = ExperienceConfig(**evaluator_settings["experience"])
        container.experience_evaluator.override(
            providers.Singleton(ExperienceEvaluator, config=experience_config)
        )

    if "availability" in evaluator_settings:
        availability_settings = dict(evaluator_settings["availability"])
        for key in ("active_statuses", "conflict_statuses"):
            if key in availability_settings:
                availability_settings[key] = tuple(availability_settings[key])
        availability_config = AvailabilityConfig(**availability_settings)
        container.availability_evaluator.override(
            providers.Singleton(AvailabilityEvaluator, config=availability_config)
        )

    if "location" in evaluator_settings:
        location_config = LocationConfig(**evaluator_settings["location"])
        container.location_evaluator.override(
            providers.Singleton(LocationEvaluator, config=location_config)
        )

    if "rate" in evaluator_settings:
        rate_config = RateFitConfig(**evaluator_settings["rate"])
        container.rate_evaluator.override(providers.Singleton(RateFitEvaluator, config=rate_config))

    if "certification" in evaluator_settings:
        certification_config = CertificationConfig(**evaluator_settings["certification"])
        container.certification_evaluator.override(
            providers.Singleton(CertificationEvaluator, config=certification_config)
        )

    return container
