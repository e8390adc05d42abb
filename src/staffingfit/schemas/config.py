"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class CoreConfig(BaseModel):
    score_weights: dict[str, float] | None = None
    require_availability: bool | None = None


class EvaluatorConfig(BaseModel):
    skill: dict[str, Any] | None = None
    experience: dict[str, Any] | None = None
    availability: dict[str, Any] | None = None
    location: dict[str, Any] | None = None
    rate: dict[str, Any] | None = None
    certification: dict[str, Any] | None = None


class RankingConfig(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)


class AppConfig(BaseModel):
    core: CoreConfig = Field(default_factory=CoreConfig)
    evaluators: EvaluatorConfig = Field(default_factory=EvaluatorConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        core_settings = self.core.model_dump(exclude_none=True)
        if core_settings:
            settings["core"] = core_settings
        evaluator_settings = self.evaluators.model_dump(exclude_none=True)
        if evaluator_settings:
            settings["evaluators"] = evaluator_settings
        ranking_settings = self.ranking.model_dump(exclude_none=True)
        if ranking_settings:
            settings["ranking"] = ranking_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
