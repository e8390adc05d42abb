"""Fit factor evaluators."""

from .availability import AvailabilityConfig, AvailabilityEvaluator
from .certification import CertificationConfig, CertificationEvaluator
from .context import FactorContext
from .experience import ExperienceConfig, ExperienceEvaluator
from .location import LocationConfig, LocationEvaluator
from .rate import RateFitConfig, RateFitEvaluator
from .skills import SkillMatchConfig, SkillMatcher, SkillMatchEvaluator

__all__ = [
    "AvailabilityConfig",
    "AvailabilityEvaluator",
    "CertificationConfig",
    "CertificationEvaluator",
    "ExperienceConfig",
    "ExperienceEvaluator",
    "FactorContext",
    "LocationConfig",
    "LocationEvaluator",
    "RateFitConfig",
    "RateFitEvaluator",
    "SkillMatchConfig",
    "SkillMatchEvaluator",
    "SkillMatcher",
]
