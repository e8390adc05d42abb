"""Skill-name matching and the skill match factor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from rapidfuzz import fuzz

from ...schemas import Person, PersonSkill, RequiredSkill
from ...dates import months_between, parse_date
from .context import FactorContext


@dataclass
class SkillMatchConfig:
    """Configuration for matching requested skills against held skills."""

    min_similarity: float = 90.0
    synonyms: dict[str, list[str]] | None = None

    def __post_init__(self) -> None:
        if self.synonyms is None:
            self.synonyms = {}


def normalize_name(value: str) -> str:
    return " ".join(value.lower().split())


class SkillMatcher:
    """Resolve requested skill names to the candidate's held skills."""

    def __init__(self, config: SkillMatchConfig | None = None) -> None:
        self._config = config or SkillMatchConfig()
        self._groups: dict[str, set[str]] = {}
        for canonical, aliases in (self._config.synonyms or {}).items():
            group = {normalize_name(canonical), *(normalize_name(a) for a in aliases)}
            for name in group:
                self._groups.setdefault(name, set()).update(group)

    @property
    def config(self) -> SkillMatchConfig:
        return self._config

    def same_skill(self, left: str, right: str) -> bool:
        a = normalize_name(left)
        b = normalize_name(right)
        if a == b:
            return True
        if b in self._groups.get(a, ()):
            return True
        return fuzz.ratio(a, b) >= self._config.min_similarity

    def best_match(self, name: str, skills: Iterable[PersonSkill]) -> PersonSkill | None:
        candidates = [skill for skill in skills if self.same_skill(name, skill.name)]
        if not candidates:
            return None
        return max(candidates, key=lambda skill: (skill.proficiency, skill.confidence))

    def match_all(
        self,
        required: Iterable[RequiredSkill],
        skills: list[PersonSkill],
    ) -> dict[str, PersonSkill | None]:
        return {item.name: self.best_match(item.name, skills) for item in required}


class SkillMatchEvaluator:
    """Weighted coverage of requested skills, scaled by skill confidence."""

    method = "skill_match"

    def evaluate(self, person: Person, context: FactorContext) -> dict[str, Any]:
        required = context.request.required_skills
        if not required:
            return {"method": self.method, "applies": False, "scores": {}, "metadata": {}}

        weights = [item.weight for item in required]
        total_weight = sum(weights)
        equal_weights = total_weight <= 0.0
        if equal_weights:
            weights = [1.0] * len(required)
            total_weight = float(len(required))

        weighted_sum = 0.0
        confidence_inputs: list[float] = []
        per_skill: list[dict[str, Any]] = []
        for item, weight in zip(required, weights):
            held = context.matches.get(item.name)
            entry: dict[str, Any] = {
                "skill": item.name,
                "required": item.required,
                "minimum_proficiency": item.minimum_proficiency,
                "weight": weight,
                "matched": held is not None,
            }
            if held is None:
                entry["score"] = 0.0
                per_skill.append(entry)
                continue
            ratio = min(1.0, held.proficiency / item.minimum_proficiency)
            skill_score = ratio * held.confidence
            weighted_sum += skill_score * weight
            confidence_inputs.append(held.confidence)
            entry.update(
                {
                    "held_name": held.name,
                    "proficiency": held.proficiency,
                    "confidence": held.confidence,
                    "score": skill_score,
                    "months_since_used": self._months_since_used(held, context),
                }
            )
            per_skill.append(entry)

        score = weighted_sum / total_weight
        matched = sum(1 for entry in per_skill if entry["matched"])
        return {
            "method": self.method,
            "applies": True,
            "scores": {"skill_match": score},
            "metadata": {
                "explanation": (
                    f"Matched {matched} of {len(required)} requested skills "
                    f"({score:.0%} weighted coverage)"
                ),
                "per_skill": per_skill,
                "confidence_inputs": confidence_inputs,
                "equal_weights": equal_weights,
            },
        }

    @staticmethod
    def _months_since_used(skill: PersonSkill, context: FactorContext) -> int | None:
        last_used = parse_date(skill.last_used)
        if last_used is None:
            return None
        return max(0, months_between(last_used, context.as_of))
