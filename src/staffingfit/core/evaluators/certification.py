"""Certification bonus."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from rapidfuzz import fuzz

from ...schemas import Person
from .context import FactorContext
from .skills import normalize_name

_TOKEN_RE = re.compile(r"[a-z0-9+#]+")


@dataclass
class CertificationConfig:
    """Bonus points per matching certification and the overall cap."""

    bonus_per_match: float = 2.5
    max_bonus: float = 5.0
    min_similarity: float = 85.0


class CertificationEvaluator:
    """Award a bounded additive bonus for certifications in the role's domain."""

    method = "certification"

    def __init__(self, *, config: CertificationConfig | None = None) -> None:
        self._config = config or CertificationConfig()

    @property
    def max_bonus(self) -> float:
        return self._config.max_bonus

    def evaluate(self, person: Person, context: FactorContext) -> dict[str, Any]:
        keywords = self._keywords(context)
        matched: list[dict[str, str]] = []
        for certification in person.certifications:
            keyword = self._matching_keyword(certification, keywords)
            if keyword is not None:
                matched.append({"certification": certification, "keyword": keyword})

        bonus = min(self._config.max_bonus, self._config.bonus_per_match * len(matched))
        if matched:
            names = ", ".join(item["certification"] for item in matched)
            explanation = f"Relevant certifications: {names}"
        elif person.certifications:
            explanation = "No certifications match the role's domain"
        else:
            explanation = "No certifications on record"
        return {
            "method": self.method,
            "applies": True,
            "scores": {"certification_bonus": bonus},
            "metadata": {
                "explanation": explanation,
                "matched": matched,
                "keywords": keywords,
            },
        }

    @staticmethod
    def _keywords(context: FactorContext) -> list[str]:
        request = context.request
        source = request.domain_keywords or [item.name for item in request.required_skills]
        return [keyword.strip() for keyword in source if keyword and keyword.strip()]

    def _matching_keyword(self, certification: str, keywords: list[str]) -> str | None:
        words = _tokens(certification)
        for keyword in keywords:
            needle = _tokens(keyword)
            if not needle or len(needle) > len(words):
                continue
            phrase = " ".join(needle)
            for start in range(len(words) - len(needle) + 1):
                window = " ".join(words[start : start + len(needle)])
                if window == phrase or fuzz.ratio(window, phrase) >= self._config.min_similarity:
                    return keyword
        return None


def _tokens(value: str) -> list[str]:
    return _TOKEN_RE.findall(normalize_name(value))
