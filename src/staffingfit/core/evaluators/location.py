"""Location and timezone proximity factor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rapidfuzz import fuzz

from ...schemas import Person
from .context import FactorContext
from .skills import normalize_name


@dataclass
class LocationConfig:
    """Proximity scores for on-site requests."""

    exact_score: float = 1.0
    region_score: float = 0.6
    other_score: float = 0.2
    min_similarity: float = 90.0


class LocationEvaluator:
    """Score how close the candidate is to an on-site request."""

    method = "location"

    def __init__(self, *, config: LocationConfig | None = None) -> None:
        self._config = config or LocationConfig()

    def evaluate(self, person: Person, context: FactorContext) -> dict[str, Any]:
        request = context.request
        if request.remote:
            return self._response(1.0, "remote", "Remote role: location does not matter")
        if not request.location.strip():
            return self._response(1.0, "unspecified", "No location preference on the request")

        if self._same_place(request.location, person.location):
            return self._response(
                self._config.exact_score,
                "exact",
                f"Based in {person.location}",
            )
        if self._same_region(request.location, request.timezone, person.location, person.timezone):
            return self._response(
                self._config.region_score,
                "region",
                f"{person.location or 'Unknown location'} is in the same region as {request.location}",
            )
        return self._response(
            self._config.other_score,
            "other",
            f"{person.location or 'Unknown location'} is outside the region of {request.location}",
        )

    def _same_place(self, left: str, right: str) -> bool:
        if not left.strip() or not right.strip():
            return False
        a = normalize_name(left)
        b = normalize_name(right)
        return a == b or fuzz.ratio(a, b) >= self._config.min_similarity

    def _same_region(
        self,
        request_location: str,
        request_timezone: str | None,
        person_location: str,
        person_timezone: str | None,
    ) -> bool:
        request_region = _trailing_component(request_location)
        person_region = _trailing_component(person_location)
        if request_region and person_region and request_region == person_region:
            return True
        request_area = _timezone_area(request_timezone)
        return bool(request_area) and request_area == _timezone_area(person_timezone)

    def _response(self, score: float, match: str, explanation: str) -> dict[str, Any]:
        return {
            "method": self.method,
            "applies": True,
            "scores": {"location": score},
            "metadata": {"explanation": explanation, "match": match},
        }


def _trailing_component(location: str) -> str | None:
    parts = [part.strip() for part in location.split(",") if part.strip()]
    if len(parts) < 2:
        return None
    return normalize_name(parts[-1])


def _timezone_area(timezone: str | None) -> str | None:
    if not timezone or "/" not in timezone:
        return None
    return timezone.split("/", 1)[0].lower()
