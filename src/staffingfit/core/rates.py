"""Rate composition.

The composition order is fixed::

    subtotal_absolute   = base + sum(absolute premium amounts)
    multiplier          = product(1 + percentage / 100)
    subtotal_percentage = subtotal_absolute * multiplier
    computed_total      = subtotal_percentage * scarcity

Nothing is rounded between steps. Rounding to the currency's minor unit is a
presentation concern (:meth:`RateBreakdown.rounded_total`).
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from ..schemas import (
    AbsolutePremium,
    PercentagePremium,
    Person,
    RateBreakdown,
    RateOverride,
    RatePolicy,
    StaffingRequest,
)
from .errors import InvalidInputError
from .evaluators import SkillMatcher


def compose(
    base: float,
    abs_premiums: Iterable[AbsolutePremium | Mapping[str, Any]] = (),
    pct_premiums: Iterable[PercentagePremium | Mapping[str, Any]] = (),
    scarcity: float = 1.0,
    override: RateOverride | Mapping[str, Any] | None = None,
    *,
    currency: str = "USD",
) -> RateBreakdown:
    """Compose a rate from its parts.

    With ``override`` the returned ``total`` is the override value while
    ``computed_total`` keeps the composed value; a mismatch is reported through
    ``has_discrepancy`` and is not an error.

    Raises:
        InvalidInputError: a value is outside its domain, or percentage
            premiums drive the rate below zero.
    """

    absolute = [_coerce(AbsolutePremium, item, f"abs_premiums.{i}") for i, item in enumerate(abs_premiums)]
    percentage = [_coerce(PercentagePremium, item, f"pct_premiums.{i}") for i, item in enumerate(pct_premiums)]
    manual = _coerce(RateOverride, override, "override") if override is not None else None

    _require_finite("base", base)
    if base < 0:
        raise InvalidInputError("base", "base rate must be >= 0", value=base)
    for index, premium in enumerate(absolute):
        _require_finite(f"abs_premiums.{index}.amount", premium.amount)
        if premium.amount < 0:
            raise InvalidInputError(
                f"abs_premiums.{index}.amount",
                "absolute premium must be >= 0",
                value=premium.amount,
            )
    for index, premium in enumerate(percentage):
        _require_finite(f"pct_premiums.{index}.percentage", premium.percentage)
    _require_finite("scarcity", scarcity)
    if scarcity <= 0:
        raise InvalidInputError("scarcity", "scarcity multiplier must be > 0", value=scarcity)
    if manual is not None:
        _require_finite("override.value", manual.value)
        if manual.value < 0:
            raise InvalidInputError("override.value", "override rate must be >= 0", value=manual.value)
        if not manual.source.strip():
            raise InvalidInputError("override.source", "override requires a source", value=manual.source)

    subtotal_absolute = base + math.fsum(premium.amount for premium in absolute)
    multiplier = math.prod(1 + premium.percentage / 100 for premium in percentage)
    subtotal_percentage = subtotal_absolute * multiplier
    if subtotal_percentage < 0:
        raise InvalidInputError(
            "pct_premiums",
            f"combined multiplier {multiplier:g} makes the rate negative",
            value=multiplier,
        )
    computed_total = subtotal_percentage * scarcity

    return RateBreakdown(
        currency=currency,
        base=base,
        abs_premiums=absolute,
        pct_premiums=percentage,
        scarcity=scarcity,
        subtotal_absolute=subtotal_absolute,
        multiplier=multiplier,
        subtotal_percentage=subtotal_percentage,
        computed_total=computed_total,
        total=manual.value if manual is not None else computed_total,
        override_source=manual.source if manual is not None else None,
    )


class RateComposer:
    """Builds rate previews for candidates from a caller-supplied policy."""

    def __init__(self, *, matcher: SkillMatcher | None = None) -> None:
        self._matcher = matcher or SkillMatcher()

    def compose(self, *args: Any, **kwargs: Any) -> RateBreakdown:
        return compose(*args, **kwargs)

    def preview(
        self,
        person: Person,
        request: StaffingRequest,
        policy: RatePolicy | None = None,
    ) -> RateBreakdown:
        policy = policy or RatePolicy()

        absolute = list(policy.abs_premiums)
        for skill_name, amount in policy.skill_premiums.items():
            held = self._matcher.best_match(skill_name, person.skills)
            if held is not None and held.proficiency >= policy.skill_premium_min_proficiency:
                absolute.append(AbsolutePremium(source=f"Skill: {skill_name}", amount=amount))

        percentage = list(policy.pct_premiums)
        urgency_pct = policy.urgency_percentages.get(request.urgency)
        if urgency_pct:
            percentage.append(
                PercentagePremium(source=f"Urgency: {request.urgency}", percentage=urgency_pct)
            )

        return compose(
            person.hourly_rate,
            absolute,
            percentage,
            policy.scarcity,
            policy.overrides.get(person.id),
            currency=policy.currency or person.currency,
        )


def _coerce(model: Any, value: Any, field: str) -> Any:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise InvalidInputError.from_validation_error(exc, prefix=field) from exc


def _require_finite(field: str, value: float) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise InvalidInputError(field, "must be a number", value=value)
    if not math.isfinite(value):
        raise InvalidInputError(field, "must be finite", value=value)
