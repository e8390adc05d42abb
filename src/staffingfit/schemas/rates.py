"""Rate composition value types."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from pydantic import Field, computed_field

from .base import EngineModel
from .request import Urgency

# Currencies whose minor unit is not the cent.
_MINOR_UNITS: dict[str, int] = {"JPY": 0, "KRW": 0, "BHD": 3, "KWD": 3}

DISCREPANCY_TOLERANCE = 1e-9


class AbsolutePremium(EngineModel):
    """Flat amount added to the base rate."""

    source: str = Field(min_length=1)
    amount: float


class PercentagePremium(EngineModel):
    """Compounding percentage adjustment; negative values are discounts."""

    source: str = Field(min_length=1)
    percentage: float


class RateOverride(EngineModel):
    """Manually approved final rate."""

    value: float
    source: str


class RateBreakdown(EngineModel):
    """Result of composing a rate.

    ``total`` is the billed value: the override when one was supplied,
    otherwise ``computed_total``. Neither is rounded.
    """

    currency: str
    base: float
    abs_premiums: list[AbsolutePremium] = Field(default_factory=list)
    pct_premiums: list[PercentagePremium] = Field(default_factory=list)
    scarcity: float
    subtotal_absolute: float
    multiplier: float
    subtotal_percentage: float
    computed_total: float
    total: float
    override_source: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def discrepancy(self) -> float:
        return self.total - self.computed_total

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_discrepancy(self) -> bool:
        if self.override_source is None:
            return False
        scale = max(abs(self.total), abs(self.computed_total), 1.0)
        return abs(self.discrepancy) > DISCREPANCY_TOLERANCE * scale

    def rounded_total(self) -> Decimal:
        """Round ``total`` to the currency's minor unit for display."""
        return round_to_minor_unit(self.total, self.currency)


class RatePolicy(EngineModel):
    """Premiums, scarcity and overrides applied to rate previews."""

    currency: str | None = None
    abs_premiums: list[AbsolutePremium] = Field(default_factory=list)
    pct_premiums: list[PercentagePremium] = Field(default_factory=list)
    skill_premiums: dict[str, float] = Field(default_factory=dict)
    skill_premium_min_proficiency: int = Field(default=4, ge=1, le=5)
    urgency_percentages: dict[Urgency, float] = Field(default_factory=dict)
    scarcity: float = 1.0
    overrides: dict[int, RateOverride] = Field(default_factory=dict)


def round_to_minor_unit(value: float, currency: str) -> Decimal:
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite amount {value!r}")
    places = _MINOR_UNITS.get(currency.upper(), 2)
    quantum = Decimal(1).scaleb(-places)
    return Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
