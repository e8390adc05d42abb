from __future__ import annotations

import itertools
from decimal import Decimal

import pytest

from staffingfit.core import InvalidInputError, compose
from staffingfit.schemas import AbsolutePremium, PercentagePremium, RateOverride


def test_compose_documented_example():
    breakdown = compose(
        100,
        [AbsolutePremium(source="Skill", amount=20)],
        [PercentagePremium(source="Market", percentage=10)],
        1.2,
    )

    assert breakdown.subtotal_absolute == pytest.approx(120.0)
    assert breakdown.multiplier == pytest.approx(1.10)
    assert breakdown.subtotal_percentage == pytest.approx(132.0)
    assert breakdown.computed_total == pytest.approx(158.4)
    assert breakdown.total == pytest.approx(158.4)
    assert breakdown.override_source is None
    assert breakdown.has_discrepancy is False


def test_override_keeps_computed_total_for_audit():
    breakdown = compose(
        100,
        [{"source": "Skill", "amount": 20}],
        [{"source": "Market", "percentage": 10}],
        1.2,
        RateOverride(value=150, source="Manager approval"),
    )

    assert breakdown.total == pytest.approx(150.0)
    assert breakdown.computed_total == pytest.approx(158.4)
    assert breakdown.override_source == "Manager approval"
    assert breakdown.has_discrepancy is True
    assert breakdown.discrepancy == pytest.approx(-8.4)


def test_override_matching_computation_is_not_a_discrepancy():
    breakdown = compose(100, override={"value": 100, "source": "Rate card"})

    assert breakdown.total == pytest.approx(100.0)
    assert breakdown.has_discrepancy is False


def test_no_premiums_and_unit_scarcity_returns_base():
    breakdown = compose(87.5)

    assert breakdown.total == 87.5
    assert breakdown.multiplier == 1
    assert breakdown.abs_premiums == []
    assert breakdown.pct_premiums == []


def test_total_matches_closed_form():
    absolute = [AbsolutePremium(source="Senior Level", amount=25), AbsolutePremium(source="Python Expert", amount=15)]
    percentage = [PercentagePremium(source="Market Scarcity", percentage=8), PercentagePremium(source="Discount", percentage=-5)]

    breakdown = compose(185, absolute, percentage, 1.08)

    expected = (185 + 25 + 15) * (1.08 * 0.95) * 1.08
    assert breakdown.total == pytest.approx(expected, rel=1e-12)


def test_percentage_order_does_not_change_total():
    premiums = [
        PercentagePremium(source="Market", percentage=12.5),
        PercentagePremium(source="Urgency", percentage=7),
        PercentagePremium(source="Loyalty", percentage=-3.25),
        PercentagePremium(source="Location", percentage=4),
    ]
    reference = compose(133.33, [], premiums, 1.17).total

    for ordering in itertools.permutations(premiums):
        assert compose(133.33, [], list(ordering), 1.17).total == pytest.approx(reference, rel=1e-9)


def test_no_intermediate_rounding():
    breakdown = compose(
        99.99,
        [AbsolutePremium(source="Skill", amount=0.005)],
        [PercentagePremium(source="Market", percentage=3.333)],
        1.0,
    )

    assert breakdown.total == pytest.approx(99.995 * 1.03333, rel=1e-12)
    assert breakdown.rounded_total() == Decimal("103.33")


def test_rounded_total_uses_currency_minor_unit():
    breakdown = compose(1000, [], [PercentagePremium(source="Market", percentage=5.07)], currency="JPY")

    assert breakdown.rounded_total() == Decimal("1051")


def test_discount_is_allowed():
    breakdown = compose(100, [], [PercentagePremium(source="Volume discount", percentage=-20)])

    assert breakdown.total == pytest.approx(80.0)


@pytest.mark.parametrize(
    "kwargs,field",
    [
        ({"base": -1}, "base"),
        ({"base": 100, "scarcity": 0}, "scarcity"),
        ({"base": 100, "scarcity": -1.5}, "scarcity"),
        ({"base": float("nan")}, "base"),
        ({"base": 100, "abs_premiums": [{"source": "Skill", "amount": -5}]}, "abs_premiums.0.amount"),
        ({"base": 100, "pct_premiums": [{"source": "Bad", "percentage": -150}]}, "pct_premiums"),
        ({"base": 100, "override": {"value": -1, "source": "Manager"}}, "override.value"),
        ({"base": 100, "override": {"value": 90, "source": "  "}}, "override.source"),
    ],
)
def test_invalid_inputs_name_the_field(kwargs: dict, field: str):
    with pytest.raises(InvalidInputError) as exc:
        compose(**kwargs)

    assert exc.value.field == field


def test_malformed_premium_payload_is_a_typed_error():
    with pytest.raises(InvalidInputError) as exc:
        compose(100, [{"source": "Skill"}])

    assert exc.value.field == "abs_premiums.0.amount"


def test_hundred_percent_discount_yields_zero():
    breakdown = compose(100, [], [PercentagePremium(source="Waived", percentage=-100)], 1.5)

    assert breakdown.total == 0
