"""Tests for the royalty calculator — pure functions."""

import pytest

from src.rl_royalty.domain.calculator import ROYALTY_RATE_BPS, compute_royalty, royalty_for_facts
from src.rl_royalty.domain.models import SaleFact


def _fact(unit_price: int, quantity: int, line: str = "1") -> SaleFact:
    return SaleFact(
        order_id="ORD-1",
        line_item_id=line,
        design_id="D-1",
        buyer_id="buyer",
        designer_id="designer",
        eligible=True,
        unit_price=unit_price,
        quantity=quantity,
        paid_at=None,
    )


def test_default_rate_is_ten_percent() -> None:
    assert ROYALTY_RATE_BPS == 1000


class TestComputeRoyalty:
    def test_ten_percent_of_gross(self) -> None:
        assert compute_royalty(1000, 2) == 200

    def test_rounds_half_up(self) -> None:
        assert compute_royalty(15, 3) == 5  # 4.5
        assert compute_royalty(499, 1) == 50  # 49.9

    def test_zero_price(self) -> None:
        assert compute_royalty(0, 5) == 0

    def test_custom_rate(self) -> None:
        assert compute_royalty(1000, 1, rate_bps=2500) == 250

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValueError, match="unit_price"):
            compute_royalty(-1, 1)

    def test_negative_quantity_rejected(self) -> None:
        with pytest.raises(ValueError, match="quantity"):
            compute_royalty(100, -1)


class TestRoyaltyForFacts:
    def test_each_line_rounded_separately(self) -> None:
        # 4.5 + 4.5 rounds to 5 + 5, not round(9.0)
        facts = [_fact(45, 1, "1"), _fact(45, 1, "2")]
        assert royalty_for_facts(facts) == 10

    def test_empty(self) -> None:
        assert royalty_for_facts([]) == 0
