"""
Tests for single-holding value math.

Tests: valuation/services/values.py
"""

from decimal import Decimal

import pytest

from valuation.services.values import (
    cash_buffer_qty,
    effective_price,
    holding_value,
    profit_loss,
    qty_from_value,
    value_for_share,
)

from ..factories import HoldingFactory


@pytest.mark.services
@pytest.mark.unit
class TestHoldingValue:
    def test_without_live_price_uses_manual_value(self) -> None:
        """No live price: live value equals manual value and nothing changed today."""
        value = holding_value(HoldingFactory(price=Decimal("10"), qty=Decimal("3")))
        assert value.live_value == value.manual_value == Decimal("30")
        assert value.value == value.live_value
        assert value.used_live_price is False
        assert value.day_change_value == Decimal("0")

    def test_live_price_wins(self) -> None:
        value = holding_value(
            HoldingFactory(price=Decimal("10"), live_price=Decimal("12"), qty=Decimal("3"))
        )
        assert value.live_value == Decimal("36")
        assert value.manual_value == Decimal("30")
        assert value.day_change_value == Decimal("6")
        assert value.used_live_price is True

    def test_invalid_live_price_is_ignored(self) -> None:
        holding = HoldingFactory(price=Decimal("10"), live_price=float("nan"), qty=Decimal("2"))
        assert effective_price(holding) == Decimal("10")
        assert holding_value(holding).used_live_price is False

    def test_invalid_price_and_qty_contribute_zero(self) -> None:
        """Negative or non-finite inputs degrade to zero instead of raising."""
        assert holding_value(HoldingFactory(price=Decimal("-5"))).live_value == Decimal("0")
        assert holding_value(HoldingFactory(qty="NaN")).live_value == Decimal("0")

    def test_excluded_holding_still_has_a_value(self) -> None:
        value = holding_value(HoldingFactory(include=False))
        assert value.live_value == Decimal("100")


@pytest.mark.services
@pytest.mark.unit
class TestProfitLoss:
    def test_none_without_cost_basis(self) -> None:
        """No avg cost means "not applicable", not a zero gain."""
        assert profit_loss(HoldingFactory(avg_cost=None)) is None

    def test_none_for_empty_position(self) -> None:
        assert profit_loss(HoldingFactory(avg_cost=Decimal("5"), qty=Decimal("0"))) is None

    def test_gain(self) -> None:
        pnl = profit_loss(
            HoldingFactory(
                price=Decimal("10"),
                live_price=Decimal("12.345"),
                qty=Decimal("3"),
                avg_cost=Decimal("10"),
                day_change=Decimal("0.5"),
                day_change_percent=Decimal("4.2"),
            )
        )
        assert pnl.cost_basis == Decimal("30.00")
        assert pnl.market_value == Decimal("37.04")
        assert pnl.total_gain == Decimal("7.04")
        assert pnl.total_gain_percent == Decimal("23.45")
        assert pnl.day_change_value == Decimal("1.50")
        assert pnl.day_change_percent == Decimal("4.2")

    def test_rounds_to_currency_minor_unit(self) -> None:
        pnl = profit_loss(
            HoldingFactory(price=Decimal("101.6"), qty=Decimal("1"), avg_cost=Decimal("100")),
            currency="JPY",
        )
        assert pnl.total_gain == Decimal("2")
        assert pnl.market_value == Decimal("102")


@pytest.mark.services
@pytest.mark.unit
class TestSizingHelpers:
    def test_qty_from_value(self) -> None:
        assert qty_from_value(Decimal("500"), Decimal("25")) == Decimal("20")

    def test_qty_from_value_without_price(self) -> None:
        assert qty_from_value(Decimal("500"), Decimal("0")) == Decimal("0")

    def test_value_for_share(self) -> None:
        """Half the total means matching everything else."""
        assert value_for_share(Decimal("100"), Decimal("0.5")) == Decimal("100")

    def test_value_for_share_is_capped_below_one(self) -> None:
        assert value_for_share(Decimal("1"), Decimal("1")) == Decimal("999999")

    def test_value_for_share_invalid(self) -> None:
        assert value_for_share(Decimal("100"), Decimal("0")) == Decimal("0")

    def test_cash_buffer_qty(self) -> None:
        assert cash_buffer_qty(Decimal("10000"), Decimal("8765.432")) == Decimal("1234.57")

    def test_cash_buffer_qty_invalid(self) -> None:
        assert cash_buffer_qty(Decimal("-1"), Decimal("10")) == Decimal("0")
