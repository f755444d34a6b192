"""
Tests for live aggregation and breakdowns.

Tests: valuation/services/aggregation.py
"""

from decimal import Decimal

import pytest

from valuation.domain import Settings
from valuation.exceptions import UnknownDimensionError
from valuation.services.aggregation import (
    aggregate_by,
    build_breakdown,
    calculate_live_totals,
    target_portfolio_value,
    total_value,
)
from valuation.services.types import Dimension
from valuation.services.values import holding_value

from ..factories import HoldingFactory, PortfolioFactory


@pytest.fixture
def mixed_portfolio():
    return PortfolioFactory(
        holdings=(
            HoldingFactory(section="Core", theme="Tech", account="ISA", qty=Decimal("30")),
            HoldingFactory(section="Core", theme="Bonds", account="SIPP", qty=Decimal("10")),
            HoldingFactory(
                section="Satellite",
                theme="Tech",
                account="ISA",
                asset_type="Stock",
                exchange="NASDAQ",
                live_price=Decimal("20"),
                qty=Decimal("5"),
            ),
            HoldingFactory(section="Satellite", theme="Gold", include=False, qty=Decimal("99")),
        )
    )


@pytest.mark.services
@pytest.mark.unit
class TestLiveTotals:
    def test_excluded_holdings_contribute_nothing(self, mixed_portfolio) -> None:
        totals = calculate_live_totals(mixed_portfolio.holdings)
        assert totals.total_allocated_value == Decimal("500")
        assert "Gold" not in totals.theme_totals

    def test_section_and_theme_totals_close(self, mixed_portfolio) -> None:
        """Bucket totals are exactly the sum of their included holdings."""
        totals = calculate_live_totals(mixed_portfolio.holdings)
        included = mixed_portfolio.included_holdings()

        for section, section_total in totals.section_totals.items():
            expected = sum(
                (holding_value(h).live_value for h in included if h.section == section),
                Decimal("0"),
            )
            assert section_total == expected
        for theme, theme_total in totals.theme_totals.items():
            expected = sum(
                (holding_value(h).live_value for h in included if h.theme == theme),
                Decimal("0"),
            )
            assert theme_total == expected
        assert sum(totals.section_totals.values()) == totals.total_allocated_value
        assert sum(totals.theme_totals.values()) == totals.total_allocated_value

    def test_account_totals(self, mixed_portfolio) -> None:
        totals = calculate_live_totals(mixed_portfolio.holdings)
        assert totals.account_totals == {"ISA": Decimal("400"), "SIPP": Decimal("100")}

    def test_total_value(self, mixed_portfolio) -> None:
        assert total_value(mixed_portfolio) == Decimal("500")

    def test_empty_portfolio(self) -> None:
        totals = calculate_live_totals(())
        assert totals.total_allocated_value == Decimal("0")
        assert totals.section_totals == {}

    def test_target_portfolio_value_defaults_to_zero(self) -> None:
        assert target_portfolio_value(PortfolioFactory()) == Decimal("0")
        portfolio = PortfolioFactory(settings=Settings(target_portfolio_value=Decimal("750")))
        assert target_portfolio_value(portfolio) == Decimal("750")


@pytest.mark.services
@pytest.mark.unit
class TestBreakdown:
    def test_sorted_by_value_descending(self, mixed_portfolio) -> None:
        entries = build_breakdown(mixed_portfolio, Dimension.THEME)
        assert [e.label for e in entries] == ["Tech", "Bonds"]
        assert entries[0].value == Decimal("400")
        assert entries[0].percentage == Decimal("80")

    def test_ties_keep_first_seen_order(self) -> None:
        portfolio = PortfolioFactory(
            holdings=(HoldingFactory(account="B"), HoldingFactory(account="A"))
        )
        assert [e.label for e in build_breakdown(portfolio, "account")] == ["B", "A"]

    def test_asset_type_and_exchange(self, mixed_portfolio) -> None:
        """Dimensions without precomputed totals are aggregated on demand."""
        by_type = build_breakdown(mixed_portfolio, Dimension.ASSET_TYPE)
        assert [(e.label, e.value) for e in by_type] == [
            ("ETF", Decimal("400")),
            ("Stock", Decimal("100")),
        ]
        by_exchange = aggregate_by(mixed_portfolio.holdings, "exchange")
        assert by_exchange == {"Other": Decimal("400"), "NASDAQ": Decimal("100")}

    def test_zero_total_gives_zero_percentages(self) -> None:
        portfolio = PortfolioFactory(holdings=(HoldingFactory(qty=Decimal("0")),))
        entries = build_breakdown(portfolio, Dimension.SECTION)
        assert entries[0].percentage == Decimal("0")

    def test_unknown_dimension(self, mixed_portfolio) -> None:
        with pytest.raises(UnknownDimensionError, match="ticker"):
            build_breakdown(mixed_portfolio, "ticker")
