"""
Shared fixtures for the valuation test suite.

Fixture Hierarchy:
- cache / engine: a fresh CalculationCache and an engine bound to it
- equities_portfolio: explicit targets, one section, one theme, two holdings
- fallback_portfolio: no target portfolio value, cash plus an empty position
"""

from decimal import Decimal

import pytest

from valuation.domain import Budgets, ByPercent, ByPercentOfSection, Lists, Settings
from valuation.services.cache import CalculationCache
from valuation.services.engine import ValuationEngine

from .factories import HoldingFactory, PortfolioFactory


@pytest.fixture
def cache() -> CalculationCache:
    return CalculationCache(max_entries=10)


@pytest.fixture
def engine(cache: CalculationCache) -> ValuationEngine:
    return ValuationEngine(cache)


@pytest.fixture
def equities_lists() -> Lists:
    return Lists(
        sections=("Core", "Satellite", "Cash"),
        themes=("Equities", "Bonds"),
        accounts=("ISA", "SIPP"),
        theme_sections={"Equities": "Core", "Bonds": "Satellite"},
    )


@pytest.fixture
def equities_portfolio(equities_lists: Lists):
    """
    Core at 80% of a 10,000 target; Equities at 50% of Core.

    Live values: 2,000 (60% target) and 1,500 (40% target).
    """
    return PortfolioFactory(
        id="equities",
        holdings=(
            HoldingFactory(
                id="a",
                theme="Equities",
                account="ISA",
                price=Decimal("100"),
                qty=Decimal("20"),
                target_pct=Decimal("60"),
            ),
            HoldingFactory(
                id="b",
                theme="Equities",
                account="SIPP",
                price=Decimal("50"),
                qty=Decimal("30"),
                target_pct=Decimal("40"),
            ),
        ),
        lists=equities_lists,
        budgets=Budgets(
            sections={"Core": ByPercent(Decimal("80"))},
            themes={"Equities": ByPercentOfSection(Decimal("50"))},
        ),
        settings=Settings(currency="GBP", target_portfolio_value=Decimal("10000")),
    )


@pytest.fixture
def fallback_portfolio():
    """Cash buffer only; the equity position holds nothing yet."""
    return PortfolioFactory(
        id="fallback",
        holdings=(
            HoldingFactory(
                id="cash",
                section="Cash",
                theme="Cash",
                asset_type="Cash",
                price=Decimal("1"),
                qty=Decimal("5000"),
                target_pct=Decimal("100"),
            ),
            HoldingFactory(
                id="equity",
                theme="Equities",
                price=Decimal("120"),
                qty=Decimal("0"),
                target_pct=Decimal("50"),
            ),
        ),
        lists=Lists(
            sections=("Core", "Cash"),
            themes=("Equities", "Cash"),
            theme_sections={"Equities": "Core", "Cash": "Cash"},
        ),
        settings=Settings(currency="GBP", target_portfolio_value=Decimal("0")),
    )
