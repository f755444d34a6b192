"""
Valuation calculations.

Public API:
    - total_value(portfolio) -> Decimal
    - holdings_with_derived(portfolio) -> list[HoldingDerived]
    - budget_remaining(portfolio) -> BudgetRemainingReport
    - breakdown_by(portfolio, dimension) -> list[BreakdownEntry]

Each function takes an optional ``cache``; pass the same CalculationCache
across calls to reuse results. Without one, a fresh cache is used per call.
"""

from decimal import Decimal

from valuation.domain import Portfolio

from .aggregation import included_holdings, target_portfolio_value
from .cache import CacheStats, CalculationCache
from .engine import ValuationEngine, create_engine
from .targets import ExplicitHierarchy, FallbackHierarchy, TargetHierarchy
from .types import (
    BreakdownEntry,
    BudgetRemaining,
    BudgetRemainingReport,
    Dimension,
    HoldingDerived,
)

__all__ = [
    "BreakdownEntry",
    "BudgetRemaining",
    "BudgetRemainingReport",
    "CacheStats",
    "CalculationCache",
    "Dimension",
    "ExplicitHierarchy",
    "FallbackHierarchy",
    "HoldingDerived",
    "TargetHierarchy",
    "ValuationEngine",
    "breakdown_by",
    "budget_remaining",
    "create_engine",
    "holdings_with_derived",
    "included_holdings",
    "target_portfolio_value",
    "total_value",
]


def total_value(portfolio: Portfolio, cache: CalculationCache | None = None) -> Decimal:
    return ValuationEngine(cache).total_value(portfolio)


def holdings_with_derived(
    portfolio: Portfolio, cache: CalculationCache | None = None
) -> list[HoldingDerived]:
    return ValuationEngine(cache).holdings_with_derived(portfolio)


def budget_remaining(
    portfolio: Portfolio, cache: CalculationCache | None = None
) -> BudgetRemainingReport:
    return ValuationEngine(cache).budget_remaining(portfolio)


def breakdown_by(
    portfolio: Portfolio, dimension: Dimension | str, cache: CalculationCache | None = None
) -> list[BreakdownEntry]:
    return ValuationEngine(cache).breakdown_by(portfolio, dimension)
