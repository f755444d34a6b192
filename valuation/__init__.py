"""Portfolio valuation and target-hierarchy engine."""

from .domain import Budgets, Holding, Lists, Portfolio, Settings
from .exceptions import ValuationError
from .services import (
    CalculationCache,
    Dimension,
    ValuationEngine,
    breakdown_by,
    budget_remaining,
    create_engine,
    holdings_with_derived,
    total_value,
)

__all__ = [
    "Budgets",
    "CalculationCache",
    "Dimension",
    "Holding",
    "Lists",
    "Portfolio",
    "Settings",
    "ValuationEngine",
    "ValuationError",
    "breakdown_by",
    "budget_remaining",
    "create_engine",
    "holdings_with_derived",
    "total_value",
]
