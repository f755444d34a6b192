from __future__ import annotations

from .budget import (
    BudgetLimit,
    Budgets,
    ByAmount,
    ByPercent,
    ByPercentOfSection,
    LimitContext,
    ResolvedLimit,
    normalize_limit,
    parse_budget_limit,
)
from .holding import AssetType, Holding
from .portfolio import Lists, Portfolio, Settings

__all__ = [
    "AssetType",
    "BudgetLimit",
    "Budgets",
    "ByAmount",
    "ByPercent",
    "ByPercentOfSection",
    "Holding",
    "LimitContext",
    "Lists",
    "Portfolio",
    "ResolvedLimit",
    "Settings",
    "normalize_limit",
    "parse_budget_limit",
]
