"""Tabular views of engine results for notebooks and exports."""

import math
from collections.abc import Iterable, Sequence
from decimal import Decimal

import pandas as pd

from .types import BreakdownEntry, BudgetRemaining, HoldingDerived

HOLDING_COLUMNS = [
    "id",
    "name",
    "ticker",
    "section",
    "theme",
    "account",
    "include",
    "value",
    "manual_value",
    "day_change_value",
    "used_live_price",
    "pct_of_total",
    "pct_of_section",
    "pct_of_theme",
    "target_value",
    "target_value_diff",
    "target_pct_diff",
    "total_gain",
    "total_gain_percent",
]

BREAKDOWN_COLUMNS = ["label", "value", "percentage"]

BUDGET_COLUMNS = [
    "label",
    "section",
    "used",
    "percentage",
    "amount_limit",
    "amount_remaining",
    "percent_limit",
    "percent_remaining",
    "section_percent_limit",
]


def _float(value: Decimal | None) -> float:
    """Float for a DataFrame cell; None becomes NaN."""
    if value is None:
        return math.nan
    return float(value)


def holdings_frame(derived: Iterable[HoldingDerived]) -> pd.DataFrame:
    """
    One row per holding, indexed like the input.

    Monetary and percent columns are floats; target and profit/loss columns
    are NaN where the engine produced no figure.
    """
    rows = []
    for row in derived:
        holding = row.holding
        pnl = row.profit_loss
        rows.append(
            {
                "id": holding.id,
                "name": holding.name,
                "ticker": holding.ticker,
                "section": holding.section,
                "theme": holding.theme,
                "account": holding.account,
                "include": holding.include,
                "value": _float(row.value),
                "manual_value": _float(row.manual_value),
                "day_change_value": _float(row.day_change_value),
                "used_live_price": row.used_live_price,
                "pct_of_total": _float(row.pct_of_total),
                "pct_of_section": _float(row.pct_of_section),
                "pct_of_theme": _float(row.pct_of_theme),
                "target_value": _float(row.target_value),
                "target_value_diff": _float(row.target_value_diff),
                "target_pct_diff": _float(row.target_pct_diff),
                "total_gain": _float(pnl.total_gain if pnl else None),
                "total_gain_percent": _float(pnl.total_gain_percent if pnl else None),
            }
        )
    return pd.DataFrame(rows, columns=HOLDING_COLUMNS)


def breakdown_frame(entries: Sequence[BreakdownEntry]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"label": e.label, "value": _float(e.value), "percentage": _float(e.percentage)}
            for e in entries
        ],
        columns=BREAKDOWN_COLUMNS,
    )


def budget_frame(rows: Sequence[BudgetRemaining]) -> pd.DataFrame:
    """Budget rows for one domain; ``section`` is None outside themes."""
    return pd.DataFrame(
        [
            {
                "label": row.label,
                "section": row.section,
                "used": _float(row.used),
                "percentage": _float(row.percentage),
                "amount_limit": _float(row.amount_limit),
                "amount_remaining": _float(row.amount_remaining),
                "percent_limit": _float(row.percent_limit),
                "percent_remaining": _float(row.percent_remaining),
                "section_percent_limit": _float(row.section_percent_limit),
            }
            for row in rows
        ],
        columns=BUDGET_COLUMNS,
    )
