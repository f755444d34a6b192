"""Result types returned by the valuation services."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TypeAlias
from enum import StrEnum

from valuation.domain import Holding

Totals: TypeAlias = dict[str, Decimal]  # {label: live value}
Percentages: TypeAlias = dict[str, Decimal]  # {key: percent, 0-100 scale}


class Dimension(StrEnum):
    """Holding attributes a breakdown can group by."""

    SECTION = "section"
    THEME = "theme"
    ACCOUNT = "account"
    ASSET_TYPE = "asset_type"
    EXCHANGE = "exchange"


@dataclass(frozen=True)
class HoldingValue:
    """Monetary value of one holding.

    Attributes:
        value: Display value; always equal to live_value
        live_value: Effective price (live, else manual) times quantity
        manual_value: Manual price times quantity
        day_change_value: live_value - manual_value when a live price was used,
            else 0. Measures live/manual divergence, not the market day move.
        used_live_price: Whether a live price was available
    """

    value: Decimal
    live_value: Decimal
    manual_value: Decimal
    day_change_value: Decimal
    used_live_price: bool


@dataclass(frozen=True)
class ProfitLoss:
    total_gain: Decimal
    total_gain_percent: Decimal
    day_change_value: Decimal
    day_change_percent: Decimal
    cost_basis: Decimal
    market_value: Decimal


@dataclass(frozen=True)
class LiveTotals:
    """Live aggregates over included holdings."""

    total_allocated_value: Decimal = Decimal("0")
    section_totals: Totals = field(default_factory=dict)
    theme_totals: Totals = field(default_factory=dict)
    account_totals: Totals = field(default_factory=dict)


@dataclass(frozen=True)
class HoldingTarget:
    """A holding's target and its delta against the live value."""

    target_value: Decimal
    value_diff: Decimal
    pct_diff: Decimal


@dataclass(frozen=True)
class HoldingDerived:
    """Everything the holdings grid shows for one holding.

    Target fields and profit_loss are None when not applicable; None means
    "no figure", which is distinct from a zero figure.
    """

    holding: Holding
    value: Decimal
    live_value: Decimal
    manual_value: Decimal
    day_change_value: Decimal
    used_live_price: bool
    pct_of_total: Decimal
    pct_of_section: Decimal
    section_total: Decimal
    pct_of_theme: Decimal
    target_value: Decimal | None = None
    target_value_diff: Decimal | None = None
    target_pct_diff: Decimal | None = None
    profit_loss: ProfitLoss | None = None


@dataclass(frozen=True)
class BreakdownEntry:
    label: str
    value: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class BudgetRemaining:
    """Budget tracking row for one section, theme or account label."""

    label: str
    used: Decimal
    percentage: Decimal
    amount_limit: Decimal | None = None
    amount_remaining: Decimal | None = None
    percent_limit: Decimal | None = None
    percent_remaining: Decimal | None = None
    section: str | None = None
    section_percent_limit: Decimal | None = None


@dataclass(frozen=True)
class BudgetRemainingReport:
    sections: list[BudgetRemaining] = field(default_factory=list)
    themes: list[BudgetRemaining] = field(default_factory=list)
    accounts: list[BudgetRemaining] = field(default_factory=list)
