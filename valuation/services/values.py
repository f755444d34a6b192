"""Value model: pure functions for a single holding's money figures."""

from decimal import Decimal

from valuation.domain import Holding
from valuation.utils.numbers import (
    ZERO,
    is_usable,
    non_negative,
    round_money,
    round_percent,
    safe_pct,
)

from .types import HoldingValue, ProfitLoss

# Keeps value_for_share finite when asked for a 100% share.
MAX_SHARE = Decimal("0.999999")


def effective_price(holding: Holding) -> Decimal:
    """Live price when usable, else the manual price."""
    live_price = holding.usable_live_price
    if live_price is not None:
        return live_price
    return non_negative(holding.price)


def holding_value(holding: Holding) -> HoldingValue:
    """
    Compute value fields for one holding.

    Live value is authoritative for display. Invalid price or quantity
    contributes zero rather than raising.
    """
    qty = non_negative(holding.qty)
    manual_value = non_negative(holding.price) * qty
    used_live_price = holding.usable_live_price is not None
    live_value = effective_price(holding) * qty
    day_change_value = live_value - manual_value if used_live_price else ZERO

    return HoldingValue(
        value=live_value,
        live_value=live_value,
        manual_value=manual_value,
        day_change_value=day_change_value,
        used_live_price=used_live_price,
    )


def profit_loss(holding: Holding, currency: str | None = None) -> ProfitLoss | None:
    """
    Profit/loss against average cost.

    Returns None (not a zeroed result) when there is no cost basis or the
    position is empty, so callers can tell "not applicable" from "no gain".
    """
    if not is_usable(holding.avg_cost) or not (is_usable(holding.qty) and holding.qty > 0):
        return None

    qty = holding.qty
    cost_basis = non_negative(holding.avg_cost) * qty
    market_value = effective_price(holding) * qty
    total_gain = market_value - cost_basis
    day_change = holding.day_change if is_usable(holding.day_change) else ZERO
    day_change_percent = (
        holding.day_change_percent if is_usable(holding.day_change_percent) else ZERO
    )

    return ProfitLoss(
        total_gain=round_money(total_gain, currency),
        total_gain_percent=round_percent(safe_pct(total_gain, cost_basis)),
        day_change_value=round_money(day_change * qty, currency),
        day_change_percent=day_change_percent,
        cost_basis=round_money(cost_basis, currency),
        market_value=round_money(market_value, currency),
    )


def qty_from_value(value: Decimal, price: Decimal) -> Decimal:
    """Quantity needed for ``value`` at ``price``; zero for unusable input."""
    if not is_usable(value) or not is_usable(price) or value < 0 or price <= 0:
        return ZERO
    return value / price


def value_for_share(others: Decimal, share: Decimal) -> Decimal:
    """
    Value a position needs to make up ``share`` (0-1) of the total.

    Solves ``v / (v + others) = share`` for v. Shares at or above 1 are capped
    just below 1.
    """
    if not is_usable(others) or not is_usable(share) or share <= 0 or others < 0:
        return ZERO
    bounded = min(share, MAX_SHARE)
    return bounded * others / (1 - bounded)


def cash_buffer_qty(
    locked_total: Decimal, non_cash_total: Decimal, currency: str | None = None
) -> Decimal:
    """Cash needed to hold the portfolio at a locked total."""
    if (
        not is_usable(locked_total)
        or not is_usable(non_cash_total)
        or locked_total < 0
        or non_cash_total < 0
    ):
        return ZERO
    return round_money(locked_total - non_cash_total, currency)
