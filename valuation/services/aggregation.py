"""Live aggregation: holding values summed into portfolio, section and theme totals."""

from collections.abc import Iterable
from decimal import Decimal

from valuation.domain import Holding, Portfolio
from valuation.exceptions import UnknownDimensionError
from valuation.utils.numbers import ZERO, safe_pct

from .types import BreakdownEntry, Dimension, LiveTotals, Totals
from .values import holding_value


def _label(holding: Holding, dimension: Dimension) -> str:
    return str(getattr(holding, dimension.value))


def _as_dimension(dimension: Dimension | str) -> Dimension:
    try:
        return Dimension(dimension)
    except ValueError:
        supported = ", ".join(d.value for d in Dimension)
        raise UnknownDimensionError(
            f"Cannot break down by {dimension!r}; supported: {supported}"
        ) from None


def aggregate_by(holdings: Iterable[Holding], dimension: Dimension | str) -> Totals:
    """Sum live values of included holdings per label of ``dimension``.

    Labels keep first-seen order.
    """
    dimension = _as_dimension(dimension)
    totals: Totals = {}
    for holding in holdings:
        if not holding.include:
            continue
        label = _label(holding, dimension)
        totals[label] = totals.get(label, ZERO) + holding_value(holding).live_value
    return totals


def calculate_live_totals(holdings: Iterable[Holding]) -> LiveTotals:
    """
    Aggregate live values over included holdings.

    Excluded holdings contribute nothing, whatever their price and quantity.
    """
    total = ZERO
    sections: Totals = {}
    themes: Totals = {}
    accounts: Totals = {}

    for holding in holdings:
        if not holding.include:
            continue
        live_value = holding_value(holding).live_value
        total += live_value
        sections[holding.section] = sections.get(holding.section, ZERO) + live_value
        themes[holding.theme] = themes.get(holding.theme, ZERO) + live_value
        accounts[holding.account] = accounts.get(holding.account, ZERO) + live_value

    return LiveTotals(
        total_allocated_value=total,
        section_totals=sections,
        theme_totals=themes,
        account_totals=accounts,
    )


def included_holdings(portfolio: Portfolio) -> list[Holding]:
    return portfolio.included_holdings()


def total_value(portfolio: Portfolio) -> Decimal:
    return calculate_live_totals(portfolio.holdings).total_allocated_value


def target_portfolio_value(portfolio: Portfolio) -> Decimal:
    return portfolio.settings.target_portfolio_value or ZERO


def totals_for(live_totals: LiveTotals, dimension: Dimension) -> Totals | None:
    """Precomputed totals for ``dimension``, or None when not aggregated up front."""
    return {
        Dimension.SECTION: live_totals.section_totals,
        Dimension.THEME: live_totals.theme_totals,
        Dimension.ACCOUNT: live_totals.account_totals,
    }.get(dimension)


def build_breakdown(
    portfolio: Portfolio,
    dimension: Dimension | str,
    live_totals: LiveTotals | None = None,
) -> list[BreakdownEntry]:
    """
    Live value and portfolio percentage per label, largest first.

    Args:
        portfolio: Snapshot to break down
        dimension: Holding attribute to group by
        live_totals: Reuse already computed totals instead of re-aggregating

    Raises:
        UnknownDimensionError: If ``dimension`` is not a Dimension value
    """
    dimension = _as_dimension(dimension)
    live_totals = live_totals or calculate_live_totals(portfolio.holdings)
    aggregates = totals_for(live_totals, dimension)
    if aggregates is None:
        aggregates = aggregate_by(portfolio.holdings, dimension)

    total = live_totals.total_allocated_value
    entries = [
        BreakdownEntry(label=label, value=value, percentage=safe_pct(value, total))
        for label, value in aggregates.items()
    ]
    # sorted() is stable, so ties keep first-seen order
    return sorted(entries, key=lambda entry: entry.value, reverse=True)
