"""Valuation engine: cached entry points over the live and target calculations."""

from decimal import Decimal

import structlog

from valuation.domain import Portfolio
from valuation.utils.numbers import ZERO, safe_pct

from .aggregation import build_breakdown, calculate_live_totals
from .budgets import project_budget_remaining
from .cache import (
    CalculationCache,
    LiveEntry,
    TargetEntry,
    derived_cache_key,
    live_cache_key,
    target_cache_key,
)
from .holding_targets import plan_holding_target, target_delta
from .targets import (
    ExplicitHierarchy,
    SectionAllocation,
    TargetHierarchy,
    resolve_explicit_hierarchy,
    resolve_fallback_hierarchy,
    section_allocations,
    theme_target_for,
)
from .types import BreakdownEntry, BudgetRemainingReport, Dimension, HoldingDerived
from .values import holding_value, profit_loss

logger = structlog.get_logger(__name__)


class ValuationEngine:
    """
    Read-only calculations over a Portfolio snapshot.

    Live results and target results are cached independently, so a price
    tick recomputes only the live half and a budget edit only the target
    half. ``holdings_with_derived`` returns the identical list object for a
    repeated (live, target) key pair.
    """

    def __init__(self, cache: CalculationCache | None = None):
        self.cache = cache if cache is not None else CalculationCache()

    def live_entry(self, portfolio: Portfolio) -> tuple[str, LiveEntry]:
        key = live_cache_key(portfolio)
        entry = self.cache.get_live(key)
        if entry is None:
            currency = portfolio.settings.currency
            entry = LiveEntry(
                live_totals=calculate_live_totals(portfolio.holdings),
                results={
                    holding.id: (holding_value(holding), profit_loss(holding, currency))
                    for holding in portfolio.holdings
                },
            )
            self.cache.set_live(key, entry)
        return key, entry

    def target_entry(self, portfolio: Portfolio) -> tuple[str, TargetEntry]:
        key = target_cache_key(portfolio)
        entry = self.cache.get_target(key)
        if entry is None:
            hierarchy = resolve_explicit_hierarchy(portfolio)
            if hierarchy is None:
                entry = TargetEntry(mode="fallback")
            else:
                entry = TargetEntry(
                    mode="explicit",
                    hierarchy=hierarchy,
                    planned={
                        holding.id: plan_holding_target(holding, hierarchy)
                        for holding in portfolio.holdings
                    },
                )
            self.cache.set_target(key, entry)
        return key, entry

    def _hierarchy(
        self, portfolio: Portfolio, live: LiveEntry, target: TargetEntry
    ) -> TargetHierarchy | None:
        if target.hierarchy is not None:
            return target.hierarchy
        return resolve_fallback_hierarchy(portfolio, live.live_totals)

    def total_value(self, portfolio: Portfolio) -> Decimal:
        """Sum of live values over included holdings."""
        _, live = self.live_entry(portfolio)
        return live.live_totals.total_allocated_value

    def holdings_with_derived(self, portfolio: Portfolio) -> list[HoldingDerived]:
        """
        One row per holding with value, percentage, target and profit/loss fields.

        Excluded holdings keep their value fields but get zero percentages and
        no target fields.
        """
        live_key, live = self.live_entry(portfolio)
        target_key, target = self.target_entry(portfolio)
        key = derived_cache_key(live_key, target_key)

        rows = self.cache.get_derived(key)
        if rows is not None:
            return rows

        rows = self._merge(portfolio, live, target)
        self.cache.set_derived(key, rows)
        logger.debug(
            "holdings_derived",
            portfolio_id=portfolio.id,
            holding_count=len(rows),
            mode=target.mode,
        )
        return rows

    def _merge(
        self, portfolio: Portfolio, live: LiveEntry, target: TargetEntry
    ) -> list[HoldingDerived]:
        totals = live.live_totals
        currency = portfolio.settings.currency
        hierarchy = self._hierarchy(portfolio, live, target)

        rows = []
        for holding in portfolio.holdings:
            value, pnl = live.results[holding.id]
            included = holding.include

            section_total = totals.section_totals.get(holding.section, ZERO) if included else ZERO
            pct_of_theme = ZERO
            theme_target = theme_target_for(hierarchy, holding.theme) if included else None
            if theme_target is not None and theme_target.target_value > 0:
                pct_of_theme = safe_pct(value.live_value, theme_target.target_value)

            match hierarchy:
                case ExplicitHierarchy():
                    planned = target.planned.get(holding.id)
                case _:
                    planned = plan_holding_target(holding, hierarchy)
            delta = target_delta(value.live_value, planned, currency) if planned else None

            rows.append(
                HoldingDerived(
                    holding=holding,
                    value=value.value,
                    live_value=value.live_value,
                    manual_value=value.manual_value,
                    day_change_value=value.day_change_value,
                    used_live_price=value.used_live_price,
                    pct_of_total=(
                        safe_pct(value.live_value, totals.total_allocated_value)
                        if included
                        else ZERO
                    ),
                    pct_of_section=safe_pct(value.live_value, section_total) if included else ZERO,
                    section_total=section_total,
                    pct_of_theme=pct_of_theme,
                    target_value=delta.target_value if delta else None,
                    target_value_diff=delta.value_diff if delta else None,
                    target_pct_diff=delta.pct_diff if delta else None,
                    profit_loss=pnl,
                )
            )
        return rows

    def budget_remaining(self, portfolio: Portfolio) -> BudgetRemainingReport:
        _, live = self.live_entry(portfolio)
        return project_budget_remaining(portfolio, live.live_totals)

    def breakdown_by(
        self, portfolio: Portfolio, dimension: Dimension | str
    ) -> list[BreakdownEntry]:
        _, live = self.live_entry(portfolio)
        return build_breakdown(portfolio, dimension, live.live_totals)

    def target_hierarchy(self, portfolio: Portfolio) -> TargetHierarchy | None:
        """The resolved hierarchy: explicit, fallback, or None when nothing is held."""
        _, live = self.live_entry(portfolio)
        _, target = self.target_entry(portfolio)
        return self._hierarchy(portfolio, live, target)

    def section_allocations(self, portfolio: Portfolio) -> list[SectionAllocation]:
        _, live = self.live_entry(portfolio)
        return section_allocations(self.target_hierarchy(portfolio), live.live_totals)


def create_engine(max_entries: int | None = None) -> ValuationEngine:
    """Engine with its own, fresh cache."""
    return ValuationEngine(CalculationCache(max_entries))
