"""
Budget tracking: how much of each section, theme and account budget is used.

Runs off live values only and is independent of the target hierarchy. Theme
limits are resolved against *live* section figures here, so a theme's
``section_percent_limit`` in this report can differ from the target
hierarchy's percent of section for the same theme.
"""

import sys
from typing import TypeAlias
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal

from valuation.domain import BudgetLimit, LimitContext, Portfolio, ResolvedLimit, normalize_limit
from valuation.utils.numbers import ZERO, round_money, safe_pct

from .aggregation import build_breakdown, calculate_live_totals
from .types import BreakdownEntry, BudgetRemaining, BudgetRemainingReport, Dimension, LiveTotals

PercentageFn: TypeAlias = Callable[[str, BreakdownEntry | None], Decimal]
LimitFn: TypeAlias = Callable[[str], ResolvedLimit | None]


def ordered_labels(
    options: Sequence[str], breakdown: Iterable[BreakdownEntry], budget_keys: Iterable[str]
) -> list[str]:
    """
    Union of configured labels, labels with live value, and budgeted labels.

    Budget keys only count when they are in ``options``, so budgets left
    behind by renamed or deleted labels are ignored. Configured labels come
    first in configured order, the rest alphabetically.
    """
    labels = dict.fromkeys(options)
    labels.update(dict.fromkeys(entry.label for entry in breakdown))
    labels.update(dict.fromkeys(key for key in budget_keys if key in options))

    position: dict[str, int] = {}
    for index, label in enumerate(options):
        position.setdefault(label, index)
    return sorted(labels, key=lambda label: (position.get(label, sys.maxsize), label))


def build_budget_remaining(
    breakdown: list[BreakdownEntry],
    budgets: dict[str, BudgetLimit],
    options: Sequence[str],
    percentage_for: PercentageFn,
    limit_for: LimitFn,
    section_for: Callable[[str], str | None] | None = None,
    currency: str | None = None,
) -> list[BudgetRemaining]:
    entries = {entry.label: entry for entry in breakdown}
    rows = []

    for label in ordered_labels(options, breakdown, budgets.keys()):
        entry = entries.get(label)
        used = entry.value if entry else ZERO
        percentage = percentage_for(label, entry)
        limit = limit_for(label) if label in options else None
        amount_limit = limit.amount if limit else None
        percent_limit = limit.percent if limit else None

        rows.append(
            BudgetRemaining(
                label=label,
                used=used,
                percentage=percentage,
                amount_limit=amount_limit,
                amount_remaining=(
                    round_money(max(amount_limit - used, ZERO), currency)
                    if amount_limit is not None
                    else None
                ),
                percent_limit=percent_limit,
                percent_remaining=(
                    max(percent_limit - percentage, ZERO) if percent_limit is not None else None
                ),
                section=section_for(label) if section_for else None,
                section_percent_limit=limit.percent_of_section if limit and section_for else None,
            )
        )

    return rows


def project_budget_remaining(
    portfolio: Portfolio, live_totals: LiveTotals | None = None
) -> BudgetRemainingReport:
    """
    Used/remaining amount and percent for every section, theme and account.

    Sections and accounts measure percentage against the portfolio total.
    Themes measure it against their parent section's live total.
    """
    live_totals = live_totals or calculate_live_totals(portfolio.holdings)
    total = live_totals.total_allocated_value
    budgets = portfolio.budgets
    lists = portfolio.lists
    currency = portfolio.settings.currency

    def portfolio_percentage(_label: str, entry: BreakdownEntry | None) -> Decimal:
        return entry.percentage if entry else ZERO

    def portfolio_limit(domain: dict[str, BudgetLimit]) -> LimitFn:
        def resolve(label: str) -> ResolvedLimit | None:
            return normalize_limit(domain.get(label), LimitContext(total=total))

        return resolve

    def theme_percentage(label: str, entry: BreakdownEntry | None) -> Decimal:
        section = lists.section_for_theme(label)
        if section is None:
            return entry.percentage if entry else ZERO
        if entry is None:
            return ZERO
        return safe_pct(entry.value, live_totals.section_totals.get(section, ZERO))

    def theme_limit(label: str) -> ResolvedLimit | None:
        limit = budgets.themes.get(label)
        section = lists.section_for_theme(label)
        if limit is None or section is None:
            return normalize_limit(limit, LimitContext(total=total))

        section_limit = budgets.sections.get(section)
        if section_limit is not None:
            resolved_section = normalize_limit(section_limit, LimitContext(total=total))
            section_amount = resolved_section.amount if resolved_section else None
        else:
            section_amount = live_totals.section_totals.get(section, ZERO)

        return normalize_limit(limit, LimitContext(total=total, section_target=section_amount))

    return BudgetRemainingReport(
        sections=build_budget_remaining(
            build_breakdown(portfolio, Dimension.SECTION, live_totals),
            budgets.sections,
            lists.sections,
            portfolio_percentage,
            portfolio_limit(budgets.sections),
            currency=currency,
        ),
        themes=build_budget_remaining(
            build_breakdown(portfolio, Dimension.THEME, live_totals),
            budgets.themes,
            lists.themes,
            theme_percentage,
            theme_limit,
            section_for=lists.section_for_theme,
            currency=currency,
        ),
        accounts=build_budget_remaining(
            build_breakdown(portfolio, Dimension.ACCOUNT, live_totals),
            budgets.accounts,
            lists.accounts,
            portfolio_percentage,
            portfolio_limit(budgets.accounts),
            currency=currency,
        ),
    )
