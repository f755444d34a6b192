"""
Keep children's relative shares when a parent's percent changes.

When a section's percent moves from 60 to 80, its themes' percent-of-section
values are scaled by 80/60 so their ratios to each other stay the same.
Holdings' target percentages follow a theme change the same way.
"""

from dataclasses import replace
from decimal import Decimal

from valuation.domain import (
    BudgetLimit,
    ByAmount,
    ByPercent,
    ByPercentOfSection,
    Portfolio,
)
from valuation.utils.numbers import ZERO, is_usable, safe_pct

from .types import Percentages


def rescale(
    child_percentages: Percentages, old_parent_percent: Decimal, new_parent_percent: Decimal
) -> Percentages:
    """
    Scale every child percent by ``new / old``.

    Returns an empty dict when ``old_parent_percent <= 0`` (no scale factor
    can be inferred; callers leave the children untouched) or when
    ``new_parent_percent`` is negative. Children at or below zero are dropped.
    """
    if not is_usable(old_parent_percent) or old_parent_percent <= 0:
        return {}
    if not is_usable(new_parent_percent) or new_parent_percent < 0:
        return {}

    scale_factor = new_parent_percent / old_parent_percent
    return {
        key: percentage * scale_factor
        for key, percentage in child_percentages.items()
        if is_usable(percentage) and percentage > 0
    }


def theme_percentages_in_section(portfolio: Portfolio, section: str) -> Percentages:
    percentages: Percentages = {}
    for theme, mapped_section in portfolio.lists.theme_sections.items():
        if mapped_section != section:
            continue
        percentage = theme_current_percent(portfolio.budgets.themes.get(theme))
        if percentage > 0:
            percentages[theme] = percentage
    return percentages


def holding_percentages_in_theme(portfolio: Portfolio, theme: str) -> Percentages:
    return {
        holding.id: holding.target_pct
        for holding in portfolio.holdings
        if holding.theme == theme and is_usable(holding.target_pct) and holding.target_pct > 0
    }


def preserve_theme_ratios_on_section_change(
    portfolio: Portfolio, section: str, old_percent: Decimal, new_percent: Decimal
) -> Portfolio:
    """Return ``portfolio`` with the section's theme budgets rescaled."""
    theme_percentages = theme_percentages_in_section(portfolio, section)
    if not theme_percentages or old_percent <= 0:
        return portfolio

    rescaled = rescale(theme_percentages, old_percent, new_percent)
    themes = dict(portfolio.budgets.themes)
    for theme, percent_of_section in rescaled.items():
        themes[theme] = ByPercentOfSection(percent_of_section)

    return replace(portfolio, budgets=replace(portfolio.budgets, themes=themes))


def preserve_holding_ratios_on_theme_change(
    portfolio: Portfolio, theme: str, old_percent: Decimal, new_percent: Decimal
) -> Portfolio:
    """Return ``portfolio`` with the theme's holding target percentages rescaled."""
    holding_percentages = holding_percentages_in_theme(portfolio, theme)
    if not holding_percentages or old_percent <= 0:
        return portfolio

    rescaled = rescale(holding_percentages, old_percent, new_percent)
    holdings = tuple(
        replace(holding, target_pct=rescaled[holding.id]) if holding.id in rescaled else holding
        for holding in portfolio.holdings
    )
    return replace(portfolio, holdings=holdings)


def section_current_percent(limit: BudgetLimit | None, total: Decimal) -> Decimal:
    """A section budget as a percent of ``total``; zero when it cannot be expressed."""
    match limit:
        case ByPercent(percent=percent):
            return percent
        case ByAmount(amount=amount):
            return safe_pct(amount, total)
    return ZERO


def theme_current_percent(limit: BudgetLimit | None) -> Decimal:
    match limit:
        case ByPercentOfSection(percent_of_section=percent_of_section):
            return percent_of_section
    return ZERO
