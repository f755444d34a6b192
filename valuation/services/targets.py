"""
Target hierarchy resolution.

Resolves absolute target values top-down, Portfolio -> Section -> Theme, from
the user's budget limits. The result is one of two variants:

- ``ExplicitHierarchy``: a target portfolio value is set (> 0). Sections take
  their percent of it, themes their percent of their section. Uses target
  inputs only, never live prices.
- ``FallbackHierarchy``: no usable target portfolio value. Every theme with
  live value gets "target = what you hold now", so holding-level target math
  still produces sane numbers before targets are configured.

Consumers pattern-match on the variant instead of re-checking the target
portfolio value themselves.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import TypeAlias

import structlog

from valuation.domain import LimitContext, Portfolio, ResolvedLimit, normalize_limit
from valuation.utils.numbers import HUNDRED, ZERO, safe_pct

from .types import LiveTotals

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SectionTarget:
    section: str
    percentage: Decimal  # of portfolio target
    target_value: Decimal


@dataclass(frozen=True)
class ThemeTarget:
    theme: str
    section: str | None
    percentage: Decimal  # of section target
    percentage_of_portfolio: Decimal
    target_value: Decimal


@dataclass(frozen=True)
class ExplicitHierarchy:
    portfolio_target: Decimal
    sections: dict[str, SectionTarget]
    themes: dict[str, ThemeTarget]


@dataclass(frozen=True)
class FallbackHierarchy:
    portfolio_target: Decimal
    themes: dict[str, ThemeTarget]


TargetHierarchy: TypeAlias = ExplicitHierarchy | FallbackHierarchy


@dataclass(frozen=True)
class SectionAllocation:
    """Section target next to what is currently held there."""

    section: str
    target_value: Decimal
    allocated_value: Decimal
    variance: Decimal  # allocated - target


def resolve_section_limits(
    portfolio: Portfolio, total: Decimal | None
) -> dict[str, ResolvedLimit]:
    """Normalize every section budget against ``total``."""
    resolved = {}
    for section, limit in portfolio.budgets.sections.items():
        normalized = normalize_limit(limit, LimitContext(total=total))
        if normalized is not None:
            resolved[section] = normalized
    return resolved


def resolve_explicit_hierarchy(portfolio: Portfolio) -> ExplicitHierarchy | None:
    """
    Resolve targets from an explicit target portfolio value.

    Returns None when no target portfolio value > 0 is set. A theme without a
    section mapping, or without a limit that yields a percent of section,
    gets no entry (absent, not zero).
    """
    portfolio_target = portfolio.settings.explicit_target
    if portfolio_target is None:
        return None

    section_limits = resolve_section_limits(portfolio, portfolio_target)
    sections: dict[str, SectionTarget] = {}
    for section in portfolio.lists.sections:
        limit = section_limits.get(section)
        percentage = limit.percent if limit and limit.percent is not None else ZERO
        target_value = limit.amount if limit and limit.amount is not None else ZERO
        sections[section] = SectionTarget(
            section=section, percentage=percentage, target_value=target_value
        )

    themes: dict[str, ThemeTarget] = {}
    for theme in portfolio.lists.themes:
        section = portfolio.lists.section_for_theme(theme)
        section_target = sections.get(section) if section else None
        if section_target is None:
            continue

        limit = normalize_limit(
            portfolio.budgets.themes.get(theme),
            LimitContext(total=portfolio_target, section_target=section_target.target_value),
        )
        if limit is None or limit.percent_of_section is None:
            continue

        target_value = limit.amount if limit.amount is not None else ZERO
        themes[theme] = ThemeTarget(
            theme=theme,
            section=section,
            percentage=limit.percent_of_section,
            percentage_of_portfolio=safe_pct(target_value, portfolio_target),
            target_value=target_value,
        )

    logger.debug(
        "target_hierarchy_resolved",
        portfolio_id=portfolio.id,
        mode="explicit",
        section_count=len(sections),
        theme_count=len(themes),
    )
    return ExplicitHierarchy(portfolio_target=portfolio_target, sections=sections, themes=themes)


def resolve_fallback_hierarchy(
    portfolio: Portfolio, live_totals: LiveTotals
) -> FallbackHierarchy | None:
    """
    Use current live totals as the implicit target.

    Returns None when nothing is held, since there is no total to aim at.
    """
    portfolio_target = live_totals.total_allocated_value
    if portfolio_target <= 0:
        return None

    themes = {
        theme: ThemeTarget(
            theme=theme,
            section=portfolio.lists.section_for_theme(theme),
            percentage=HUNDRED,
            percentage_of_portfolio=safe_pct(theme_total, portfolio_target),
            target_value=theme_total,
        )
        for theme, theme_total in live_totals.theme_totals.items()
        if theme_total > 0
    }

    logger.debug(
        "target_hierarchy_resolved",
        portfolio_id=portfolio.id,
        mode="fallback",
        theme_count=len(themes),
    )
    return FallbackHierarchy(portfolio_target=portfolio_target, themes=themes)


def resolve_target_hierarchy(
    portfolio: Portfolio, live_totals: LiveTotals
) -> TargetHierarchy | None:
    """Explicit hierarchy when a target portfolio value is set, else the fallback."""
    explicit = resolve_explicit_hierarchy(portfolio)
    if explicit is not None:
        return explicit
    return resolve_fallback_hierarchy(portfolio, live_totals)


def theme_target_for(hierarchy: TargetHierarchy | None, theme: str) -> ThemeTarget | None:
    match hierarchy:
        case ExplicitHierarchy(themes=themes) | FallbackHierarchy(themes=themes):
            return themes.get(theme)
    return None


def section_allocations(
    hierarchy: TargetHierarchy | None, live_totals: LiveTotals
) -> list[SectionAllocation]:
    """Per-section target vs. live allocation; empty unless the hierarchy is explicit."""
    match hierarchy:
        case ExplicitHierarchy(sections=sections):
            rows = []
            for section, target in sections.items():
                allocated = live_totals.section_totals.get(section, ZERO)
                rows.append(
                    SectionAllocation(
                        section=section,
                        target_value=target.target_value,
                        allocated_value=allocated,
                        variance=allocated - target.target_value,
                    )
                )
            return rows
    return []
