"""Holding-level targets: a holding's percent of its theme target, and the delta."""

from dataclasses import dataclass
from decimal import Decimal

from valuation.domain import Holding
from valuation.utils.numbers import pct_of, round_money, round_percent, safe_pct

from .targets import TargetHierarchy, theme_target_for
from .types import HoldingTarget


@dataclass(frozen=True)
class PlannedTarget:
    """The target-only half of a holding target; independent of live prices."""

    target_pct: Decimal
    theme_target: Decimal
    target_value: Decimal


def plan_holding_target(
    holding: Holding, hierarchy: TargetHierarchy | None
) -> PlannedTarget | None:
    """
    Target value for ``holding`` from its theme's resolved target.

    None when the holding is excluded, has no usable target_pct, or its theme
    has no positive target.
    """
    if not holding.include:
        return None
    target_pct = holding.usable_target_pct
    if target_pct is None:
        return None

    theme_target = theme_target_for(hierarchy, holding.theme)
    if theme_target is None or theme_target.target_value <= 0:
        return None

    return PlannedTarget(
        target_pct=target_pct,
        theme_target=theme_target.target_value,
        target_value=pct_of(target_pct, theme_target.target_value),
    )


def target_delta(
    live_value: Decimal, planned: PlannedTarget, currency: str | None = None
) -> HoldingTarget:
    """Compare a live value against a planned target."""
    pct_of_theme_target = safe_pct(live_value, planned.theme_target)
    return HoldingTarget(
        target_value=planned.target_value,
        value_diff=round_money(live_value - planned.target_value, currency),
        pct_diff=round_percent(pct_of_theme_target - planned.target_pct),
    )


def calculate_holding_target(
    holding: Holding,
    live_value: Decimal,
    hierarchy: TargetHierarchy | None,
    currency: str | None = None,
) -> HoldingTarget | None:
    planned = plan_holding_target(holding, hierarchy)
    if planned is None:
        return None
    return target_delta(live_value, planned, currency)
