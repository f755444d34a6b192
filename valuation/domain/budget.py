"""
Budget limits as a tagged union.

A limit has exactly one authoritative value. The other two figures the UI
shows (amount, percent of portfolio, percent of parent section) are always
derived from it by ``resolve``; they are never stored as independent inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, TypeAlias

from valuation.utils.numbers import is_usable, pct_of, safe_pct, to_decimal


@dataclass(frozen=True)
class LimitContext:
    """Reference totals a limit is resolved against.

    Attributes:
        total: Portfolio-level reference (target portfolio value for the
            target hierarchy, live total for budget tracking).
        section_target: Amount of the parent section, themes only.
    """

    total: Decimal | None
    section_target: Decimal | None = None

    @property
    def has_total(self) -> bool:
        return is_usable(self.total) and self.total > 0

    @property
    def has_section_target(self) -> bool:
        return is_usable(self.section_target) and self.section_target > 0


@dataclass(frozen=True)
class ResolvedLimit:
    """A limit with every derivable figure filled in.

    ``source`` is the variant that produced it; resolving a ResolvedLimit
    re-resolves its source, so normalization never drifts.
    """

    source: BudgetLimit
    amount: Decimal | None = None
    percent: Decimal | None = None
    percent_of_section: Decimal | None = None

    def resolve(self, context: LimitContext) -> ResolvedLimit:
        return self.source.resolve(context)

    def to_record(self) -> dict[str, Decimal]:
        """Persisted camelCase shape, derived fields included for display."""
        record = {
            "amount": self.amount,
            "percent": self.percent,
            "percentOfSection": self.percent_of_section,
        }
        return {key: value for key, value in record.items() if value is not None}


@dataclass(frozen=True)
class ByAmount:
    """Absolute currency amount is authoritative."""

    amount: Decimal

    def resolve(self, context: LimitContext) -> ResolvedLimit:
        return ResolvedLimit(
            source=self,
            amount=self.amount,
            percent=safe_pct(self.amount, context.total) if context.has_total else None,
            percent_of_section=(
                safe_pct(self.amount, context.section_target)
                if context.has_section_target
                else None
            ),
        )


@dataclass(frozen=True)
class ByPercent:
    """Percent of the portfolio-level total is authoritative."""

    percent: Decimal

    def resolve(self, context: LimitContext) -> ResolvedLimit:
        if not context.has_total:
            return ResolvedLimit(source=self, percent=self.percent)
        amount = pct_of(self.percent, context.total)
        return ResolvedLimit(
            source=self,
            amount=amount,
            percent=self.percent,
            percent_of_section=(
                safe_pct(amount, context.section_target) if context.has_section_target else None
            ),
        )


@dataclass(frozen=True)
class ByPercentOfSection:
    """Percent of the parent section's amount is authoritative (themes only)."""

    percent_of_section: Decimal

    def resolve(self, context: LimitContext) -> ResolvedLimit:
        if not is_usable(context.section_target):
            return ResolvedLimit(source=self, percent_of_section=self.percent_of_section)
        amount = pct_of(self.percent_of_section, context.section_target)
        return ResolvedLimit(
            source=self,
            amount=amount,
            percent=safe_pct(amount, context.total) if context.has_total else None,
            percent_of_section=self.percent_of_section,
        )


BudgetLimit: TypeAlias = ByAmount | ByPercent | ByPercentOfSection


def _clean(value: Any) -> Decimal | None:
    number = to_decimal(value)
    if not is_usable(number):
        return None
    return max(number, Decimal("0"))


def parse_budget_limit(
    record: Mapping[str, Any] | int | float | Decimal | None,
    allow_percent_of_section: bool = False,
) -> BudgetLimit | None:
    """
    Pick the authoritative variant from a persisted sparse record.

    Themes (``allow_percent_of_section=True``) prefer percentOfSection, then
    amount, then percent. Sections and accounts prefer amount, then percent.
    A bare number is the legacy shape for an amount. Non-finite values are
    dropped and negatives clamp to zero.
    """
    if record is None:
        return None
    if isinstance(record, ByAmount | ByPercent | ByPercentOfSection):
        return record
    if not isinstance(record, Mapping):
        amount = _clean(record)
        return ByAmount(amount) if amount is not None else None

    percent_of_section = _clean(record.get("percentOfSection"))
    amount = _clean(record.get("amount"))
    percent = _clean(record.get("percent"))

    if allow_percent_of_section and percent_of_section is not None:
        return ByPercentOfSection(percent_of_section)
    if amount is not None:
        return ByAmount(amount)
    if percent is not None:
        return ByPercent(percent)
    return None


def normalize_limit(
    limit: BudgetLimit | ResolvedLimit | None, context: LimitContext
) -> ResolvedLimit | None:
    if limit is None:
        return None
    return limit.resolve(context)


def limit_key_data(limit: BudgetLimit) -> dict[str, str]:
    """Stable, JSON-friendly description of the authoritative value."""
    match limit:
        case ByAmount(amount=amount):
            return {"amount": str(amount)}
        case ByPercent(percent=percent):
            return {"percent": str(percent)}
        case ByPercentOfSection(percent_of_section=percent_of_section):
            return {"percentOfSection": str(percent_of_section)}
    raise TypeError(f"Not a budget limit: {limit!r}")


@dataclass(frozen=True)
class Budgets:
    """Per-domain budget limits keyed by label."""

    sections: dict[str, BudgetLimit] = field(default_factory=dict)
    themes: dict[str, BudgetLimit] = field(default_factory=dict)
    accounts: dict[str, BudgetLimit] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, record: Mapping[str, Any] | None) -> Budgets:
        record = record or {}

        def parse(domain: str, allow_percent_of_section: bool = False) -> dict[str, BudgetLimit]:
            parsed = {}
            for label, raw in (record.get(domain) or {}).items():
                limit = parse_budget_limit(raw, allow_percent_of_section)
                if limit is not None:
                    parsed[label] = limit
            return parsed

        return cls(
            sections=parse("sections"),
            themes=parse("themes", allow_percent_of_section=True),
            accounts=parse("accounts"),
        )
