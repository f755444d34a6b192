"""
Dual-tier calculation cache.

Live prices change far more often than targets and budgets, so live results
and target results are cached separately and merged in a third, derived tier:

- live: keyed on the fields that affect live valuation
- target: keyed on the fields that affect target resolution
- derived: keyed on the (live, target) key pair; holds the merged rows

Each tier keeps at most ``max_entries`` keys and evicts the oldest insertion
first (FIFO, not LRU). Every tier has its own lock, so one cache can be
shared across threads.

Keys are prefixed SHA-256 digests of a sorted-key JSON serialization of an
explicit field allowlist (``LIVE_KEY_FIELDS`` / ``TARGET_KEY_FIELDS``).
"""

import hashlib
import json
import threading
from collections import OrderedDict
from collections.abc import Hashable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal, TypeAlias

import structlog

from config import settings
from valuation.domain import Holding, Portfolio
from valuation.domain.budget import limit_key_data

from .holding_targets import PlannedTarget
from .targets import ExplicitHierarchy
from .types import HoldingDerived, HoldingValue, LiveTotals, ProfitLoss

logger = structlog.get_logger(__name__)

# Structural fields are included because they move a holding between buckets.
LIVE_KEY_FIELDS = (
    "id",
    "qty",
    "price",
    "live_price",
    "avg_cost",
    "day_change",
    "day_change_percent",
    "include",
    "section",
    "theme",
    "account",
    "asset_type",
    "exchange",
)

TARGET_KEY_FIELDS = (
    "id",
    "target_pct",
    "include",
    "section",
    "theme",
    "account",
    "asset_type",
    "exchange",
)

TargetMode: TypeAlias = Literal["explicit", "fallback"]


@dataclass(frozen=True)
class LiveEntry:
    """Live tier value: totals plus per-holding value and profit/loss."""

    live_totals: LiveTotals
    results: dict[str, tuple[HoldingValue, ProfitLoss | None]]


@dataclass(frozen=True)
class TargetEntry:
    """Target tier value.

    Fallback mode stores no hierarchy: it depends on live totals and is
    built in the derived step instead.
    """

    mode: TargetMode
    hierarchy: ExplicitHierarchy | None = None
    planned: dict[str, PlannedTarget | None] = field(default_factory=dict)


@dataclass(frozen=True)
class CacheStats:
    live_entries: int
    target_entries: int
    derived_entries: int
    hits: int
    misses: int

    def to_dict(self) -> dict[str, int]:
        return {
            "live": self.live_entries,
            "target": self.target_entries,
            "derived": self.derived_entries,
            "hits": self.hits,
            "misses": self.misses,
        }


class CacheTier:
    """One insertion-ordered, size-bounded map guarded by its own lock."""

    def __init__(self, name: str, max_entries: int):
        self.name = name
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: Hashable) -> Any | None:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
        if value is None:
            logger.debug("cache_miss", tier=self.name, key=key)
        return value

    def set(self, key: Hashable, value: Any) -> None:
        evicted = []
        with self._lock:
            self._entries[key] = value
            while len(self._entries) > self.max_entries:
                oldest, _ = self._entries.popitem(last=False)
                evicted.append(oldest)
        for evicted_key in evicted:
            logger.debug("cache_evicted", tier=self.name, key=evicted_key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[Hashable]:
        with self._lock:
            return list(self._entries)


class CalculationCache:
    """
    The three cache tiers plus the invalidation API.

    Owned by a ValuationEngine (or passed to one); there is no module-level
    instance, so separate sessions never share entries.

    Invalidate as narrowly as the mutation allows:
    - price tick: ``invalidate_live()``
    - budget or target edit: ``invalidate_target()``
    - holding added/removed, list restructuring: ``invalidate_all()``
    """

    def __init__(self, max_entries: int | None = None):
        max_entries = max_entries if max_entries is not None else settings.CACHE_MAX_ENTRIES
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self.live = CacheTier("live", max_entries)
        self.target = CacheTier("target", max_entries)
        self.derived = CacheTier("derived", max_entries)

    def get_live(self, key: str) -> LiveEntry | None:
        return self.live.get(key)

    def set_live(self, key: str, entry: LiveEntry) -> None:
        self.live.set(key, entry)

    def get_target(self, key: str) -> TargetEntry | None:
        return self.target.get(key)

    def set_target(self, key: str, entry: TargetEntry) -> None:
        self.target.set(key, entry)

    def get_derived(self, key: str) -> list[HoldingDerived] | None:
        return self.derived.get(key)

    def set_derived(self, key: str, rows: list[HoldingDerived]) -> None:
        self.derived.set(key, rows)

    def invalidate_live(self) -> None:
        """Clear live and derived entries."""
        self.live.clear()
        self.derived.clear()
        logger.info("cache_invalidated", tiers=["live", "derived"])

    def invalidate_target(self) -> None:
        """Clear target and derived entries."""
        self.target.clear()
        self.derived.clear()
        logger.info("cache_invalidated", tiers=["target", "derived"])

    def invalidate_all(self) -> None:
        self.live.clear()
        self.target.clear()
        self.derived.clear()
        logger.info("cache_invalidated", tiers=["live", "target", "derived"])

    def stats(self) -> CacheStats:
        tiers = (self.live, self.target, self.derived)
        return CacheStats(
            live_entries=len(self.live),
            target_entries=len(self.target),
            derived_entries=len(self.derived),
            hits=sum(tier.hits for tier in tiers),
            misses=sum(tier.misses for tier in tiers),
        )


def _key_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


def holding_key_data(holding: Holding, fields: tuple[str, ...]) -> dict[str, Any]:
    return {name: _key_value(getattr(holding, name)) for name in fields}


def _digest(prefix: str, payload: dict[str, Any]) -> str:
    serialized = json.dumps(payload, sort_keys=True)
    return f"{prefix}:{hashlib.sha256(serialized.encode()).hexdigest()}"


def target_mode(portfolio: Portfolio) -> TargetMode:
    return "explicit" if portfolio.settings.explicit_target is not None else "fallback"


def live_cache_key(portfolio: Portfolio) -> str:
    """Digest of everything live valuation reads; ignores targets and budgets."""
    return _digest(
        "live",
        {
            "currency": portfolio.settings.currency,
            "holdings": [holding_key_data(h, LIVE_KEY_FIELDS) for h in portfolio.holdings],
        },
    )


def target_cache_key(portfolio: Portfolio) -> str:
    """Digest of everything target resolution reads; ignores prices and quantities."""
    budgets = portfolio.budgets
    lists = portfolio.lists
    return _digest(
        "target",
        {
            "mode": target_mode(portfolio),
            "target_portfolio_value": _key_value(portfolio.settings.target_portfolio_value),
            "sections_budget": {k: limit_key_data(v) for k, v in budgets.sections.items()},
            "themes_budget": {k: limit_key_data(v) for k, v in budgets.themes.items()},
            "theme_sections": dict(lists.theme_sections),
            "sections": list(lists.sections),
            "themes": list(lists.themes),
            "holdings": [holding_key_data(h, TARGET_KEY_FIELDS) for h in portfolio.holdings],
        },
    )


def derived_cache_key(live_key: str, target_key: str) -> str:
    return f"{live_key}|{target_key}"
