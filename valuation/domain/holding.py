from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Any

from valuation.exceptions import InvalidPortfolioError
from valuation.utils.numbers import ZERO, is_usable, to_decimal

_DECIMAL_FIELDS = (
    "price",
    "qty",
    "target_pct",
    "avg_cost",
    "live_price",
    "day_change",
    "day_change_percent",
)

# Persisted (camelCase) record key -> Holding field.
_RECORD_FIELDS = {
    "id": "id",
    "section": "section",
    "theme": "theme",
    "account": "account",
    "assetType": "asset_type",
    "name": "name",
    "ticker": "ticker",
    "exchange": "exchange",
    "price": "price",
    "qty": "qty",
    "include": "include",
    "targetPct": "target_pct",
    "avgCost": "avg_cost",
    "livePrice": "live_price",
    "dayChange": "day_change",
    "dayChangePercent": "day_change_percent",
}


class AssetType(StrEnum):
    ETF = "ETF"
    STOCK = "Stock"
    CRYPTO = "Crypto"
    CASH = "Cash"
    BOND = "Bond"
    FUND = "Fund"
    OTHER = "Other"


@dataclass(frozen=True)
class Holding:
    """A single position in a portfolio.

    ``section``, ``theme`` and ``account`` are free-text labels pointing into
    the portfolio's Lists. Value is never stored; see
    ``valuation.services.values.holding_value``.

    Numeric fields accept int/float/str and are coerced to Decimal. Optional
    numeric fields use ``None`` for "not set".
    """

    id: str
    section: str = "Core"
    theme: str = "All"
    account: str = "Brokerage"
    asset_type: str = AssetType.ETF
    name: str = ""
    ticker: str = ""
    exchange: str = "Other"
    price: Decimal = ZERO
    qty: Decimal = ZERO
    include: bool = True
    target_pct: Decimal | None = None
    avg_cost: Decimal | None = None
    live_price: Decimal | None = None
    day_change: Decimal | None = None
    day_change_percent: Decimal | None = None

    def __post_init__(self) -> None:
        for name in _DECIMAL_FIELDS:
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if self.price is None:
            object.__setattr__(self, "price", ZERO)
        if self.qty is None:
            object.__setattr__(self, "qty", ZERO)

    @property
    def usable_live_price(self) -> Decimal | None:
        """Live price when it is finite and non-negative, else None."""
        if is_usable(self.live_price) and self.live_price >= 0:
            return self.live_price
        return None

    @property
    def usable_target_pct(self) -> Decimal | None:
        """Target percent of theme, or None when unset, NaN or negative."""
        if is_usable(self.target_pct) and self.target_pct >= 0:
            return self.target_pct
        return None

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> Holding:
        """Build a holding from the persisted camelCase record."""
        if not record.get("id"):
            raise InvalidPortfolioError(f"Holding record has no id: {dict(record)!r}")

        kwargs = {
            field: record[key]
            for key, field in _RECORD_FIELDS.items()
            if key in record and record[key] is not None
        }
        kwargs["id"] = str(kwargs["id"])
        if "include" in kwargs:
            kwargs["include"] = bool(kwargs["include"])
        return cls(**kwargs)
