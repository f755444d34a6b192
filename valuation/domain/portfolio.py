from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from config import settings as engine_settings
from valuation.domain.budget import Budgets
from valuation.domain.holding import Holding
from valuation.exceptions import InvalidPortfolioError
from valuation.utils.numbers import is_usable, to_decimal


@dataclass(frozen=True)
class Lists:
    """Domain vocabulary. Order is display order only; it carries no weight."""

    sections: tuple[str, ...] = ("Core", "Satellite", "Cash")
    themes: tuple[str, ...] = ("All",)
    accounts: tuple[str, ...] = ("Brokerage",)
    theme_sections: dict[str, str] = field(default_factory=lambda: {"All": "Core"})

    def __post_init__(self) -> None:
        object.__setattr__(self, "sections", tuple(self.sections))
        object.__setattr__(self, "themes", tuple(self.themes))
        object.__setattr__(self, "accounts", tuple(self.accounts))

    def section_for_theme(self, theme: str) -> str | None:
        return self.theme_sections.get(theme) or None

    @classmethod
    def from_dict(cls, record: Mapping[str, Any] | None) -> Lists:
        if record is None:
            return cls()
        return cls(
            sections=tuple(record.get("sections") or ()),
            themes=tuple(record.get("themes") or ()),
            accounts=tuple(record.get("accounts") or ()),
            theme_sections=dict(record.get("themeSections") or {}),
        )


@dataclass(frozen=True)
class Settings:
    """Per-portfolio settings relevant to valuation."""

    currency: str = field(default_factory=lambda: engine_settings.DEFAULT_CURRENCY)
    lock_total: bool = False
    locked_total: Decimal | None = None
    target_portfolio_value: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "locked_total", to_decimal(self.locked_total))
        object.__setattr__(
            self, "target_portfolio_value", to_decimal(self.target_portfolio_value)
        )

    @property
    def explicit_target(self) -> Decimal | None:
        """Target portfolio value when it roots an explicit hierarchy (> 0)."""
        value = self.target_portfolio_value
        if is_usable(value) and value > 0:
            return value
        return None

    @classmethod
    def from_dict(cls, record: Mapping[str, Any] | None) -> Settings:
        record = record or {}
        kwargs: dict[str, Any] = {
            "lock_total": bool(record.get("lockTotal", False)),
            "locked_total": record.get("lockedTotal"),
            "target_portfolio_value": record.get("targetPortfolioValue"),
        }
        if record.get("currency"):
            kwargs["currency"] = str(record["currency"]).upper()
        return cls(**kwargs)


@dataclass(frozen=True)
class Portfolio:
    """Aggregate root: a read-only snapshot handed to the engine by the store."""

    id: str
    name: str = ""
    holdings: tuple[Holding, ...] = ()
    lists: Lists = field(default_factory=Lists)
    budgets: Budgets = field(default_factory=Budgets)
    settings: Settings = field(default_factory=Settings)

    def __post_init__(self) -> None:
        object.__setattr__(self, "holdings", tuple(self.holdings))
        seen: set[str] = set()
        for holding in self.holdings:
            if holding.id in seen:
                raise InvalidPortfolioError(
                    f"Duplicate holding id {holding.id!r} in portfolio {self.id!r}"
                )
            seen.add(holding.id)

    def __iter__(self) -> Iterator[Holding]:
        return iter(self.holdings)

    def __len__(self) -> int:
        return len(self.holdings)

    def included_holdings(self) -> list[Holding]:
        return [holding for holding in self.holdings if holding.include]

    def holding_by_id(self, holding_id: str) -> Holding | None:
        for holding in self.holdings:
            if holding.id == holding_id:
                return holding
        return None

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> Portfolio:
        """Build a portfolio from the persisted document shape."""
        if not record.get("id"):
            raise InvalidPortfolioError("Portfolio record has no id")

        return cls(
            id=str(record["id"]),
            name=str(record.get("name", "")),
            holdings=tuple(Holding.from_dict(h) for h in record.get("holdings") or ()),
            lists=Lists.from_dict(record.get("lists")),
            budgets=Budgets.from_dict(record.get("budgets")),
            settings=Settings.from_dict(record.get("settings")),
        )
