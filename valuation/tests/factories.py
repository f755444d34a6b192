from decimal import Decimal

import factory

from valuation.domain import Budgets, Holding, Lists, Portfolio, Settings


class HoldingFactory(factory.Factory):
    class Meta:
        model = Holding

    id = factory.Sequence(lambda n: f"holding-{n}")
    name = factory.Sequence(lambda n: f"Holding {n}")
    ticker = factory.Sequence(lambda n: f"TCK{n}")
    section = "Core"
    theme = "All"
    account = "Brokerage"
    price = Decimal("10")
    qty = Decimal("10")


class PortfolioFactory(factory.Factory):
    class Meta:
        model = Portfolio

    id = factory.Sequence(lambda n: f"portfolio-{n}")
    name = factory.Sequence(lambda n: f"Portfolio {n}")
    holdings = ()
    lists = factory.LazyFunction(Lists)
    budgets = factory.LazyFunction(Budgets)
    settings = factory.LazyFunction(lambda: Settings(currency="GBP"))
