"""Cost normalization and selling-price derivation."""
from decimal import Decimal
from typing import Iterable, List

from easystock.entities import BASE_CURRENCY, Currency, ExchangeRate, ProductCost
from easystock.utils.numbers import to_decimal


# Used until the shop saves its own rate table
DEFAULT_EXCHANGE_RATES = (
    (Currency.USD, Decimal('50000')),
    (Currency.AED, Decimal('13600')),
    (Currency.CNY, Decimal('7000')),
)


def default_exchange_rates() -> List[ExchangeRate]:
    return [ExchangeRate(currency=currency, rate=rate) for currency, rate in DEFAULT_EXCHANGE_RATES]


def _currency_code(currency) -> str:
    return currency.value if isinstance(currency, Currency) else str(currency)


def normalize_costs(costs: Iterable[ProductCost], rates: Iterable[ExchangeRate]) -> Decimal:
    """
    Convert cost line-items to a single base-currency total.

    Args:
        costs: Cost line-items, each tagged with a currency
        rates: Rate table (non-base currency -> multiplier to base)

    Returns:
        Decimal total in the base currency. A line-item whose currency has
        no rate entry contributes zero.
    """
    rate_table = {_currency_code(rate.currency): to_decimal(rate.rate) for rate in rates}
    total = Decimal('0')
    for cost in costs or ():
        amount = to_decimal(cost.amount)
        code = _currency_code(cost.currency)
        if code == BASE_CURRENCY.value:
            total += amount
        else:
            total += amount * rate_table.get(code, Decimal('0'))
    return total


def calculate_selling_price(costs: Iterable[ProductCost], profit_margin, rates: Iterable[ExchangeRate]) -> Decimal:
    """Selling price = normalized cost + normalized cost * margin / 100."""
    total_cost = normalize_costs(costs, rates)
    margin = to_decimal(profit_margin)
    return total_cost + total_cost * (margin / Decimal('100'))
