"""
Unit tests for cost normalization and selling-price derivation.
"""
from decimal import Decimal

import pytest

from easystock.entities import Currency, ExchangeRate, ProductCost
from easystock.services.currency_service import (
    calculate_selling_price, default_exchange_rates, normalize_costs,
)


def cost(amount, currency):
    return ProductCost(title='Purchase', amount=Decimal(amount), currency=currency)


class TestNormalizeCosts:
    """Tests for normalize_costs."""

    def test_base_currency_ignores_rate_table(self):
        """A base-currency line is added as-is, even with no rates."""
        assert normalize_costs([cost('12345.67', Currency.TOMAN)], []) == Decimal('12345.67')

    def test_foreign_currency_uses_rate(self):
        rates = [ExchangeRate(Currency.USD, Decimal('50000'))]
        assert normalize_costs([cost('2.5', Currency.USD)], rates) == Decimal('125000')

    def test_missing_rate_contributes_zero(self):
        """A currency absent from the table adds nothing."""
        rates = [ExchangeRate(Currency.USD, Decimal('50000'))]
        costs = [cost('100', Currency.TOMAN), cost('10', Currency.CNY)]
        assert normalize_costs(costs, rates) == Decimal('100')

    def test_mixed_currencies_are_summed(self):
        costs = [
            cost('100000', Currency.TOMAN),
            cost('1', Currency.USD),
            cost('2', Currency.AED),
        ]
        total = normalize_costs(costs, default_exchange_rates())
        assert total == Decimal('100000') + Decimal('50000') + Decimal('27200')

    def test_empty_cost_list(self):
        assert normalize_costs([], default_exchange_rates()) == Decimal('0')

    def test_float_amounts_keep_decimal_precision(self):
        rates = [ExchangeRate(Currency.AED, 0.1)]
        assert normalize_costs([ProductCost('x', 3, Currency.AED)], rates) == Decimal('0.3')


class TestSellingPrice:
    """Tests for calculate_selling_price."""

    def test_margin_applied_to_normalized_cost(self):
        price = calculate_selling_price([cost('100000', Currency.TOMAN)], Decimal('20'), [])
        assert price == Decimal('120000')

    def test_zero_margin(self):
        price = calculate_selling_price([cost('1', Currency.USD)], 0, default_exchange_rates())
        assert price == Decimal('50000')

    @pytest.mark.parametrize('margin, expected', [
        ('0', '80000'),
        ('12.5', '90000'),
        ('100', '160000'),
    ])
    def test_margins(self, margin, expected):
        price = calculate_selling_price([cost('80000', Currency.TOMAN)], margin, [])
        assert price == Decimal(expected)

    def test_default_rates(self):
        rates = {rate.currency: rate.rate for rate in default_exchange_rates()}
        assert rates == {
            Currency.USD: Decimal('50000'),
            Currency.AED: Decimal('13600'),
            Currency.CNY: Decimal('7000'),
        }
