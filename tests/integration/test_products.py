"""
Integration tests for product operations (both backends).
"""
from decimal import Decimal

import pytest

from easystock.entities import Currency, ExchangeRate, ProductCost
from easystock.exceptions import ConflictError


class TestAddProduct:
    """Tests for add_product."""

    async def test_price_is_derived(self, store, product_factory):
        product = product_factory(cost='100000', margin='20')
        product.price = Decimal('1')  # caller value is ignored

        await store.add_product(product)

        stored = await store.get_product('1001')
        assert stored.price == Decimal('120000')
        assert stored.quantity == 5
        assert stored.costs[0].title == 'Purchase'
        assert stored.costs[0].currency == Currency.TOMAN

    async def test_duplicate_barcode_conflicts(self, store, product_factory):
        await store.add_product(product_factory(name='Tea'))

        with pytest.raises(ConflictError) as exc_info:
            await store.add_product(product_factory(name='Other tea'))

        assert exc_info.value.status_code == 409
        assert (await store.get_product('1001')).name == 'Tea'

    async def test_foreign_cost_uses_current_rates(self, store, product_factory):
        await store.add_product(product_factory(cost='2', currency=Currency.USD, margin='0'))
        assert (await store.get_product('1001')).price == Decimal('100000')

    async def test_get_missing_returns_none(self, store):
        assert await store.get_product('nope') is None

    async def test_cost_line_order_is_kept(self, store, product_factory):
        product = product_factory()
        product.costs.append(ProductCost(title='Shipping', amount=Decimal('5000')))
        product.costs.append(ProductCost(title='Customs', amount=Decimal('1'), currency=Currency.AED))

        await store.add_product(product)

        stored = await store.get_product('1001')
        assert [cost.title for cost in stored.costs] == ['Purchase', 'Shipping', 'Customs']
        assert stored.price == (Decimal('100000') + Decimal('5000') + Decimal('13600')) * Decimal('1.2')


class TestUpdateProduct:
    """Tests for update_product."""

    async def test_update_in_place_reprices(self, store, product_factory):
        await store.add_product(product_factory())
        product = await store.get_product('1001')
        product.name = 'Green tea'
        product.profit_margin = Decimal('50')
        product.costs = [ProductCost(title='Purchase', amount=Decimal('200000'))]

        await store.update_product('1001', product)

        stored = await store.get_product('1001')
        assert stored.name == 'Green tea'
        assert stored.price == Decimal('300000')
        assert len(stored.costs) == 1

    async def test_rekey_leaves_one_record(self, store, product_factory):
        await store.add_product(product_factory(barcode='1001'))
        product = await store.get_product('1001')
        product.id = '2002'

        await store.update_product('1001', product)

        assert await store.get_product('1001') is None
        assert (await store.get_product('2002')).name == 'Tea 500g'
        assert [p.id for p in await store.list_products()] == ['2002']

    async def test_rekey_onto_existing_barcode_conflicts(self, store, product_factory):
        await store.add_product(product_factory(barcode='1001', name='Tea'))
        await store.add_product(product_factory(barcode='2002', name='Rice'))
        product = await store.get_product('1001')
        product.id = '2002'

        with pytest.raises(ConflictError):
            await store.update_product('1001', product)

        # Nothing from the failed unit is visible
        assert (await store.get_product('1001')).name == 'Tea'
        assert (await store.get_product('2002')).name == 'Rice'


class TestRepricing:
    """Tests for price recomputation when rates change."""

    async def test_saving_rates_reprices_every_product(self, store, product_factory):
        await store.add_product(product_factory(barcode='1', cost='2', currency=Currency.USD, margin='0'))
        await store.add_product(product_factory(barcode='2', cost='1000', currency=Currency.TOMAN, margin='10'))

        await store.save_exchange_rates([
            ExchangeRate(Currency.USD, Decimal('60000')),
            ExchangeRate(Currency.AED, Decimal('13600')),
        ])

        assert (await store.get_product('1')).price == Decimal('120000')
        assert (await store.get_product('2')).price == Decimal('1100')

    async def test_currency_without_rate_counts_zero(self, store, product_factory):
        await store.save_exchange_rates([ExchangeRate(Currency.USD, Decimal('50000'))])
        product = product_factory(cost='100', currency=Currency.TOMAN, margin='0')
        product.costs.append(ProductCost(title='Yuan part', amount=Decimal('10'), currency=Currency.CNY))

        await store.add_product(product)

        assert (await store.get_product('1001')).price == Decimal('100')


async def test_delete_product(store, product_factory):
    await store.add_product(product_factory())
    await store.delete_product('1001')
    await store.delete_product('1001')
    assert await store.list_products() == []


class TestExactValues:
    """Tests that money and inputs survive a write unchanged."""

    async def test_cost_amount_keeps_every_digit(self, store, product_factory):
        await store.add_product(product_factory(cost='0.12345', margin='0'))

        stored = await store.get_product('1001')

        assert stored.costs[0].amount == Decimal('0.12345')
        assert stored.price == Decimal('0.12345')

    async def test_caller_product_is_not_repriced(self, store, product_factory):
        product = product_factory(cost='100000', margin='20')

        saved = await store.add_product(product)
        updated = await store.update_product('1001', product)

        assert product.price == Decimal('0')
        assert saved.price == updated.price == Decimal('120000')
