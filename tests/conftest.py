import pytest
from datetime import date, datetime
from decimal import Decimal

import fakeredis

from easystock.entities import Currency, Product, ProductCost, Sale, SaleItem
from easystock.stores.local import LocalDataStore
from easystock.stores.remote import RemoteDataStore

TENANT_ID = 'tenant-1'


class FixedClock:
    """Callable clock whose day can be moved by tests."""

    def __init__(self, today):
        self.today = today

    def __call__(self):
        return self.today


@pytest.fixture(scope='function')
def clock():
    """Store clock pinned to 2026-03-15."""
    return FixedClock(date(2026, 3, 15))


@pytest.fixture(scope='function')
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'easystock.sqlite3'}"


@pytest.fixture(scope='function')
def redis_client():
    """Isolated in-memory Redis server per test."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture(scope='function')
async def local_store(database_url, clock):
    store = await LocalDataStore.open(TENANT_ID, database_url=database_url, clock=clock)
    yield store
    await store.close()


@pytest.fixture(scope='function')
async def remote_store(redis_client, clock):
    store = RemoteDataStore(TENANT_ID, redis_client, clock=clock)
    yield store
    await store.close()


@pytest.fixture(scope='function', params=['local', 'cloud'])
async def store(request, database_url, redis_client, clock):
    """Every contract test runs against both backends."""
    if request.param == 'local':
        store = await LocalDataStore.open(TENANT_ID, database_url=database_url, clock=clock)
    else:
        store = RemoteDataStore(TENANT_ID, redis_client, clock=clock)
    yield store
    await store.close()


def make_product(barcode='1001', name='Tea 500g', quantity=5, cost='100000',
                 currency=Currency.TOMAN, margin='20', threshold=2):
    return Product(
        id=barcode,
        name=name,
        quantity=quantity,
        low_stock_threshold=threshold,
        profit_margin=Decimal(margin),
        costs=[ProductCost(title='Purchase', amount=Decimal(cost), currency=currency)],
    )


def make_sale(*lines, when=None, customer_id=None, payment_ids=None):
    """Draft sale from (product_id, name, quantity, unit_price) tuples."""
    items = [
        SaleItem(product_id=pid, product_name=name, quantity=qty, price=Decimal(price))
        for pid, name, qty, price in lines
    ]
    return Sale(
        items=items,
        total=sum((item.line_total for item in items), Decimal('0')),
        date=when or datetime(2026, 3, 15, 10, 30),
        customer_id=customer_id,
        payment_ids=list(payment_ids or []),
    )


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def sale_factory():
    return make_sale
