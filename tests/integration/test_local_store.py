"""
Integration tests specific to the embedded SQL store.
"""
from sqlalchemy import func, select

from easystock.database import SCHEMA_VERSION, SchemaVersion
from easystock.stores.local import LocalDataStore


async def test_schema_version_recorded_once(database_url, clock):
    for _ in range(2):
        store = await LocalDataStore.open('tenant-1', database_url=database_url, clock=clock)
        await store.close()

    store = await LocalDataStore.open('tenant-1', database_url=database_url, clock=clock)
    try:
        async with store.session_factory() as session:
            versions = (await session.scalars(select(SchemaVersion.version))).all()
            assert versions == [SCHEMA_VERSION]
            assert await session.scalar(select(func.count()).select_from(SchemaVersion)) == 1
    finally:
        await store.close()


async def test_data_survives_reopen(database_url, clock, product_factory):
    store = await LocalDataStore.open('tenant-1', database_url=database_url, clock=clock)
    await store.add_product(product_factory())
    await store.close()

    store = await LocalDataStore.open('tenant-1', database_url=database_url, clock=clock)
    try:
        assert (await store.get_product('1001')).name == 'Tea 500g'
    finally:
        await store.close()


async def test_deleting_product_removes_cost_rows(local_store, product_factory):
    from easystock.models import ProductCostRecord

    await local_store.add_product(product_factory())
    await local_store.delete_product('1001')

    async with local_store.session_factory() as session:
        assert await session.scalar(select(func.count()).select_from(ProductCostRecord)) == 0


async def test_no_privileged_listing(local_store):
    assert await local_store.list_user_profiles() == []
