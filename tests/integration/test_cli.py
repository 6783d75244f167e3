"""
Integration tests for the easystock CLI.
"""
import asyncio

import pytest
from click.testing import CliRunner

from easystock.cli_commands import cli
from easystock.config import Config
from easystock.provider import ProviderPreference, StorageType
from easystock.stores.local import LocalDataStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def preference_file(tmp_path):
    return str(tmp_path / 'preferences.json')


def test_use_storage(runner, preference_file):
    result = runner.invoke(cli, ['use-storage', 'cloud', '--preference-file', preference_file])

    assert result.exit_code == 0
    assert ProviderPreference(preference_file).read() == StorageType.CLOUD


def test_use_storage_rejects_unknown(runner, preference_file):
    result = runner.invoke(cli, ['use-storage', 'floppy', '--preference-file', preference_file])
    assert result.exit_code != 0


def test_init_db(runner, database_url):
    result = runner.invoke(cli, ['init-db', '--database-url', database_url])

    assert result.exit_code == 0
    assert 'schema version' in result.output


def test_stock_report_flags_low_stock(runner, database_url, preference_file, monkeypatch, product_factory):
    monkeypatch.setattr(Config, 'DATABASE_URL', database_url)

    async def seed():
        store = await LocalDataStore.open('tenant-1', database_url=database_url)
        await store.add_product(product_factory(barcode='1', name='Tea', quantity=1, threshold=2))
        await store.add_product(product_factory(barcode='2', name='Rice', quantity=9, threshold=2))
        await store.close()

    asyncio.run(seed())

    result = runner.invoke(cli, ['stock-report', '--tenant', 'tenant-1', '--preference-file', preference_file])

    assert result.exit_code == 0
    rows = [line for line in result.output.splitlines() if line.startswith(('1 ', '2 '))]
    assert len(rows) == 2
    assert 'Rice' in rows[0] and 'LOW' not in rows[0]
    assert 'Tea' in rows[1] and 'LOW' in rows[1]


def test_apply_recurring_on_empty_store(runner, database_url, preference_file, monkeypatch):
    monkeypatch.setattr(Config, 'DATABASE_URL', database_url)

    result = runner.invoke(cli, ['apply-recurring', '--tenant', 'tenant-1', '--preference-file', preference_file])

    assert result.exit_code == 0
    assert '0 expense(s) generated' in result.output
