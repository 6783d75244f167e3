"""
Unit tests for the provider selector.
"""
import json

import fakeredis
import pytest

from easystock.config import Config
from easystock.entities import UserProfile, UserRole
from easystock.exceptions import BusinessLogicError
from easystock.provider import ProviderPreference, StorageType, create_store, resolve_privilege
from easystock.stores.local import LocalDataStore
from easystock.stores.remote import RemoteDataStore


class TestProviderPreference:
    """Tests for the persisted backend preference."""

    def test_defaults_to_local(self, tmp_path):
        assert ProviderPreference(str(tmp_path / 'missing.json')).read() == StorageType.LOCAL

    def test_write_then_read(self, tmp_path):
        path = tmp_path / 'nested' / 'preferences.json'
        preference = ProviderPreference(str(path))

        preference.write('cloud')

        assert preference.read() == StorageType.CLOUD
        assert json.loads(path.read_text()) == {'storage_type': 'cloud'}

    def test_corrupt_file_falls_back_to_local(self, tmp_path):
        path = tmp_path / 'preferences.json'
        path.write_text('{not json')
        assert ProviderPreference(str(path)).read() == StorageType.LOCAL

    def test_write_rejects_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError):
            ProviderPreference(str(tmp_path / 'p.json')).write('floppy')


def test_resolve_privilege():
    assert resolve_privilege(UserProfile(id='u1', role=UserRole.SUPERADMIN)) is True
    assert resolve_privilege(UserProfile(id='u2')) is False
    assert resolve_privilege(None) is False


class TestCreateStore:
    """Tests for the store factory."""

    async def test_local(self, database_url):
        store = await create_store('local', 'tenant-1', config=type('C', (Config,), {'DATABASE_URL': database_url}))
        try:
            assert isinstance(store, LocalDataStore)
            assert store.storage_type == StorageType.LOCAL.value
        finally:
            await store.close()

    async def test_cloud_carries_privilege(self, monkeypatch):
        monkeypatch.setattr(
            'easystock.stores.remote.redis.from_url',
            lambda url, **kwargs: fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True),
        )
        store = await create_store(StorageType.CLOUD, 'tenant-1', is_superadmin=True)
        try:
            assert isinstance(store, RemoteDataStore)
            assert store.is_superadmin is True
            assert store.storage_type == StorageType.CLOUD.value
        finally:
            await store.close()

    async def test_unknown_storage_type(self):
        with pytest.raises(BusinessLogicError):
            await create_store('floppy', 'tenant-1')
