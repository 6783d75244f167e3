"""
Provider selector.

Reads the persisted backend preference and instantiates the matching
store. Switching backends means writing the preference and creating a new
store; data is never migrated between backends.
"""
import enum
import json
import logging
import os
from typing import Optional

from easystock.config import Config
from easystock.entities import UserProfile
from easystock.exceptions import BusinessLogicError
from easystock.stores.local import LocalDataStore
from easystock.stores.remote import RemoteDataStore

logger = logging.getLogger(__name__)

PREFERENCE_KEY = 'storage_type'


class StorageType(str, enum.Enum):
    LOCAL = 'local'
    CLOUD = 'cloud'


class ProviderPreference:
    """Single-key preference persisted as a small JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or Config.PREFERENCE_FILE

    def read(self) -> StorageType:
        """Active backend; local when nothing (or garbage) was saved."""
        if not os.path.exists(self.path):
            return StorageType.LOCAL
        try:
            with open(self.path, encoding='utf-8') as f:
                return StorageType(json.load(f).get(PREFERENCE_KEY, StorageType.LOCAL.value))
        except (ValueError, AttributeError) as e:
            logger.warning(f"[PROVIDER] ⚠ Unreadable preference file {self.path}: {e}. Using local.")
            return StorageType.LOCAL

    def write(self, storage_type) -> StorageType:
        storage_type = StorageType(storage_type)
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({PREFERENCE_KEY: storage_type.value}, f)
        logger.info(f"[PROVIDER] ✓ Storage preference set to '{storage_type.value}'")
        return storage_type


def resolve_privilege(profile: Optional[UserProfile]) -> bool:
    """Privilege flag handed to the remote store at construction."""
    return bool(profile is not None and profile.is_superadmin)


async def create_store(storage_type, tenant_id: str, is_superadmin: bool = False,
                       config=Config, clock=None):
    """
    Instantiate the store for a backend.

    Args:
        storage_type: StorageType or its string value
        tenant_id: Tenant (account) the store is scoped to
        is_superadmin: Resolved privilege flag (remote store only)

    Returns:
        An open DataStore

    Raises:
        BusinessLogicError: unknown storage type
    """
    try:
        storage_type = StorageType(storage_type)
    except ValueError:
        raise BusinessLogicError(f"Unknown storage type '{storage_type}'")

    if storage_type == StorageType.CLOUD:
        return RemoteDataStore.from_url(
            tenant_id, is_superadmin=is_superadmin, config=config, clock=clock
        )
    return await LocalDataStore.open(tenant_id, config=config, clock=clock)
