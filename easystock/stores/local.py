"""
Local store: embedded SQLite database through SQLAlchemy asyncio.

One database file per device; every contract operation runs in a single
session transaction spanning all tables it touches.
"""
import logging
from typing import Any, List, Optional

from sqlalchemy import select

from easystock.config import Config
from easystock.database import init_db
from easystock.entities import Attachment, UserProfile
from easystock.exceptions import ConflictError
from easystock.models import RECORD_TYPES, AttachmentRecord, SettingRecord
from easystock.stores.base import DataStore, UnitOfWork

logger = logging.getLogger(__name__)


class SqlUnitOfWork(UnitOfWork):
    """Unit of work bound to one AsyncSession inside an open transaction."""

    def __init__(self, session):
        self.session = session

    async def get(self, model, key):
        record = await self.session.get(RECORD_TYPES[model], key)
        return record.to_entity() if record is not None else None

    async def list(self, model) -> list:
        result = await self.session.scalars(select(RECORD_TYPES[model]))
        return [record.to_entity() for record in result.all()]

    async def add(self, entity) -> None:
        record_type = RECORD_TYPES[type(entity)]
        if await self.session.get(record_type, entity.id) is not None:
            raise ConflictError(type(entity).__name__, entity.id)
        self.session.add(record_type.from_entity(entity))
        await self.session.flush()

    async def put(self, entity) -> None:
        record_type = RECORD_TYPES[type(entity)]
        record = await self.session.get(record_type, entity.id)
        if record is None:
            self.session.add(record_type.from_entity(entity))
        else:
            record.update_from(entity)
        await self.session.flush()

    async def delete(self, model, key) -> None:
        record = await self.session.get(RECORD_TYPES[model], key)
        if record is not None:
            await self.session.delete(record)
            await self.session.flush()

    async def attachments_for(self, source_id: str) -> List[Attachment]:
        result = await self.session.scalars(
            select(AttachmentRecord).where(AttachmentRecord.source_id == str(source_id))
        )
        return [record.to_entity() for record in result.all()]

    async def get_setting(self, key: str) -> Any:
        record = await self.session.get(SettingRecord, key)
        return record.value if record is not None else None

    async def put_setting(self, key: str, value: Any) -> None:
        record = await self.session.get(SettingRecord, key)
        if record is None:
            self.session.add(SettingRecord(key=key, value=value))
        else:
            record.value = value
        await self.session.flush()


class LocalDataStore(DataStore):
    """
    Data store backed by the embedded SQL database.

    Usage:
        store = await LocalDataStore.open('tenant-1')
        await store.add_product(product)
        await store.close()
    """

    storage_type = 'local'
    unit_of_work_class = SqlUnitOfWork

    def __init__(self, tenant_id: str, engine, session_factory, config=Config, clock=None):
        super().__init__(tenant_id, config=config, clock=clock)
        self.engine = engine
        self.session_factory = session_factory

    @classmethod
    async def open(cls, tenant_id: str, database_url: Optional[str] = None, config=Config, clock=None):
        """Initialize the database (creating missing tables) and return a store."""
        database_url = database_url or config.DATABASE_URL
        engine, session_factory = await init_db(database_url, echo=config.SQLALCHEMY_ECHO)
        logger.info(f"[STORE] ✓ Local store opened for tenant {tenant_id}")
        return cls(tenant_id, engine, session_factory, config=config, clock=clock)

    async def _atomic(self, work):
        # session.begin() commits on success and rolls back on any exception
        async with self.session_factory() as session:
            async with session.begin():
                return await work(self.unit_of_work_class(session))

    async def list_user_profiles(self) -> List[UserProfile]:
        # Device-local store: no cross-tenant listing
        return []

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info(f"[STORE] Local store closed for tenant {self.tenant_id}")
