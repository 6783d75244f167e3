"""
Remote store: multi-tenant document store on Redis.

Keys pattern:
    {prefix}:tenant:{tenant_id}:{collection}:{id}        JSON document
    {prefix}:tenant:{tenant_id}:{collection}             membership set
    {prefix}:tenant:{tenant_id}:attachments:by_source:{source_id}
    {prefix}:tenant:{tenant_id}:settings:{key}
    {prefix}:profile:{user_id} / {prefix}:profiles        user profiles

Every contract operation is one WATCH/MULTI/EXEC transaction: keys read by
the unit are watched, writes are buffered and queued after MULTI. When a
watched key changes before EXEC the redis client re-runs the whole unit.
"""
import asyncio
import dataclasses
import enum
import json
import logging
import typing
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import redis.asyncio as redis
from botocore.exceptions import BotoCoreError, ClientError
from redis.exceptions import RedisError

from easystock.config import Config
from easystock.entities import (
    Attachment, CostTitle, Customer, Employee, Expense, Payment, Product,
    RecurringExpense, Sale, UserProfile,
)
from easystock.exceptions import ConflictError, TransactionError
from easystock.services.settings_service import APP_SETTINGS_KEY, app_settings_from_value
from easystock.services.storage_service import StorageService, guess_content_type
from easystock.stores.base import DataStore, UnitOfWork
from easystock.utils.numbers import to_decimal

logger = logging.getLogger(__name__)

# Entity class -> collection name
COLLECTIONS = {
    Product: 'products',
    Sale: 'sales',
    Customer: 'customers',
    Payment: 'payments',
    Expense: 'expenses',
    RecurringExpense: 'recurring_expenses',
    Employee: 'employees',
    Attachment: 'attachments',
    CostTitle: 'cost_titles',
}


class RedisKeys:
    """Key builder for one tenant namespace."""

    def __init__(self, prefix: str, tenant_id: str):
        self.prefix = prefix
        self.tenant_id = tenant_id

    def _tenant(self, tenant_id: Optional[str] = None) -> str:
        return f"{self.prefix}:tenant:{tenant_id or self.tenant_id}"

    def collection(self, name: str) -> str:
        return f"{self._tenant()}:{name}"

    def document(self, name: str, key) -> str:
        return f"{self._tenant()}:{name}:{key}"

    def attachment_index(self, source_id) -> str:
        return f"{self._tenant()}:attachments:by_source:{source_id}"

    def setting(self, key: str, tenant_id: Optional[str] = None) -> str:
        return f"{self._tenant(tenant_id)}:settings:{key}"

    def profile(self, user_id: str) -> str:
        return f"{self.prefix}:profile:{user_id}"

    def profiles(self) -> str:
        return f"{self.prefix}:profiles"


# =====================================================
# DOCUMENT CODEC
# =====================================================

def _default_handler(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return {"__datetime__": obj.isoformat()}
    if isinstance(obj, date):
        return {"__date__": obj.isoformat()}
    if isinstance(obj, Decimal):
        # String keeps full precision
        return {"__decimal__": str(obj)}
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _object_hook(dct: Dict[str, Any]) -> Any:
    if "__decimal__" in dct:
        return Decimal(dct["__decimal__"])
    if "__datetime__" in dct:
        return datetime.fromisoformat(dct["__datetime__"])
    if "__date__" in dct:
        return date.fromisoformat(dct["__date__"])
    return dct


def dumps(value: Any) -> str:
    """Serialize a JSON-compatible value (Decimal and dates tagged)."""
    return json.dumps(value, default=_default_handler)


def loads(value: str) -> Any:
    return json.loads(value, object_hook=_object_hook)


def encode_document(entity) -> str:
    return dumps(dataclasses.asdict(entity))


def _coerce(tp, value):
    if value is None:
        return None
    origin = typing.get_origin(tp)
    if origin is typing.Union:
        inner = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        return _coerce(inner[0], value)
    if origin is list:
        (item_type,) = typing.get_args(tp)
        return [_coerce(item_type, item) for item in value]
    if dataclasses.is_dataclass(tp):
        return decode_document(tp, value)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return tp(value)
    if tp is Decimal:
        return to_decimal(value)
    return value


def decode_document(model, data: Dict[str, Any]):
    """Rebuild an entity (including nested cost lines and sale items)."""
    hints = typing.get_type_hints(model)
    values = {
        f.name: _coerce(hints[f.name], data[f.name])
        for f in dataclasses.fields(model)
        if f.name in data
    }
    return model(**values)


# =====================================================
# UNIT OF WORK
# =====================================================

class RedisUnitOfWork(UnitOfWork):
    """
    Unit of work over a transactional pipeline.

    Reads execute immediately after WATCHing their key; writes are buffered
    (read-your-writes within the unit) and queued by ``flush`` after MULTI.
    """

    def __init__(self, pipe, keys: RedisKeys):
        self.pipe = pipe
        self.keys = keys
        self._watched = set()
        self._writes: Dict[str, Optional[str]] = {}
        self._set_ops: List[tuple] = []

    # -- low level ------------------------------------------------------

    async def _watch(self, *keys):
        pending = [key for key in keys if key not in self._watched]
        if pending:
            await self.pipe.watch(*pending)
            self._watched.update(pending)

    async def _read(self, key: str) -> Optional[str]:
        if key in self._writes:
            return self._writes[key]
        await self._watch(key)
        return await self.pipe.get(key)

    async def _members_of(self, set_key: str) -> set:
        await self._watch(set_key)
        members = set(await self.pipe.smembers(set_key))
        for op, key, member in self._set_ops:
            if key != set_key:
                continue
            if op == 'sadd':
                members.add(member)
            else:
                members.discard(member)
        return members

    def _write(self, key: str, value: Optional[str]):
        self._writes[key] = value

    def _locate(self, model, key):
        """(document key, membership set key) of an entity."""
        if model is UserProfile:
            return self.keys.profile(key), self.keys.profiles()
        name = COLLECTIONS[model]
        return self.keys.document(name, key), self.keys.collection(name)

    async def _documents(self, model, ids) -> list:
        entities = []
        for key in sorted(ids):
            raw = await self._read(self._locate(model, key)[0])
            if raw is not None:
                entities.append(decode_document(model, loads(raw)))
        return entities

    def flush(self):
        """Queue every buffered write after MULTI (executed by EXEC)."""
        self.pipe.multi()
        for key, value in self._writes.items():
            if value is None:
                self.pipe.delete(key)
            else:
                self.pipe.set(key, value)
        for op, key, member in self._set_ops:
            getattr(self.pipe, op)(key, member)

    # -- contract primitives -------------------------------------------

    async def get(self, model, key):
        raw = await self._read(self._locate(model, key)[0])
        return decode_document(model, loads(raw)) if raw is not None else None

    async def list(self, model) -> list:
        set_key = self._locate(model, '')[1]
        return await self._documents(model, await self._members_of(set_key))

    async def add(self, entity) -> None:
        doc_key = self._locate(type(entity), entity.id)[0]
        if await self._read(doc_key) is not None:
            raise ConflictError(type(entity).__name__, entity.id)
        await self.put(entity)

    async def put(self, entity) -> None:
        model = type(entity)
        doc_key, set_key = self._locate(model, entity.id)
        previous = await self._read(doc_key)
        self._write(doc_key, encode_document(entity))
        self._set_ops.append(('sadd', set_key, str(entity.id)))

        if model is Attachment:
            if previous is not None:
                old_source = loads(previous).get('source_id')
                if old_source is not None and str(old_source) != str(entity.source_id):
                    self._set_ops.append(('srem', self.keys.attachment_index(old_source), entity.id))
            if entity.source_id is not None:
                self._set_ops.append(('sadd', self.keys.attachment_index(entity.source_id), entity.id))

    async def delete(self, model, key) -> None:
        doc_key, set_key = self._locate(model, key)
        previous = await self._read(doc_key)
        if previous is None:
            return
        self._write(doc_key, None)
        self._set_ops.append(('srem', set_key, str(key)))

        if model is Attachment:
            source_id = loads(previous).get('source_id')
            if source_id is not None:
                self._set_ops.append(('srem', self.keys.attachment_index(source_id), key))

    async def attachments_for(self, source_id: str) -> List[Attachment]:
        ids = await self._members_of(self.keys.attachment_index(source_id))
        return await self._documents(Attachment, ids)

    async def get_setting(self, key: str) -> Any:
        raw = await self._read(self.keys.setting(key))
        return loads(raw) if raw is not None else None

    async def put_setting(self, key: str, value: Any) -> None:
        self._write(self.keys.setting(key), dumps(value))


# =====================================================
# STORE
# =====================================================

class RemoteDataStore(DataStore):
    """
    Data store backed by Redis, scoped to one tenant namespace.

    The client must be created with ``decode_responses=True``.

    Usage:
        store = RemoteDataStore.from_url('tenant-1', is_superadmin=False)
        await store.add_product(product)
        await store.close()
    """

    storage_type = 'cloud'
    unit_of_work_class = RedisUnitOfWork

    def __init__(self, tenant_id: str, client, is_superadmin: bool = False, config=Config,
                 clock=None, storage: Optional[StorageService] = None):
        super().__init__(tenant_id, config=config, clock=clock)
        self.client = client
        self.keys = RedisKeys(config.STORE_KEY_PREFIX, tenant_id)
        # Resolved once; never re-checked per call
        self.is_superadmin = bool(is_superadmin)
        self._storage = storage

    @classmethod
    def from_url(cls, tenant_id: str, redis_url: Optional[str] = None, is_superadmin: bool = False,
                 config=Config, clock=None):
        client = redis.from_url(
            redis_url or config.REDIS_URL,
            decode_responses=True,
            socket_timeout=config.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=config.REDIS_SOCKET_TIMEOUT,
            max_connections=config.REDIS_MAX_CONNECTIONS,
        )
        logger.info(f"[STORE] ✓ Remote store opened for tenant {tenant_id}")
        return cls(tenant_id, client, is_superadmin=is_superadmin, config=config, clock=clock)

    async def _atomic(self, work):
        async def run(pipe):
            unit = self.unit_of_work_class(pipe, self.keys)
            result = await work(unit)
            unit.flush()
            return result

        # Retries the whole unit on WatchError
        return await self.client.transaction(run, value_from_callable=True)

    async def list_user_profiles(self) -> List[UserProfile]:
        """
        Every user profile, labelled with its tenant's shop name.

        Returns an empty list unless the store was opened by a superadmin.
        Performs one settings read per profile.
        """
        if not self.is_superadmin:
            return []

        try:
            profiles = []
            for user_id in sorted(await self.client.smembers(self.keys.profiles())):
                raw = await self.client.get(self.keys.profile(user_id))
                if raw is None:
                    continue
                profile = decode_document(UserProfile, loads(raw))

                raw_settings = await self.client.get(self.keys.setting(APP_SETTINGS_KEY, tenant_id=user_id))
                fallback = profile.display_name or 'Unnamed'
                settings = app_settings_from_value(
                    loads(raw_settings) if raw_settings is not None else None, fallback
                )
                profiles.append(dataclasses.replace(profile, display_name=settings.shop_name))
            return profiles
        except RedisError as e:
            logger.error(f"[STORE] ✗ list_user_profiles failed: {e}")
            raise TransactionError('list_user_profiles', e) from e

    async def upload_file(self, data: bytes, content_type: Optional[str] = None,
                          filename: Optional[str] = None) -> str:
        """Upload to object storage when a bucket is configured, else a data URL."""
        if not self.config.S3_BUCKET:
            return await super().upload_file(data, content_type, filename)

        storage = self._object_storage()
        content_type = guess_content_type(filename, content_type)
        object_name = storage.object_name_for(self.tenant_id, filename, content_type)
        try:
            return await asyncio.to_thread(storage.upload_bytes, data, object_name, content_type)
        except (BotoCoreError, ClientError) as e:
            raise TransactionError('upload_file', e) from e

    async def _discard_files(self, images: List[str]) -> None:
        """Delete the bucket objects behind removed attachments (after commit)."""
        if not self.config.S3_BUCKET:
            return
        storage = self._object_storage()
        for image in images:
            object_name = storage.object_name_from_url(image)
            if object_name:
                await asyncio.to_thread(storage.delete_file, object_name)

    def _object_storage(self) -> StorageService:
        if self._storage is None:
            self._storage = StorageService(self.config)
        return self._storage

    async def close(self) -> None:
        await self.client.aclose()
        logger.info(f"[STORE] Remote store closed for tenant {self.tenant_id}")
