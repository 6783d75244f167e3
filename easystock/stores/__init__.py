"""Storage backends implementing the data access contract."""
from easystock.stores.base import DataStore, UnitOfWork
from easystock.stores.local import LocalDataStore, SqlUnitOfWork
from easystock.stores.remote import RemoteDataStore, RedisUnitOfWork

__all__ = [
    'DataStore', 'UnitOfWork', 'LocalDataStore', 'SqlUnitOfWork',
    'RemoteDataStore', 'RedisUnitOfWork',
]
