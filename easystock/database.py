"""Database configuration and initialization for the local store."""
import logging

from sqlalchemy import Column, DateTime, Integer, event, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

logger = logging.getLogger(__name__)

# Create SQLAlchemy base
Base = declarative_base()

# Bumped whenever a table or column is added; create_all is additive only
SCHEMA_VERSION = 1


class SchemaVersion(Base):
    """Schema versions applied to this database file."""

    __tablename__ = 'schema_version'

    version = Column(Integer, primary_key=True)
    applied_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<SchemaVersion(version={self.version})>"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def create_engine(database_url: str, echo: bool = False):
    """Create the async engine; SQLite connections get foreign keys enforced."""
    engine = create_async_engine(database_url, echo=echo)
    if engine.dialect.name == 'sqlite':
        event.listen(engine.sync_engine, 'connect', _enable_sqlite_foreign_keys)
    return engine


async def init_db(database_url: str, echo: bool = False):
    """
    Initialize the local database.

    Creates missing tables and records the current schema version.

    Args:
        database_url: SQLAlchemy async URL (e.g. ``sqlite+aiosqlite:///easystock.sqlite3``)
        echo: Log emitted SQL

    Returns:
        (engine, session_factory)
    """
    # Register every table on Base.metadata
    import easystock.models  # noqa: F401

    engine = create_engine(database_url, echo=echo)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        async with session.begin():
            current = await session.scalar(select(func.max(SchemaVersion.version)))
            if current is None or current < SCHEMA_VERSION:
                session.add(SchemaVersion(version=SCHEMA_VERSION))
                logger.info(f"[DB] ✓ Schema version {SCHEMA_VERSION} recorded (was {current})")

    return engine, session_factory
