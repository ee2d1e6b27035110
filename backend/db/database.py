from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import event
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.config import settings


class Base(DeclarativeBase):
    pass


# SQLSTATE for unique_violation; also raised for duplicate primary keys
UNIQUE_VIOLATION = "23505"


def utcnow() -> datetime:
    """Naive UTC, the form every DateTime column here stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_unique_violation(exc: sa_exc.IntegrityError) -> bool:
    """True when the failed statement hit a unique or primary key constraint.

    asyncpg errors carry a SQLSTATE; sqlite3 only reports it in the message.
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is None and orig is not None:
        code = getattr(orig.__cause__, "sqlstate", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores FK constraints (and so ON DELETE CASCADE) unless asked per connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(settings.database_url, echo=settings.database_echo)
enable_sqlite_foreign_keys(engine)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


def import_models() -> None:
    # Registers every table on Base.metadata
    from . import company, warehouse, product, supplier, sales  # noqa: F401
    from .inventory import stock, movement  # noqa: F401


async def create_db_and_tables(bind: AsyncEngine = engine):
    import_models()
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


@asynccontextmanager
async def atomic(db: AsyncSession):
    """
    Run the enclosed writes as one unit: commit on normal exit, roll back on any error.

    The session may already have autobegun a transaction (e.g. a read done by a
    dependency), so this does not call `db.begin()`.
    """
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
