from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from herstories.core.config import settings


def _enable_sqlite_savepoints(engine) -> None:
    # pysqlite defers BEGIN on its own; let SQLAlchemy emit it so SAVEPOINT works
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str | None = None, **kwargs):
    url = url or settings.async_database_url
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=settings.database_echo, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine
    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=1800,  # recycle connections every 30 min (avoid stale)
        **kwargs,
    )


engine = build_engine()
SessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def create_all() -> None:
    """Create tables for local development and tests."""
    from herstories.db.base import Base
    import herstories.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
