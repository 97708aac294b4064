import logging
import os

from sqlalchemy import event, inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from .models import Base

logger = logging.getLogger(__name__)


def _add_missing_columns(conn) -> list[str]:
    """
    Additive schema evolution: any column declared on a model but missing from
    an existing table is added with its server default. Nothing is ever dropped.
    """
    inspector = inspect(conn)
    existing_tables = set(inspector.get_table_names())
    added = []

    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            continue
        existing = {col["name"] for col in inspector.get_columns(table.name)}
        for column in table.columns:
            if column.name in existing:
                continue
            ddl = f"ALTER TABLE {table.name} ADD COLUMN {column.name} {column.type.compile(dialect=conn.dialect)}"
            if column.server_default is not None:
                ddl += f" DEFAULT '{column.server_default.arg}'"
            conn.execute(text(ddl))
            added.append(f"{table.name}.{column.name}")

    return added


class Database:
    """
    Owns the single engine shared by the token store and the record cache.
    Create once, `connect()` before use, `close()` on shutdown.
    """

    def __init__(self, db_url: str):
        self.db_url = db_url
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker | None = None

    @classmethod
    def for_path(cls, db_path: str) -> "Database":
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return cls(f"sqlite+aiosqlite:///{db_path}")

    async def connect(self):
        """Initializes the database connection, creates tables and adds new columns."""
        if "sqlite" in self.db_url and "aiosqlite" not in self.db_url:
            self.db_url = self.db_url.replace("sqlite://", "sqlite+aiosqlite://")

        self.engine = create_async_engine(self.db_url, echo=False)

        if "sqlite" in self.db_url:

            @event.listens_for(self.engine.sync_engine, "connect")
            def set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=NORMAL")
                cursor.close()

        async with self.engine.begin() as conn:
            added = await conn.run_sync(_add_missing_columns)
            await conn.run_sync(Base.metadata.create_all)

        if added:
            logger.info(f"Added columns to existing schema: {', '.join(added)}")

        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    async def close(self):
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None

    @property
    def session(self):
        """Returns a new session context manager."""
        if not self.session_factory:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.session_factory()
