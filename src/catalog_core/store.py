import asyncio
import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from .db.engine import Database
from .db.models import GameRow
from .exceptions import CacheWriteFailure
from .models import GameRecord
from .observable import LiveValue
from .result import Result

logger = logging.getLogger(__name__)


def _to_record(row: GameRow) -> GameRecord:
    return GameRecord(
        surrogate_id=row.id,
        remote_id=row.igdb_id,
        name=row.name,
        image_url=row.image,
        summary=row.summary,
        description=row.description,
    )


class RecordCache:
    """
    Durable store of fetched game records.
    `get_all()` is a live view: every write batch republishes the stored rows
    to existing subscribers.
    """

    def __init__(self, db: Database):
        self.db = db
        self._live: LiveValue[list[GameRecord]] = LiveValue([])
        self._write_lock = asyncio.Lock()

    async def setup(self):
        """Loads the persisted rows into the live view."""
        await self._publish()

    def get_all(self) -> LiveValue[list[GameRecord]]:
        return self._live

    async def list_records(self) -> list[GameRecord]:
        async with self.db.session as session:
            rows = await session.scalars(select(GameRow).order_by(GameRow.id))
            return [_to_record(row) for row in rows]

    async def get_by_id(self, surrogate_id: int) -> GameRecord | None:
        async with self.db.session as session:
            row = await session.get(GameRow, surrogate_id)
            return _to_record(row) if row else None

    async def get_by_remote_id(self, remote_id: str) -> GameRecord | None:
        async with self.db.session as session:
            row = await session.scalar(
                select(GameRow).where(GameRow.igdb_id == str(remote_id)).order_by(GameRow.id).limit(1)
            )
            return _to_record(row) if row else None

    async def insert(self, record: GameRecord) -> GameRecord:
        """Append-only: the same remote id inserted twice yields two rows."""
        async with self._write_lock:
            stored = await self._write(record, upsert=False)
        await self._publish()
        return stored

    async def upsert(self, record: GameRecord) -> GameRecord:
        """Updates the row with this remote id in place, or inserts one."""
        async with self._write_lock:
            stored = await self._write(record, upsert=True)
        await self._publish()
        return stored

    async def store_all(self, records: Iterable[GameRecord], upsert: bool = True) -> list[Result[GameRecord]]:
        """
        Writes records one by one. A failed write is logged and reported in
        its Result; the remaining records are still written. Subscribers are
        notified once, after the whole batch.
        """
        results = []
        async with self._write_lock:
            for record in records:
                try:
                    results.append(Result.success(await self._write(record, upsert=upsert)))
                except CacheWriteFailure as e:
                    logger.error(str(e))
                    results.append(Result.failure(e, record))
        await self._publish()
        return results

    async def clear(self):
        async with self._write_lock:
            async with self.db.session as session:
                async with session.begin():
                    await session.execute(delete(GameRow))
        await self._publish()

    async def _write(self, record: GameRecord, upsert: bool) -> GameRecord:
        try:
            async with self.db.session as session:
                async with session.begin():
                    row = None
                    if upsert:
                        row = await session.scalar(
                            select(GameRow).where(GameRow.igdb_id == record.remote_id).order_by(GameRow.id).limit(1)
                        )
                    if row is None:
                        row = GameRow(igdb_id=record.remote_id)
                        session.add(row)
                    row.name = record.name
                    row.image = record.image_url
                    row.summary = record.summary
                    row.description = record.description
                    await session.flush()
                    return _to_record(row)
        except SQLAlchemyError as e:
            raise CacheWriteFailure(record.remote_id, e) from e

    async def _publish(self):
        try:
            records = await self.list_records()
        except SQLAlchemyError as e:
            logger.error(f"Failed to reload cached games, keeping the current view: {e}")
            return
        self._live.publish(records)
