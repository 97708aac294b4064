from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
import pytest_asyncio
from dotenv import load_dotenv

from catalog_core.db.engine import Database
from catalog_core.store import RecordCache
from catalog_core.token_store import TokenStore

load_dotenv()


@pytest_asyncio.fixture
async def db():
    # In-memory SQLite for fast testing
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.connect()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def cache(db):
    record_cache = RecordCache(db)
    await record_cache.setup()
    return record_cache


@pytest.fixture
def token_store(db):
    return TokenStore(db)


@pytest.fixture
def response():
    """Builds a fake aiohttp response usable inside `async with session.post(...)`."""

    def factory(status=200, json_data=None, text="", json_error=None):
        resp = MagicMock()
        resp.status = status
        resp.json = AsyncMock(return_value=json_data, side_effect=json_error)
        resp.text = AsyncMock(return_value=text)

        ctx = MagicMock()
        ctx.__aenter__ = AsyncMock(return_value=resp)
        ctx.__aexit__ = AsyncMock(return_value=False)
        return ctx

    return factory


@pytest.fixture
def http_session():
    """
    Fake aiohttp session. Each item passed in is either a context built by
    the `response` fixture or an exception raised by `session.post`.
    """

    def factory(*responses):
        session = MagicMock()
        session.post = MagicMock(side_effect=list(responses))
        return session

    return factory


@pytest_asyncio.fixture
async def session():
    async with aiohttp.ClientSession() as client_session:
        yield client_session
