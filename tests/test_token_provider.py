import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from sqlalchemy.exc import OperationalError

from catalog_core.exceptions import AuthExchangeFailure
from catalog_core.models import Credential
from catalog_core.token_provider import TokenProvider

NOW = 1_700_000_000_000


def make_provider(session, token_store, now=NOW):
    return TokenProvider(session, token_store, "client-id", "client-secret", clock=lambda: now)


@pytest.mark.asyncio
async def test_exchange_sets_expiry_from_issue_time(token_store, http_session, response):
    session = http_session(response(json_data={"access_token": "abc", "expires_in": 3600}))
    provider = make_provider(session, token_store)

    result = await provider.ensure_valid_token()

    assert result.ok
    assert result.value == Credential("abc", NOW + 3_600_000)
    assert await token_store.load() == Credential("abc", NOW + 3_600_000)

    # Verify the client-credentials parameters
    _, kwargs = session.post.call_args
    assert kwargs["params"] == {
        "client_id": "client-id",
        "client_secret": "client-secret",
        "grant_type": "client_credentials",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "stored",
    [
        Credential("stale", NOW - 1),
        Credential("stale", NOW),  # expiry equal to now counts as expired
        Credential("", NOW + 60_000),  # empty token is expired whatever the timestamp
    ],
)
async def test_invalid_token_triggers_one_exchange(token_store, http_session, response, stored):
    await token_store.save(stored)
    session = http_session(response(json_data={"access_token": "fresh", "expires_in": 60}))
    provider = make_provider(session, token_store)

    result = await provider.ensure_valid_token()

    assert session.post.call_count == 1
    assert result.value.token == "fresh"
    assert (await token_store.load()).token == "fresh"


@pytest.mark.asyncio
async def test_valid_token_makes_no_network_call(token_store):
    stored = Credential("still-good", NOW + 1)
    await token_store.save(stored)
    session = MagicMock()
    provider = make_provider(session, token_store)

    result = await provider.ensure_valid_token()

    assert result.ok
    assert result.value == stored
    session.post.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(token_store, response):
    session = MagicMock()
    session.post = MagicMock(return_value=response(json_data={"access_token": "shared", "expires_in": 3600}))
    provider = make_provider(session, token_store)

    results = await asyncio.gather(*(provider.ensure_valid_token() for _ in range(5)))

    assert session.post.call_count == 1
    assert {r.value.token for r in results} == {"shared"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        {"status": 400, "text": "invalid client"},
        {"json_error": ValueError("Expecting value")},
        {"json_data": {"expires_in": 3600}},
        {"json_data": {"access_token": "abc"}},
        {"json_data": ["not", "an", "object"]},
    ],
)
async def test_failed_exchange_returns_empty_credential(token_store, http_session, response, reply):
    session = http_session(response(**reply))
    provider = make_provider(session, token_store)

    result = await provider.ensure_valid_token()

    assert not result.ok
    assert isinstance(result.error, AuthExchangeFailure)
    assert result.value == Credential.empty()
    # Nothing is written on failure
    assert await token_store.load() == Credential.empty()


@pytest.mark.asyncio
async def test_unreachable_auth_endpoint(token_store, http_session):
    session = http_session(aiohttp.ClientConnectionError("connection refused"))
    provider = make_provider(session, token_store)

    result = await provider.ensure_valid_token()

    assert isinstance(result.error, AuthExchangeFailure)
    assert isinstance(result.error.original_error, aiohttp.ClientConnectionError)
    assert result.value.token == ""


@pytest.mark.asyncio
async def test_failed_exchange_is_retried_on_next_call(token_store, http_session, response):
    session = http_session(
        response(status=503, text="unavailable"),
        response(json_data={"access_token": "second-try", "expires_in": 10}),
    )
    provider = make_provider(session, token_store)

    first = await provider.ensure_valid_token()
    second = await provider.ensure_valid_token()

    assert not first.ok
    assert second.value.token == "second-try"
    assert session.post.call_count == 2


@pytest.mark.asyncio
async def test_unreadable_store_triggers_refresh(http_session, response):
    store = MagicMock()
    store.load = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("no such table: credentials")))
    store.save = AsyncMock()
    session = http_session(response(json_data={"access_token": "fresh", "expires_in": 60}))
    provider = make_provider(session, store)

    result = await provider.ensure_valid_token()

    assert result.ok
    assert result.value == Credential("fresh", NOW + 60_000)
    assert session.post.call_count == 1
    store.save.assert_awaited_once_with(Credential("fresh", NOW + 60_000))
