import asyncio
import logging
import time
from collections.abc import Callable

import aiohttp
from sqlalchemy.exc import SQLAlchemyError

from .constants import TOKEN_URL
from .exceptions import AuthExchangeFailure
from .models import Credential
from .result import Result
from .token_store import TokenStore

logger = logging.getLogger(__name__)


def epoch_millis() -> int:
    return int(time.time() * 1000)


class TokenProvider:
    """
    Hands out a valid app access token, running the OAuth client-credentials
    exchange only when the stored one is missing or expired.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        store: TokenStore,
        client_id: str,
        client_secret: str,
        token_url: str = TOKEN_URL,
        clock: Callable[[], int] = epoch_millis,
    ):
        self.session = session
        self.store = store
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.clock = clock
        # Single writer for the credential fields
        self._lock = asyncio.Lock()

    async def _load(self) -> Credential:
        # An unreadable store is treated as an expired token
        try:
            return await self.store.load()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read stored token: {e}")
            return Credential.empty()

    async def ensure_valid_token(self) -> Result[Credential]:
        current = await self._load()
        if current.is_valid(self.clock()):
            return Result.success(current)

        async with self._lock:
            # Another task may have refreshed while we waited
            current = await self._load()
            if current.is_valid(self.clock()):
                return Result.success(current)
            return await self._refresh()

    async def _refresh(self) -> Result[Credential]:
        try:
            credential = await self._exchange()
        except AuthExchangeFailure as e:
            logger.error(f"Token exchange failed: {e}")
            return Result.failure(e, Credential.empty())

        try:
            await self.store.save(credential)
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist refreshed token: {e}")

        logger.info("Access token refreshed")
        return Result.success(credential)

    async def _exchange(self) -> Credential:
        params = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "client_credentials",
        }
        issued_at = self.clock()

        try:
            async with self.session.post(self.token_url, params=params) as resp:
                if resp.status != 200:
                    raise AuthExchangeFailure(
                        f"Token endpoint returned {resp.status}: {await resp.text()}", status_code=resp.status
                    )
                data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AuthExchangeFailure(f"Token endpoint unreachable: {e}", original_error=e) from e
        except ValueError as e:
            raise AuthExchangeFailure(f"Token response is not JSON: {e}", original_error=e) from e

        if not isinstance(data, dict):
            raise AuthExchangeFailure(f"Unexpected token response: {data!r}")

        token = data.get("access_token")
        try:
            expires_in = int(data.get("expires_in"))
        except (TypeError, ValueError) as e:
            raise AuthExchangeFailure("Token response has no usable expires_in", original_error=e) from e

        if not token or not isinstance(token, str):
            raise AuthExchangeFailure("Token response is missing access_token")

        return Credential(token=token, expires_at_epoch_millis=issued_at + expires_in * 1000)
