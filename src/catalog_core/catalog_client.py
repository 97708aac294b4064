import asyncio
import logging
import random
from typing import Any

import aiohttp

from .constants import GAMES_ENDPOINT, SCREENSHOT_SIZE, SCREENSHOTS_ENDPOINT
from .exceptions import AuthExchangeFailure, CatalogError, ParseFailure, TransportFailure
from .models import Credential, RemoteGame
from .parser import (
    build_listing_query,
    build_screenshots_query,
    build_video_query,
    normalize_image_url,
    parse_games,
    parse_screenshot_urls,
    parse_video_id,
)
from .rate_limiter import RateLimiter
from .result import Result

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
BASE_DELAY = 1.0
MAX_DELAY = 30.0


class CatalogClient:
    """
    Authenticated queries against the game database API.
    Every operation is best-effort: failures come back as a Result carrying
    the error and an empty value, never as a raised exception.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        client_id: str,
        rate_limiter: RateLimiter | None = None,
        max_retries: int = MAX_RETRIES,
        base_delay: float = BASE_DELAY,
        max_delay: float = MAX_DELAY,
    ):
        self.session = session
        self.client_id = client_id
        self.rate_limiter = rate_limiter or RateLimiter()
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

    def _headers(self, credential: Credential) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {credential.token}",
            "Client-ID": self.client_id,
            "Accept": "application/json",
        }

    def _backoff(self, attempt: int) -> float:
        return min(self.base_delay * (2**attempt) + random.uniform(0, 1) * self.base_delay, self.max_delay)

    async def _post(self, endpoint: str, body: str, credential: Credential) -> Any:
        """
        Posts a query body and returns the decoded JSON.
        Retries 429/5xx and connection errors with exponential backoff.
        Raises TransportFailure or ParseFailure.
        """
        if not credential.token:
            raise AuthExchangeFailure("No access token available; request not sent")

        last_error: TransportFailure | None = None
        for attempt in range(self.max_retries + 1):
            await self.rate_limiter.wait()
            try:
                async with self.session.post(endpoint, data=body, headers=self._headers(credential)) as resp:
                    if 200 <= resp.status < 300:
                        try:
                            return await resp.json(content_type=None)
                        except ValueError as e:
                            raise ParseFailure(endpoint, f"invalid JSON: {e}") from e

                    last_error = TransportFailure(endpoint, status_code=resp.status)
                    if resp.status != 429 and resp.status < 500:
                        logger.warning(f"{endpoint} returned {resp.status} - {await resp.text()}")
                        raise last_error
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = TransportFailure(endpoint, original_error=e)

            if attempt < self.max_retries:
                delay = self._backoff(attempt)
                logger.warning(f"{last_error}. Retrying in {delay:.2f}s...")
                await asyncio.sleep(delay)

        logger.error(f"Max retries exceeded for {endpoint}")
        raise last_error

    async def list_top_games(self, credential: Credential, limit: int) -> Result[list[RemoteGame]]:
        """Top-rated base games, a single batch of at most `limit` entries."""
        try:
            data = await self._post(GAMES_ENDPOINT, build_listing_query(limit), credential)
            games = parse_games(data)
        except (ValueError, TypeError, KeyError) as e:
            return self._failed("listing", ParseFailure(GAMES_ENDPOINT, str(e)), [])
        except CatalogError as e:
            return self._failed("listing", e, [])

        logger.debug(f"Fetched {len(games)} games (limit {limit})")
        return Result.success(games)

    async def list_screenshots(self, credential: Credential, remote_id: str) -> Result[list[str]]:
        try:
            data = await self._post(SCREENSHOTS_ENDPOINT, build_screenshots_query(remote_id), credential)
            urls = parse_screenshot_urls(data)
        except (ValueError, TypeError, KeyError) as e:
            return self._failed(f"screenshots for {remote_id}", ParseFailure(SCREENSHOTS_ENDPOINT, str(e)), [])
        except CatalogError as e:
            return self._failed(f"screenshots for {remote_id}", e, [])

        return Result.success([normalize_image_url(url, SCREENSHOT_SIZE) for url in urls])

    async def fetch_video(self, credential: Credential, remote_id: str) -> Result[str | None]:
        try:
            data = await self._post(GAMES_ENDPOINT, build_video_query(remote_id), credential)
            video_id = parse_video_id(data)
        except (ValueError, TypeError, KeyError) as e:
            return self._failed(f"video for {remote_id}", ParseFailure(GAMES_ENDPOINT, str(e)), None)
        except CatalogError as e:
            return self._failed(f"video for {remote_id}", e, None)

        return Result.success(video_id)

    def _failed(self, what: str, error: CatalogError, default):
        logger.error(f"Failed to fetch {what}: {error}")
        return Result.failure(error, default)
