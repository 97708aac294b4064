import asyncio
import logging
from dataclasses import dataclass, field

from .catalog_client import CatalogClient
from .constants import DEFAULT_LISTING_LIMIT, SyncState
from .exceptions import CatalogError
from .models import GameDetails, GameRecord
from .observable import LiveValue
from .parser import to_game_record
from .store import RecordCache
from .token_provider import TokenProvider

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    state: SyncState
    records: list[GameRecord] = field(default_factory=list)
    stored: int = 0
    errors: list[CatalogError] = field(default_factory=list)


class SyncCoordinator:
    """
    Drives token -> fetch -> map -> store for the game listing, and the
    uncached screenshot/video enrichment for a single record.
    """

    def __init__(
        self,
        tokens: TokenProvider,
        client: CatalogClient,
        cache: RecordCache,
        listing_limit: int = DEFAULT_LISTING_LIMIT,
    ):
        self.tokens = tokens
        self.client = client
        self.cache = cache
        self.listing_limit = listing_limit
        self.state = SyncState.IDLE

    @property
    def games(self) -> LiveValue[list[GameRecord]]:
        """The published game list, a live projection of the record cache."""
        return self.cache.get_all()

    def _enter(self, state: SyncState):
        logger.debug(f"Sync state: {self.state.value} -> {state.value}")
        self.state = state

    async def fetch_games(self, limit: int | None = None) -> SyncReport:
        self._enter(SyncState.IDLE)

        token = await self.tokens.ensure_valid_token()
        if not token.ok:
            self._enter(SyncState.FAILED)
            return SyncReport(SyncState.FAILED, errors=[token.error])
        self._enter(SyncState.TOKEN_READY)

        listing = await self.client.list_top_games(token.value, self.listing_limit if limit is None else limit)
        if not listing.ok:
            logger.error(f"Game sync failed, keeping the current list: {listing.error}")
            self._enter(SyncState.FAILED)
            return SyncReport(SyncState.FAILED, errors=[listing.error])
        self._enter(SyncState.FETCHED)

        records = [to_game_record(game) for game in listing.value]
        self._enter(SyncState.MAPPED)

        results = await self.cache.store_all(records, upsert=True)
        errors = [r.error for r in results if not r.ok]
        self._enter(SyncState.PUBLISHED)

        logger.info(f"Synced {len(records)} games ({len(results) - len(errors)} stored, {len(errors)} failed)")
        return SyncReport(
            SyncState.PUBLISHED,
            records=[r.value for r in results],
            stored=len(results) - len(errors),
            errors=errors,
        )

    async def load_enrichment(self, record_id: int) -> GameDetails | None:
        """
        Screenshots and trailer for a record in the published list.
        Both fetches are best-effort; missing parts are left empty.
        """
        record = next((r for r in self.games.value if r.surrogate_id == record_id), None)
        if record is None:
            logger.warning(f"No game with id {record_id} in the current list")
            return None

        details = GameDetails(record=record)
        token = await self.tokens.ensure_valid_token()
        if not token.ok:
            details.errors.append(token.error)
            return details

        screenshots, video = await asyncio.gather(
            self.client.list_screenshots(token.value, record.remote_id),
            self.client.fetch_video(token.value, record.remote_id),
        )
        details.screenshots = screenshots.value
        details.video_id = video.value
        details.errors.extend(r.error for r in (screenshots, video) if not r.ok)
        return details
