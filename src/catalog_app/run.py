import asyncio
import sys
from contextlib import asynccontextmanager

import aiohttp

from catalog_core.catalog_client import CatalogClient
from catalog_core.db.engine import Database
from catalog_core.models import GameRecord
from catalog_core.rate_limiter import RateLimiter
from catalog_core.store import RecordCache
from catalog_core.sync import SyncCoordinator
from catalog_core.token_provider import TokenProvider
from catalog_core.token_store import TokenStore

from .config import (
    DATABASE_PATH,
    IGDB_CLIENT_ID,
    IGDB_CLIENT_SECRET,
    LISTING_LIMIT,
    MAX_RETRIES,
    REQUESTS_PER_SECOND,
    TOKEN_NAMESPACE,
)
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)

USAGE = "Usage: python -m catalog_app.run <sync|list|watch|details <id>>"


@asynccontextmanager
async def open_catalog(db_path: str = DATABASE_PATH):
    """Wires one database handle and one HTTP session into a coordinator."""
    db = Database.for_path(db_path)
    await db.connect()
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=30)) as session:
            tokens = TokenProvider(session, TokenStore(db, TOKEN_NAMESPACE), IGDB_CLIENT_ID, IGDB_CLIENT_SECRET)
            client = CatalogClient(
                session, IGDB_CLIENT_ID, rate_limiter=RateLimiter(REQUESTS_PER_SECOND), max_retries=MAX_RETRIES
            )
            cache = RecordCache(db)
            await cache.setup()
            yield SyncCoordinator(tokens, client, cache, listing_limit=LISTING_LIMIT)
    finally:
        await db.close()


def format_record(record: GameRecord) -> str:
    return f"[{record.surrogate_id}] {record.name} (igdb {record.remote_id})"


def print_records(records: list[GameRecord]):
    if not records:
        print("No games cached yet. Run 'sync' first.")
        return
    for record in records:
        print(format_record(record))


async def cmd_sync(coordinator: SyncCoordinator, args: list[str]) -> int:
    report = await coordinator.fetch_games()
    print_records(coordinator.games.value)
    print(f"Sync {report.state.value}: {report.stored} stored, {len(report.errors)} errors")
    return 0 if report.stored or not report.errors else 1


async def cmd_list(coordinator: SyncCoordinator, args: list[str]) -> int:
    print_records(coordinator.games.value)
    return 0


async def cmd_watch(coordinator: SyncCoordinator, args: list[str]) -> int:
    with coordinator.games.subscribe() as updates:
        initial = await updates.get()
        print(f"Currently cached: {len(initial)} games")
        report = await coordinator.fetch_games()
        if report.errors and not report.stored:
            return 1
        print_records(await updates.get())
    return 0


async def cmd_details(coordinator: SyncCoordinator, args: list[str]) -> int:
    if not args or not args[0].isdigit():
        print(USAGE)
        return 1

    details = await coordinator.load_enrichment(int(args[0]))
    if details is None:
        print(f"No cached game with id {args[0]}")
        return 1

    record = details.record
    print(format_record(record))
    print(f"Cover: {record.image_url}")
    print(f"Summary: {record.summary}")
    print(f"Description: {record.description}")
    print(f"Trailer: {details.trailer_url or 'none'}")
    print(f"Screenshots ({len(details.screenshots)}):")
    for url in details.screenshots:
        print(f"  {url}")
    return 0


COMMANDS = {
    "sync": cmd_sync,
    "list": cmd_list,
    "watch": cmd_watch,
    "details": cmd_details,
}


async def main(argv: list[str]) -> int:
    if not argv or argv[0] not in COMMANDS:
        print(USAGE)
        return 1

    if argv[0] != "list" and not (IGDB_CLIENT_ID and IGDB_CLIENT_SECRET):
        logger.error("IGDB_CLIENT_ID and IGDB_CLIENT_SECRET must be set")
        return 1

    async with open_catalog() as coordinator:
        return await COMMANDS[argv[0]](coordinator, argv[1:])


def cli():
    setup_logging()
    try:
        sys.exit(asyncio.run(main(sys.argv[1:])))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli()
