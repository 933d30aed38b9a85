"""
Sync the Scryfall card catalog into the cards table.

Downloads the oracle-cards bulk file and upserts every card by name. Cards
already referenced by decklists keep their ids; only catalog columns change.
"""

import argparse
import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from decklist_scraper.config import Settings, settings
from decklist_scraper.db.database import create_engine, create_session_factory, init_db
from decklist_scraper.db.operations import DecklistStore
from decklist_scraper.models.card import CardCatalogEntry
from decklist_scraper.models.errors import PersistenceError
from decklist_scraper.parsers.scryfall import download_bulk_data, iter_catalog_entries

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_BULK_PATH = DATA_DIR / "oracle-cards.json"

BATCH_SIZE = 1000


async def sync_entries(
    session_factory: async_sessionmaker[AsyncSession],
    entries: Iterable[CardCatalogEntry],
    batch_size: int = BATCH_SIZE,
) -> int:
    """
    Upsert catalog entries, committing every ``batch_size`` cards.

    An entry that fails to upsert is logged and skipped; the rest of its
    batch is replayed so only the bad entry is lost.

    Returns:
        Number of entries synced
    """
    synced = 0
    pending: list[CardCatalogEntry] = []

    async with session_factory() as session:
        store = DecklistStore(session)

        for entry in entries:
            try:
                await store.upsert_catalog_entry(entry)
            except PersistenceError as e:
                logger.error("Failed to upsert card: %s", e)
                await session.rollback()
                for replay in pending:
                    await store.upsert_catalog_entry(replay)
                continue

            pending.append(entry)
            if len(pending) >= batch_size:
                await session.commit()
                synced += len(pending)
                pending.clear()
                logger.info("Updated %d cards...", synced)

        await session.commit()
        synced += len(pending)

    return synced


async def run_catalog_sync(
    bulk_path: Path | None = None,
    config: Settings = settings,
) -> int:
    """
    Download (unless a file is given) and sync the card catalog.

    Args:
        bulk_path: Existing bulk JSON file. If None, downloads a fresh one.
        config: Settings for the database

    Returns:
        Number of cards synced
    """
    if bulk_path is None:
        logger.info("Fetching cards...")
        bulk_path = await asyncio.to_thread(download_bulk_data, DEFAULT_BULK_PATH)
        logger.info("Downloaded card catalog to %s", bulk_path)

    engine = create_engine(config.database_url, echo=config.debug)
    try:
        await init_db(engine)
        session_factory = create_session_factory(engine)
        count = await sync_entries(session_factory, iter_catalog_entries(bulk_path))
    finally:
        await engine.dispose()

    logger.info("Catalog sync complete. Total cards synced: %d", count)
    return count


def main() -> None:
    """CLI entry point for the catalog sync."""
    parser = argparse.ArgumentParser(description="Sync the Scryfall card catalog")
    parser.add_argument(
        "--bulk-file",
        type=Path,
        default=None,
        help="Use an already downloaded bulk JSON file",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(run_catalog_sync(args.bulk_file))
    except Exception as e:
        logger.error("Failed to sync card catalog: %s", e)
        raise


if __name__ == "__main__":
    main()
