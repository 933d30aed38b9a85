"""
Crawl job for tournament decklists.

Runs the orchestrator over each configured source and stores new decklists.
Safe to re-run: links ingested by earlier runs are skipped and failed ones
are retried.
"""

import argparse
import asyncio
import logging

from decklist_scraper.config import Settings, settings
from decklist_scraper.db.database import create_engine, create_session_factory, init_db
from decklist_scraper.models.errors import ScraperError
from decklist_scraper.scrapers.base import DecklistSource
from decklist_scraper.scrapers.fetcher import PageFetcher
from decklist_scraper.scrapers.registry import SOURCES, get_source
from decklist_scraper.services.orchestrator import Orchestrator, RunSummary

logger = logging.getLogger(__name__)


async def scrape_source(orchestrator: Orchestrator, source: DecklistSource) -> RunSummary | None:
    """
    Run one source.

    Returns:
        The run summary, or None if discovery failed
    """
    logger.info("Discovering decklists on %s...", source.name)

    try:
        return await orchestrator.run(source)
    except ScraperError as e:
        logger.error("Failed to discover links for %s: %s", source.name, e)
        return None


async def run_scrape(
    sources: list[str] | None = None,
    config: Settings = settings,
) -> dict[str, RunSummary]:
    """
    Crawl all or the given sources.

    Args:
        sources: Source identifiers to crawl. If None, crawls every source.
        config: Settings for the database, timeouts and pacing

    Returns:
        Dict mapping source name to its run summary. Sources whose
        discovery failed are absent.
    """
    if sources is None:
        sources = list(SOURCES)

    results: dict[str, RunSummary] = {}

    engine = create_engine(config.database_url, echo=config.debug)
    try:
        await init_db(engine)
        session_factory = create_session_factory(engine)

        async with PageFetcher(
            timeout=config.request_timeout,
            user_agent=config.user_agent,
        ) as fetcher:
            orchestrator = Orchestrator(session_factory, fetcher, delay=config.politeness_delay)

            for name in sources:
                if name not in SOURCES:
                    logger.warning("Skipping unknown source: %s", name)
                    continue

                source = get_source(name, max_pages=config.max_discovery_pages)
                summary = await scrape_source(orchestrator, source)
                if summary is not None:
                    results[name] = summary
    finally:
        await engine.dispose()

    total = sum(summary.decks_inserted for summary in results.values())
    logger.info("Scrape complete. Total decks inserted: %d", total)
    return results


def main() -> None:
    """CLI entry point for a crawl run."""
    parser = argparse.ArgumentParser(description="Scrape tournament decklists")
    parser.add_argument(
        "--source",
        action="append",
        choices=sorted(SOURCES),
        help="Source to crawl (repeatable, default: all)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_scrape(args.source))


if __name__ == "__main__":
    main()
