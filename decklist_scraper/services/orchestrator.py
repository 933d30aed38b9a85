"""
Crawl orchestration.

Drives one run for a source: discover links, skip the ones already ingested,
fetch and extract the rest, persist their decklists and record each outcome.

Per link:
- Discovered -> Skipped when crawl state shows an earlier success
- Discovered -> Fetching -> FetchFailed | ParseFailed | PersistFailed | Succeeded

Every failure is recorded against the link with its message and the run
moves on; only a failed discovery ends the run.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from decklist_scraper.db.crawl_state import CrawlStateStore
from decklist_scraper.db.operations import DecklistStore
from decklist_scraper.models.deck import CanonicalDecklist
from decklist_scraper.models.errors import (
    HttpError,
    NetworkError,
    PersistenceError,
    ScraperError,
)
from decklist_scraper.models.format import Format
from decklist_scraper.scrapers.base import DecklistSource
from decklist_scraper.scrapers.fetcher import PageFetcher

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 1.0


class LinkOutcome(str, Enum):
    """Terminal state of one link within a run."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FETCH_FAILED = "fetch_failed"
    PARSE_FAILED = "parse_failed"
    PERSIST_FAILED = "persist_failed"


@dataclass
class RunSummary:
    """Counts for one source's run."""

    source: str
    discovered: int = 0
    decks_inserted: int = 0
    outcomes: Counter[LinkOutcome] = field(default_factory=Counter)

    def count(self, outcome: LinkOutcome) -> int:
        """Number of links that ended in ``outcome``."""
        return self.outcomes[outcome]

    @property
    def failed(self) -> int:
        """Links that ended in any failure state."""
        return sum(
            count for outcome, count in self.outcomes.items() if outcome.value.endswith("_failed")
        )


class Orchestrator:
    """
    Runs crawls against decklist sources.

    Args:
        session_factory: Creates the sessions used for crawl state and decklists
        fetcher: Shared page fetcher
        delay: Seconds to wait before each request made for a link
        sleep: Awaitable sleep, replaceable in tests
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        fetcher: PageFetcher,
        *,
        delay: float = DEFAULT_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self._session_factory = session_factory
        self._fetcher = fetcher
        self._delay = delay
        self._sleep = sleep

    async def pause(self) -> None:
        """Wait the politeness delay."""
        if self._delay > 0:
            await self._sleep(self._delay)

    async def run(self, source: DecklistSource) -> RunSummary:
        """
        Crawl every link the source currently lists.

        Each link is attempted at most once per run.

        Raises:
            ScraperError: If discovery fails
        """
        links = await source.discover(self._fetcher, self.pause)
        summary = RunSummary(source=source.name, discovered=len(links))
        logger.info("Found %d links for %s", len(links), source.name)

        attempted: set[str] = set()
        for index, discovered in enumerate(links):
            if discovered.link in attempted:
                continue
            attempted.add(discovered.link)

            logger.info(
                "[%d/%d] %s: %s", index + 1, len(links), discovered.format, discovered.link
            )
            outcome, decks = await self._process(source, discovered.format, discovered.link)
            summary.outcomes[outcome] += 1
            summary.decks_inserted += decks

        logger.info(
            "Run for %s complete: %d succeeded, %d skipped, %d failed, %d decks inserted",
            source.name,
            summary.count(LinkOutcome.SUCCEEDED),
            summary.count(LinkOutcome.SKIPPED),
            summary.failed,
            summary.decks_inserted,
        )
        return summary

    async def process_link(
        self, source: DecklistSource, deck_format: Format, link: str
    ) -> LinkOutcome:
        """Take one link through skip-check, fetch, extract and persist."""
        outcome, _ = await self._process(source, deck_format, link)
        return outcome

    async def _process(
        self, source: DecklistSource, deck_format: Format, link: str
    ) -> tuple[LinkOutcome, int]:
        try:
            async with self._session_factory() as session:
                done = await CrawlStateStore(session).is_done(link)
        except PersistenceError as e:
            logger.error("Failed to read crawl state for %s: %s", link, e)
            return LinkOutcome.PERSIST_FAILED, 0

        if done:
            logger.info("Already successfully scraped, skipping %s", link)
            return LinkOutcome.SKIPPED, 0

        await self.pause()

        try:
            decklists = await source.collect(self._fetcher, link, deck_format, self.pause)
        except (NetworkError, HttpError) as e:
            logger.error("Failed to fetch %s: %s", link, e)
            await self._record_failure(link, e)
            return LinkOutcome.FETCH_FAILED, 0
        except ScraperError as e:
            logger.error("Failed to scrape decklists from %s: %s", link, e)
            await self._record_failure(link, e)
            return LinkOutcome.PARSE_FAILED, 0
        except Exception as e:
            logger.exception("Unexpected error scraping %s", link)
            await self._record_failure(link, e)
            return LinkOutcome.PARSE_FAILED, 0

        try:
            await self._persist(link, decklists)
        except PersistenceError as e:
            logger.error("Failed to persist decklists from %s: %s", link, e)
            await self._record_failure(link, e)
            return LinkOutcome.PERSIST_FAILED, 0

        logger.info("Inserted %d decklists from %s", len(decklists), link)
        return LinkOutcome.SUCCEEDED, len(decklists)

    async def _persist(self, link: str, decklists: list[CanonicalDecklist]) -> None:
        """Write all decklists and the success record in one transaction."""
        async with self._session_factory() as session:
            try:
                store = DecklistStore(session)
                for decklist in decklists:
                    await store.insert_decklist(decklist)
                await CrawlStateStore(session).record(link, success=True)
                await session.commit()
            except PersistenceError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError(f"Failed to commit decklists for {link}: {e}") from e

    async def _record_failure(self, link: str, error: BaseException) -> None:
        message = f"{type(error).__name__}: {error}"
        try:
            async with self._session_factory() as session:
                await CrawlStateStore(session).record(link, success=False, error=message)
                await session.commit()
        except (PersistenceError, SQLAlchemyError) as e:
            # Left unrecorded, the link is simply retried next run
            logger.error("Failed to record failure for %s: %s", link, e)
