"""
Crawl state persistence.

One row per attempted link records whether ingesting it succeeded. A link
with a successful row is never attempted again; failed rows are retried on
the next run and overwritten with the new outcome.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from decklist_scraper.db._dialect import upsert_insert
from decklist_scraper.models.db import ScrapedLinkDB
from decklist_scraper.models.errors import PersistenceError


class CrawlStateStore:
    """Reads and writes crawl outcomes through the given session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, link: str) -> ScrapedLinkDB | None:
        """
        Get the stored outcome for a link.

        Returns None if the link was never attempted.
        """
        try:
            result = await self._session.execute(
                select(ScrapedLinkDB)
                .where(ScrapedLinkDB.link == link)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read crawl state for {link}: {e}") from e
        return result.scalar_one_or_none()

    async def is_done(self, link: str) -> bool:
        """True if the link has already been ingested successfully."""
        scraped = await self.find(link)
        return scraped is not None and scraped.is_success

    async def record(self, link: str, success: bool, error: str | None = None) -> None:
        """
        Record the outcome of attempting a link.

        Inserts a new row, or overwrites a previous failure. A row already
        marked successful is left unchanged.

        Raises:
            PersistenceError: If the write fails
        """
        stmt = upsert_insert(self._session, ScrapedLinkDB).values(
            link=link,
            is_success=success,
            error_msg=error,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["link"],
            set_={
                "is_success": stmt.excluded.is_success,
                "error_msg": stmt.excluded.error_msg,
            },
            where=ScrapedLinkDB.is_success.is_not(True),
        )

        try:
            await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to record crawl state for {link}: {e}") from e

    async def list_failed(self) -> list[ScrapedLinkDB]:
        """Get all links whose last attempt failed, oldest first."""
        result = await self._session.execute(
            select(ScrapedLinkDB)
            .where(ScrapedLinkDB.is_success.is_not(True))
            .order_by(ScrapedLinkDB.created_at, ScrapedLinkDB.id)
        )
        return list(result.scalars().all())
