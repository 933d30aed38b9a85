"""Tests for crawl state persistence."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from decklist_scraper.db.crawl_state import CrawlStateStore
from decklist_scraper.models.db import ScrapedLinkDB


async def count_rows(session: AsyncSession, link: str) -> int:
    result = await session.execute(
        select(func.count()).select_from(ScrapedLinkDB).where(ScrapedLinkDB.link == link)
    )
    return int(result.scalar_one())


class TestFind:
    async def test_never_attempted(self, session: AsyncSession) -> None:
        """Unknown links have no stored outcome."""
        store = CrawlStateStore(session)

        assert await store.find("deck.php?id=1") is None
        assert await store.is_done("deck.php?id=1") is False

    async def test_finds_recorded_success(self, session: AsyncSession) -> None:
        store = CrawlStateStore(session)
        await store.record("deck.php?id=1", success=True)
        await session.commit()

        scraped = await store.find("deck.php?id=1")

        assert scraped is not None
        assert scraped.is_success is True
        assert scraped.error_msg is None
        assert scraped.created_at is not None
        assert await store.is_done("deck.php?id=1") is True


class TestRecord:
    async def test_records_failure_with_message(self, session: AsyncSession) -> None:
        store = CrawlStateStore(session)
        await store.record("deck.php?id=2", success=False, error="ParseError: no cards")
        await session.commit()

        scraped = await store.find("deck.php?id=2")

        assert scraped is not None
        assert scraped.is_success is False
        assert scraped.error_msg == "ParseError: no cards"
        assert await store.is_done("deck.php?id=2") is False

    async def test_failure_then_success_overwrites(self, session: AsyncSession) -> None:
        """A retried link that now succeeds replaces its failed row."""
        store = CrawlStateStore(session)
        await store.record("deck.php?id=3", success=False, error="HttpError: HTTP 500")
        await session.commit()

        await store.record("deck.php?id=3", success=True)
        await session.commit()

        scraped = await store.find("deck.php?id=3")
        assert scraped is not None
        assert scraped.is_success is True
        assert scraped.error_msg is None
        assert await count_rows(session, "deck.php?id=3") == 1

    async def test_success_is_terminal(self, session: AsyncSession) -> None:
        """A later failure never downgrades a successful link."""
        store = CrawlStateStore(session)
        await store.record("deck.php?id=4", success=True)
        await session.commit()

        await store.record("deck.php?id=4", success=False, error="NetworkError: timeout")
        await session.commit()

        scraped = await store.find("deck.php?id=4")
        assert scraped is not None
        assert scraped.is_success is True
        assert scraped.error_msg is None
        assert await count_rows(session, "deck.php?id=4") == 1


class TestListFailed:
    async def test_lists_only_failures(self, session: AsyncSession) -> None:
        store = CrawlStateStore(session)
        await store.record("ok", success=True)
        await store.record("bad-1", success=False, error="boom")
        await store.record("bad-2", success=False, error="boom")
        await session.commit()

        failed = await store.list_failed()

        assert [row.link for row in failed] == ["bad-1", "bad-2"]
