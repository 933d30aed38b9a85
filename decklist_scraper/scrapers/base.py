"""
Common contract for decklist sources.

A source knows how to enumerate its event links and how to turn one fetched
page into canonical decklists. Sources differ only in the markup they read.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from urllib.parse import urljoin

from decklist_scraper.models.deck import CanonicalDecklist, CardLine
from decklist_scraper.models.format import Format
from decklist_scraper.scrapers.fetcher import PageFetcher

# Awaited between consecutive requests to the same source
Pause = Callable[[], Awaitable[None]]

DEFAULT_MAX_PAGES = 10


@dataclass(frozen=True, slots=True)
class DiscoveredLink:
    """An event or article link found during discovery."""

    format: Format
    link: str


async def no_pause() -> None:
    """Pause that returns immediately."""
    return None


class DecklistSource(ABC):
    """
    A site that publishes tournament decklists.

    Subclasses set ``name`` and ``base_url`` and implement discovery and
    extraction for their markup.
    """

    name: str
    base_url: str

    def __init__(self, max_pages: int = DEFAULT_MAX_PAGES) -> None:
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")
        self.max_pages = max_pages

    def resolve(self, link: str) -> str:
        """Absolute URL for a link as it appears on the source."""
        return urljoin(self.base_url, link)

    @abstractmethod
    async def discover(
        self, fetcher: PageFetcher, pause: Pause = no_pause
    ) -> list[DiscoveredLink]:
        """
        Enumerate candidate links with their formats, in source order.

        Raises:
            ScraperError: If a listing page cannot be fetched or read
        """

    @abstractmethod
    def extract(self, html: str, deck_format: Format) -> list[CanonicalDecklist]:
        """
        Turn one fetched page into decklists.

        Raises:
            NotFoundError: If the page says it has no results
            ParseError: If required structure is missing
        """

    async def collect(
        self,
        fetcher: PageFetcher,
        link: str,
        deck_format: Format,
        pause: Pause = no_pause,
    ) -> list[CanonicalDecklist]:
        """Fetch a discovered link and extract its decklists."""
        html = await fetcher.fetch(self.resolve(link))
        return self.extract(html, deck_format)


def dedupe_links(links: Iterable[DiscoveredLink]) -> list[DiscoveredLink]:
    """Drop repeated links, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[DiscoveredLink] = []
    for discovered in links:
        if discovered.link in seen:
            continue
        seen.add(discovered.link)
        unique.append(discovered)
    return unique


def clean_text(text: str | None) -> str | None:
    """Collapse whitespace; empty text becomes None."""
    if text is None:
        return None
    cleaned = " ".join(text.split())
    return cleaned or None


def parse_count(text: str | None) -> int | None:
    """Parse a positive card quantity, None if the text is not one."""
    cleaned = clean_text(text)
    if cleaned is None or not (cleaned.isascii() and cleaned.isdigit()):
        return None
    count = int(cleaned)
    return count if count >= 1 else None


def make_card_line(count: int | None, name: str | None) -> CardLine | None:
    """Build a card line, or None when the count or name is unusable."""
    cleaned = clean_text(name)
    if count is None or count < 1 or cleaned is None:
        return None
    return CardLine(count=count, name=cleaned)
