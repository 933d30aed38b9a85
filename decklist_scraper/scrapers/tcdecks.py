"""
tcdecks.net decklist scraper.

Discovery pages through the event list of each supported format. An event
page links to one page per deck; each deck page is a table with the player,
archetype, position, deck name and three card columns (two mainboard, one
sideboard).

Note: Web scraping is inherently fragile. Page structure may change.
"""

import logging
import re
from datetime import date, datetime

from bs4 import BeautifulSoup, Tag

from decklist_scraper.models.deck import CanonicalDecklist, CardLine
from decklist_scraper.models.errors import NotFoundError, ParseError
from decklist_scraper.models.format import Format
from decklist_scraper.scrapers.base import (
    DEFAULT_MAX_PAGES,
    DecklistSource,
    DiscoveredLink,
    Pause,
    clean_text,
    dedupe_links,
    make_card_line,
    no_pause,
    parse_count,
)
from decklist_scraper.scrapers.fetcher import PageFetcher

logger = logging.getLogger(__name__)

TCDECKS_BASE = "https://www.tcdecks.net"
DECKLISTS_ENDPOINT = "/format.php?format={label}&page={page}"

# Format labels as the site spells them, with the format each maps to
FORMATS: tuple[tuple[str, Format], ...] = (
    ("Premodern", Format.PREMODERN),
    ("Vintage", Format.VINTAGE),
    ("Vintage Old School", Format.OLD_SCHOOL),
    ("Legacy", Format.LEGACY),
    ("Modern", Format.MODERN),
    ("Pauper", Format.PAUPER),
)

DECK_LINK_PREFIX = "deck.php"

# Example: "Premodern Tournament | 24 Players | Date: 05/03/2022"
_DATE_PATTERN = re.compile(r"Date:\s*(\d{1,2}/\d{1,2}/\d{4})")


class TCDecksSource(DecklistSource):
    """Event decklists published on tcdecks.net."""

    name = "tcdecks"
    base_url = TCDECKS_BASE

    def __init__(
        self,
        max_pages: int = DEFAULT_MAX_PAGES,
        formats: tuple[tuple[str, Format], ...] = FORMATS,
    ) -> None:
        super().__init__(max_pages=max_pages)
        self.formats = formats

    def listing_url(self, label: str, page: int) -> str:
        """URL of one page of a format's event list."""
        return self.resolve(DECKLISTS_ENDPOINT.format(label=label, page=page))

    async def discover(
        self, fetcher: PageFetcher, pause: Pause = no_pause
    ) -> list[DiscoveredLink]:
        links: list[DiscoveredLink] = []
        requested = False

        for label, deck_format in self.formats:
            seen: set[str] = set()

            for page in range(1, self.max_pages + 1):
                if requested:
                    await pause()
                requested = True

                html = await fetcher.fetch(self.listing_url(label, page))
                page_links = parse_deck_links(html, deck_format)
                new_links = [link for link in page_links if link.link not in seen]

                logger.info(
                    "[%s/%d] Scanning event links, %d new, total %d",
                    label,
                    page,
                    len(new_links),
                    len(links) + len(new_links),
                )

                if not new_links:
                    break

                seen.update(link.link for link in new_links)
                links.extend(new_links)
            else:
                logger.warning("Stopped %s discovery at the %d page limit", label, self.max_pages)

        return dedupe_links(links)

    async def collect(
        self,
        fetcher: PageFetcher,
        link: str,
        deck_format: Format,
        pause: Pause = no_pause,
    ) -> list[CanonicalDecklist]:
        """
        Fetch an event page and every deck page it links to.

        Raises:
            NotFoundError: If the event page links to no decks
        """
        event_html = await fetcher.fetch(self.resolve(link))
        deck_links = parse_deck_links(event_html, deck_format)
        if not deck_links:
            raise NotFoundError("decklists not found")

        decklists: list[CanonicalDecklist] = []
        for index, deck_link in enumerate(deck_links):
            logger.info(
                "[Event %s, deck %d/%d] %s: %s",
                link,
                index + 1,
                len(deck_links),
                deck_format,
                deck_link.link,
            )
            await pause()
            deck_html = await fetcher.fetch(self.resolve(deck_link.link))
            decklists.extend(self.extract(deck_html, deck_format))

        return decklists

    def extract(self, html: str, deck_format: Format) -> list[CanonicalDecklist]:
        """Parse a single deck page."""
        soup = BeautifulSoup(html, "html.parser")

        legend = soup.find("legend")
        if not isinstance(legend, Tag):
            raise ParseError("no event legend")
        event, event_date = parse_legend(legend)

        table = soup.find("table")
        if not isinstance(table, Tag):
            raise ParseError("no decklist table")
        rows = table.find_all("tr")

        if not rows:
            raise ParseError("no table rows")
        headers = rows[0].find_all("th")
        if not headers:
            raise ParseError("no name header")

        player, separator, archetype = headers[0].get_text().partition(" playing ")
        if not separator:
            raise ParseError("no archetype")

        if len(headers) < 2:
            raise ParseError("no position header")
        position = _strip_label(headers[1].get_text(), "Position:")
        if position is None:
            raise ParseError("no position")

        deck_name_header = rows[1].find("th") if len(rows) > 1 else None
        if not isinstance(deck_name_header, Tag):
            raise ParseError("no deck name header")
        deck_name = _strip_label(deck_name_header.get_text(), "Deck Name:")
        if deck_name is None:
            raise ParseError("no deck name")

        cells = rows[2].find_all("td") if len(rows) > 2 else []
        if len(cells) < 3:
            raise ParseError("no cards")

        return [
            CanonicalDecklist(
                format=deck_format,
                player=clean_text(player),
                event=event,
                archetype=clean_text(archetype),
                result=position,
                name=deck_name,
                date=event_date,
                mainboard=parse_cards(cells[0]) + parse_cards(cells[1]),
                sideboard=parse_cards(cells[2]),
            )
        ]


def parse_deck_links(html: str, deck_format: Format) -> list[DiscoveredLink]:
    """
    Parse ``deck.php`` links from a ``.tourney_list`` table.

    Used for both format listings (links to events) and event pages (links
    to decks). A page without the table yields no links.
    """
    soup = BeautifulSoup(html, "html.parser")

    tourney_list = soup.select_one(".tourney_list")
    if tourney_list is None:
        return []

    links: list[DiscoveredLink] = []
    for cell in tourney_list.select(".principal"):
        anchor = cell.find("a", href=True)
        if not isinstance(anchor, Tag):
            continue
        href = str(anchor["href"]).strip()
        if href.startswith(DECK_LINK_PREFIX):
            links.append(DiscoveredLink(format=deck_format, link=href))

    return dedupe_links(links)


def parse_legend(legend: Tag) -> tuple[str | None, date | None]:
    """
    Read the event name and date from a deck page's legend.

    The first element inside the legend is the event title; the date appears
    as ``Date: dd/mm/yyyy`` somewhere in the remaining text.
    """
    title = legend.find(True)
    if isinstance(title, Tag):
        event = clean_text(title.get_text())
    else:
        event = clean_text(legend.get_text().split("|")[0])

    event_date = None
    match = _DATE_PATTERN.search(legend.get_text(" "))
    if match:
        try:
            event_date = datetime.strptime(match.group(1), "%d/%m/%Y").date()
        except ValueError:
            event_date = None

    return event, event_date


def parse_cards(cell: Tag) -> list[CardLine]:
    """
    Parse a card column.

    Children alternate between an amount (plain text) and an ``<a>`` with the
    card name; ``<h6>`` section headings are ignored. Any other node that is
    not a number, whitespace included, resets the amount to 1. Anchors with
    no name are skipped.
    """
    lines: list[CardLine] = []
    amount = 1

    for node in cell.children:
        if isinstance(node, Tag):
            if node.name == "h6":
                continue
            if node.name == "a":
                line = make_card_line(amount, node.get_text())
                if line is not None:
                    lines.append(line)
                continue
            text = node.get_text()
        else:
            text = str(node)

        amount = parse_count(text) or 1

    return lines


def _strip_label(text: str, label: str) -> str | None:
    cleaned = clean_text(text)
    if cleaned is None or not cleaned.startswith(label):
        return None
    return clean_text(cleaned[len(label) :])
