"""
magic.wizards.com decklist scraper.

Discovery reads the paginated "see more" endpoint, which answers with a JSON
envelope of HTML fragments, one per article. Each article page holds one
``.deck-group`` per published decklist.

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

WIZARDS_BASE = "https://magic.wizards.com"
DECKLISTS_ENDPOINT = (
    "/en/section-articles-see-more-ajax?dateoff=&l=en&f=9041&search-result-theme="
    "&limit={limit}&fromDate=&toDate=&sort=DESC&word=&offset={offset}"
)
PAGE_SIZE = 10

NO_RESULTS_MARKER = "no result found"

# Example: "posted in Event Coverage on March 3, 2022"
_POSTED_DATE_PATTERN = re.compile(r"\bon\s+([A-Za-z]+\s+\d{1,2},\s+\d{4})")


class WizardsSource(DecklistSource):
    """Decklist articles published on magic.wizards.com."""

    name = "wizards"
    base_url = WIZARDS_BASE

    def listing_url(self, offset: int) -> str:
        """URL of the article listing starting at ``offset``."""
        return self.resolve(DECKLISTS_ENDPOINT.format(limit=PAGE_SIZE, offset=offset))

    async def discover(
        self, fetcher: PageFetcher, pause: Pause = no_pause
    ) -> list[DiscoveredLink]:
        links: list[DiscoveredLink] = []
        seen: set[str] = set()

        for page in range(self.max_pages):
            if page:
                await pause()

            payload = await fetcher.fetch_json(self.listing_url(page * PAGE_SIZE))
            page_links = parse_listing(payload)
            new_links = [link for link in page_links if link.link not in seen]

            logger.info(
                "[%s/%d] Found %d new links, total %d",
                self.name,
                page + 1,
                len(new_links),
                len(links) + len(new_links),
            )

            if not new_links:
                break

            seen.update(link.link for link in new_links)
            links.extend(new_links)
        else:
            logger.warning("Stopped %s discovery at the %d page limit", self.name, self.max_pages)

        return dedupe_links(links)

    def extract(self, html: str, deck_format: Format) -> list[CanonicalDecklist]:
        if NO_RESULTS_MARKER in html.lower():
            raise NotFoundError("article is not found")

        soup = BeautifulSoup(html, "html.parser")

        groups = soup.select(".deck-group")
        if not groups:
            raise ParseError("No deck groups found on article page")

        posted = parse_posted_date(soup)
        return [_parse_deck_group(group, deck_format, posted) for group in groups]


def parse_listing(payload: object) -> list[DiscoveredLink]:
    """
    Parse article links from the listing endpoint's JSON envelope.

    The envelope looks like ``{"data": ["<div ...>", ...], ...}``. Fragments
    without a link or a title are skipped.

    Raises:
        ParseError: If the envelope has no ``data`` list
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise ParseError("Listing response has no data array")

    links: list[DiscoveredLink] = []
    for fragment in payload["data"]:
        if not isinstance(fragment, str):
            continue
        discovered = parse_listing_fragment(fragment)
        if discovered is not None:
            links.append(discovered)
    return links


def parse_listing_fragment(fragment: str) -> DiscoveredLink | None:
    """
    Parse one article teaser into a link and its format.

    The format is the first word of the article title, e.g. "Modern Challenge
    2022-03-05" -> Format.MODERN.
    """
    soup = BeautifulSoup(fragment, "html.parser")

    container = soup.select_one(".article-item-extended")
    anchor = container.find("a", href=True) if container is not None else None
    title = soup.select_one(".title h3")

    if not isinstance(anchor, Tag) or title is None:
        return None

    href = str(anchor["href"]).strip()
    words = title.get_text().split()
    if not href or not words:
        return None

    return DiscoveredLink(format=Format.classify(words[0]), link=href)


def parse_posted_date(soup: BeautifulSoup) -> date | None:
    """Publication date from the ``.posted-in`` byline, None if unparsable."""
    posted_in = soup.select_one(".posted-in")
    if posted_in is None:
        return None

    match = _POSTED_DATE_PATTERN.search(posted_in.get_text(" ", strip=True))
    if not match:
        return None

    try:
        return datetime.strptime(" ".join(match.group(1).split()), "%B %d, %Y").date()
    except ValueError:
        return None


def parse_card_row(row: Tag) -> CardLine | None:
    """
    Parse a ``.row`` element holding ``.card-count`` and ``.card-name``.

    Returns None for rows missing either part or with an unreadable count.
    """
    count_tag = row.select_one(".card-count")
    name_tag = row.select_one(".card-name")
    if count_tag is None or name_tag is None:
        return None

    anchor = name_tag.find("a")
    name = anchor.get_text() if isinstance(anchor, Tag) else name_tag.get_text()
    return make_card_line(parse_count(count_tag.get_text()), name)


def _parse_card_rows(container: Tag | None) -> list[CardLine]:
    if container is None:
        return []

    lines: list[CardLine] = []
    for row in container.select(".row"):
        line = parse_card_row(row)
        if line is None:
            logger.debug("Skipping malformed card row: %s", row.get_text(" ", strip=True))
            continue
        lines.append(line)
    return lines


def _parse_deck_group(
    group: Tag, deck_format: Format, posted: date | None
) -> CanonicalDecklist:
    mainboard_container = group.select_one(".sorted-by-overview-container")
    if mainboard_container is None:
        raise ParseError("Deck group has no mainboard container")

    meta = group.select_one(".deck-meta")
    player_tag = meta.find("h4") if meta is not None else None
    event_tag = meta.find("h5") if meta is not None else None

    return CanonicalDecklist(
        format=deck_format,
        player=clean_text(player_tag.get_text()) if isinstance(player_tag, Tag) else None,
        event=clean_text(event_tag.get_text()) if isinstance(event_tag, Tag) else None,
        date=posted,
        mainboard=_parse_card_rows(mainboard_container),
        sideboard=_parse_card_rows(group.select_one(".sorted-by-sideboard-container")),
    )
