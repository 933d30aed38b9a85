import json
from datetime import date
from pathlib import Path

import httpx
import pytest
import respx

from decklist_scraper.models.errors import HttpError, NotFoundError, ParseError
from decklist_scraper.models.format import Format
from decklist_scraper.scrapers.fetcher import PageFetcher
from decklist_scraper.scrapers.wizards import (
    WizardsSource,
    parse_listing,
    parse_listing_fragment,
)


@pytest.fixture
def article_html(fixtures_dir: Path) -> str:
    return (fixtures_dir / "wizards_article.html").read_text()


@pytest.fixture
def partial_html(fixtures_dir: Path) -> str:
    return (fixtures_dir / "wizards_partial.html").read_text()


@pytest.fixture
def listing_payload(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "wizards_listing.json").read_text())


@pytest.fixture
def source() -> WizardsSource:
    return WizardsSource(max_pages=3)


class TestParseListing:
    def test_parses_links_and_formats(self, listing_payload: dict) -> None:
        """Each teaser yields its article link and title format."""
        links = parse_listing(listing_payload)

        assert [(link.format, link.link) for link in links] == [
            (Format.MODERN, "/en/articles/archive/mtgo-standings/modern-challenge-2022-03-05"),
            (Format.PAUPER, "/en/articles/archive/mtgo-standings/pauper-league-2022-03-04"),
            (Format.UNKNOWN, "/en/articles/archive/mtgo-standings/arena-open"),
        ]

    def test_skips_fragment_without_link(self) -> None:
        fragment = (
            '<div class="article-item-extended">'
            '<div class="title"><h3>Legacy</h3></div></div>'
        )

        assert parse_listing_fragment(fragment) is None

    def test_missing_data_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_listing({"status": 0})

    def test_empty_data_returns_empty_list(self) -> None:
        assert parse_listing({"data": []}) == []


class TestExtract:
    def test_one_decklist_per_deck_group(self, source: WizardsSource, article_html: str) -> None:
        decklists = source.extract(article_html, Format.MODERN)

        assert len(decklists) == 2

    def test_parses_cards(self, source: WizardsSource, article_html: str) -> None:
        deck_a, deck_b = source.extract(article_html, Format.MODERN)

        assert [(line.count, line.name) for line in deck_a.mainboard] == [
            (4, "Lightning Bolt"),
            (2, "Mountain"),
        ]
        assert deck_a.sideboard == []
        assert [(line.count, line.name) for line in deck_b.mainboard] == [(1, "Mountain")]
        assert [(line.count, line.name) for line in deck_b.sideboard] == [(1, "Lightning Bolt")]

    def test_parses_metadata(self, source: WizardsSource, article_html: str) -> None:
        deck_a, deck_b = source.extract(article_html, Format.MODERN)

        assert deck_a.player == "Alice"
        assert deck_a.event == "Modern Challenge (5-0)"
        assert deck_b.player == "Bob"
        assert deck_a.format is Format.MODERN
        assert deck_a.date == date(2022, 3, 3)
        assert deck_b.date == date(2022, 3, 3)

    def test_skips_malformed_rows(self, source: WizardsSource, partial_html: str) -> None:
        """One row without a count is dropped; the other nine survive."""
        (decklist,) = source.extract(partial_html, Format.PAUPER)

        assert len(decklist.mainboard) + len(decklist.sideboard) == 9
        assert "Rift Bolt" not in decklist.card_names()
        assert decklist.mainboard_count() == 36

    def test_no_results_page_raises_not_found(self, source: WizardsSource) -> None:
        html = "<html><body><p>Sorry, no result found.</p></body></html>"

        with pytest.raises(NotFoundError):
            source.extract(html, Format.MODERN)

    def test_page_without_decks_raises_parse_error(self, source: WizardsSource) -> None:
        with pytest.raises(ParseError):
            source.extract("<html><body><p>Coverage</p></body></html>", Format.MODERN)

    def test_deck_without_mainboard_raises_parse_error(self, source: WizardsSource) -> None:
        html = '<div class="deck-group"><div class="deck-meta"><h4>Alice</h4></div></div>'

        with pytest.raises(ParseError):
            source.extract(html, Format.MODERN)

    def test_unparsable_date_is_none(self, source: WizardsSource) -> None:
        html = (
            '<p class="posted-in">posted in Decklists on someday</p>'
            '<div class="deck-group"><div class="sorted-by-overview-container">'
            '<div class="row"><span class="card-count">1</span>'
            '<span class="card-name">Island</span></div></div></div>'
        )

        (decklist,) = source.extract(html, Format.LEGACY)

        assert decklist.date is None
        assert decklist.player is None


class TestDiscover:
    @respx.mock
    async def test_stops_on_empty_page(self, source: WizardsSource, listing_payload: dict) -> None:
        """Discovery ends at the first page with no new links."""
        first = respx.get(source.listing_url(0)).mock(
            return_value=httpx.Response(200, json=listing_payload)
        )
        second = respx.get(source.listing_url(10)).mock(
            return_value=httpx.Response(200, json={"data": []})
        )
        pauses: list[None] = []

        async def pause() -> None:
            pauses.append(None)

        async with PageFetcher() as fetcher:
            links = await source.discover(fetcher, pause)

        assert len(links) == 3
        assert first.called
        assert second.called
        assert len(pauses) == 1

    @respx.mock
    async def test_page_cap_bounds_repeating_pagination(self, source: WizardsSource) -> None:
        """A source that keeps returning new links stops at max_pages."""
        calls = 0

        def respond(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            fragment = (
                f'<div class="article-item-extended"><a href="/a/{calls}">'
                f'<div class="title"><h3>Modern {calls}</h3></div></a></div>'
            )
            return httpx.Response(200, json={"data": [fragment]})

        respx.get(url__startswith="https://magic.wizards.com/en/section-articles").mock(
            side_effect=respond
        )

        async with PageFetcher() as fetcher:
            links = await source.discover(fetcher)

        assert calls == 3
        assert len(links) == 3

    @respx.mock
    async def test_fetch_failure_propagates(self, source: WizardsSource) -> None:
        respx.get(source.listing_url(0)).mock(return_value=httpx.Response(500))

        async with PageFetcher() as fetcher:
            with pytest.raises(HttpError, match="HTTP 500"):
                await source.discover(fetcher)
