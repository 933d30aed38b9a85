"""Lookup of decklist sources by identifier."""

from typing import Any

from decklist_scraper.scrapers.base import DecklistSource
from decklist_scraper.scrapers.tcdecks import TCDecksSource
from decklist_scraper.scrapers.wizards import WizardsSource

SOURCES: dict[str, type[DecklistSource]] = {
    WizardsSource.name: WizardsSource,
    TCDecksSource.name: TCDecksSource,
}


def get_source(name: str, **options: Any) -> DecklistSource:
    """
    Create the source registered under ``name``.

    Raises:
        ValueError: If no source has that name
    """
    try:
        source_cls = SOURCES[name]
    except KeyError:
        raise ValueError(f"Unknown source: {name}. Must be one of {sorted(SOURCES)}") from None
    return source_cls(**options)
