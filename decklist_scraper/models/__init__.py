from decklist_scraper.models.card import CardCatalogEntry
from decklist_scraper.models.deck import CanonicalDecklist, CardLine
from decklist_scraper.models.errors import (
    HttpError,
    NetworkError,
    NotFoundError,
    ParseError,
    PersistenceError,
    ScraperError,
)
from decklist_scraper.models.format import Format

__all__ = [
    "CanonicalDecklist",
    "CardCatalogEntry",
    "CardLine",
    "Format",
    "HttpError",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "PersistenceError",
    "ScraperError",
]
