from decklist_scraper.db.crawl_state import CrawlStateStore
from decklist_scraper.db.database import create_engine, create_session_factory, drop_db, init_db
from decklist_scraper.db.operations import DecklistStore

__all__ = [
    "CrawlStateStore",
    "DecklistStore",
    "create_engine",
    "create_session_factory",
    "drop_db",
    "init_db",
]
