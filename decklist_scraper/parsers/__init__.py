from decklist_scraper.parsers.scryfall import (
    download_bulk_data,
    get_bulk_data_url,
    iter_catalog_entries,
    parse_catalog_entry,
)

__all__ = [
    "download_bulk_data",
    "get_bulk_data_url",
    "iter_catalog_entries",
    "parse_catalog_entry",
]
