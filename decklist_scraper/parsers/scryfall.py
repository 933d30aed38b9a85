"""
Scryfall bulk data loader.

Downloads Scryfall's oracle-cards bulk file and turns its records into
catalog entries for the ``cards`` table.

Bulk data: https://scryfall.com/docs/api/bulk-data
"""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx

from decklist_scraper.models.card import CardCatalogEntry

SCRYFALL_BULK_API = "https://api.scryfall.com/bulk-data"
USER_AGENT = "decklist-scraper/1.0"

DEFAULT_BULK_TYPE = "oracle_cards"

COLOR_ORDER = "WUBRG"


def get_bulk_data_url(bulk_type: str = DEFAULT_BULK_TYPE, timeout: float = 60.0) -> str:
    """
    Fetch the download URL for one of Scryfall's bulk data files.

    Args:
        bulk_type: Bulk file type, e.g. "oracle_cards" or "default_cards"
        timeout: Request timeout in seconds

    Returns:
        URL to download the bulk JSON file

    Raises:
        httpx.HTTPError: If API request fails
        ValueError: If the bulk type is not listed
    """
    response = httpx.get(
        SCRYFALL_BULK_API,
        headers={"User-Agent": USER_AGENT},
        timeout=timeout,
    )
    response.raise_for_status()

    data = response.json()

    for entry in data["data"]:
        if entry["type"] == bulk_type:
            return str(entry["download_uri"])

    raise ValueError(f"Could not find {bulk_type} bulk data URL")


def download_bulk_data(output_path: Path, bulk_type: str = DEFAULT_BULK_TYPE) -> Path:
    """
    Download Scryfall bulk data to a file.

    Args:
        output_path: Where to save the JSON file
        bulk_type: Bulk file type to download

    Returns:
        The path written to

    Note:
        The oracle file is ~150MB, download may take a minute.
    """
    url = get_bulk_data_url(bulk_type)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Stream download due to file size
    with httpx.stream(
        "GET",
        url,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        timeout=300.0,
    ) as response:
        response.raise_for_status()
        with open(output_path, "wb") as f:
            for chunk in response.iter_bytes(chunk_size=8192):
                f.write(chunk)

    return output_path


def _sort_colors(colors: list[str] | None) -> tuple[str, ...]:
    """Order color symbols as WUBRG, dropping unknown symbols."""
    if not colors:
        return ()
    return tuple(symbol for symbol in COLOR_ORDER if symbol in colors)


def _as_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_catalog_entry(card: dict[str, Any]) -> CardCatalogEntry:
    """
    Build a catalog entry from one Scryfall card object.

    Multi-faced cards without top-level power/toughness take them from
    their first face.

    Raises:
        KeyError: If the card has no name
    """
    faces = card.get("card_faces") or [{}]
    front = faces[0]

    return CardCatalogEntry(
        name=card["name"],
        scryfall_id=card.get("id"),
        scryfall_url=card.get("scryfall_uri"),
        cmc=_as_float(card.get("cmc")),
        power=card.get("power", front.get("power")),
        toughness=card.get("toughness", front.get("toughness")),
        type_line=card.get("type_line", front.get("type_line")),
        set_code=card.get("set"),
        set_name=card.get("set_name"),
        colors=_sort_colors(card.get("color_identity")),
        is_premodern_legal=card.get("legalities", {}).get("premodern") == "legal",
    )


def iter_catalog_entries(bulk_data_path: Path) -> Iterator[CardCatalogEntry]:
    """
    Yield catalog entries from a downloaded bulk file.

    Records without a name are skipped.

    Args:
        bulk_data_path: Path to downloaded Scryfall bulk JSON
    """
    with open(bulk_data_path, encoding="utf-8") as f:
        cards = json.load(f)

    for card in cards:
        if not card.get("name"):
            continue
        yield parse_catalog_entry(card)
