import json
from pathlib import Path

import httpx
import pytest
import respx

from decklist_scraper.parsers.scryfall import (
    SCRYFALL_BULK_API,
    get_bulk_data_url,
    iter_catalog_entries,
    parse_catalog_entry,
)

LIGHTNING_BOLT = {
    "object": "card",
    "id": "e3285e6b-3e79-4d7c-bf96-d920f973b80f",
    "name": "Lightning Bolt",
    "scryfall_uri": "https://scryfall.com/card/clu/141/lightning-bolt",
    "cmc": 1.0,
    "type_line": "Instant",
    "color_identity": ["R"],
    "set": "clu",
    "set_name": "Ravnica: Clue Edition",
    "legalities": {"premodern": "legal", "standard": "not_legal"},
}

FIRE_ICE = {
    "id": "fire-ice-id",
    "name": "Fire // Ice",
    "cmc": 4.0,
    "color_identity": ["U", "R"],
    "set": "mh2",
    "set_name": "Modern Horizons 2",
    "card_faces": [
        {"name": "Fire", "type_line": "Instant"},
        {"name": "Ice", "type_line": "Instant"},
    ],
    "type_line": "Instant // Instant",
    "legalities": {"premodern": "not_legal"},
}

DELVER = {
    "id": "delver-id",
    "name": "Delver of Secrets // Insectile Aberration",
    "cmc": 1.0,
    "color_identity": ["U"],
    "card_faces": [
        {"name": "Delver of Secrets", "power": "1", "toughness": "1", "type_line": "Creature"},
        {"name": "Insectile Aberration", "power": "3", "toughness": "2"},
    ],
    "legalities": {},
}


@pytest.fixture
def bulk_path(tmp_path: Path) -> Path:
    path = tmp_path / "oracle-cards.json"
    path.write_text(json.dumps([LIGHTNING_BOLT, FIRE_ICE, DELVER, {"id": "nameless"}]))
    return path


class TestParseCatalogEntry:
    def test_maps_fields(self) -> None:
        entry = parse_catalog_entry(LIGHTNING_BOLT)

        assert entry.name == "Lightning Bolt"
        assert entry.scryfall_id == LIGHTNING_BOLT["id"]
        assert entry.scryfall_url == LIGHTNING_BOLT["scryfall_uri"]
        assert entry.cmc == 1.0
        assert entry.type_line == "Instant"
        assert entry.set_code == "clu"
        assert entry.set_name == "Ravnica: Clue Edition"
        assert entry.colors == ("R",)
        assert entry.is_premodern_legal is True
        assert entry.power is None

    def test_colors_in_wubrg_order(self) -> None:
        entry = parse_catalog_entry(FIRE_ICE)

        assert entry.colors == ("U", "R")
        assert entry.is_premodern_legal is False
        assert entry.type_line == "Instant // Instant"

    def test_front_face_stats_for_double_faced_cards(self) -> None:
        entry = parse_catalog_entry(DELVER)

        assert entry.power == "1"
        assert entry.toughness == "1"
        assert entry.type_line == "Creature"

    def test_missing_name_raises(self) -> None:
        with pytest.raises(KeyError):
            parse_catalog_entry({"id": "nameless"})


class TestIterCatalogEntries:
    def test_skips_records_without_name(self, bulk_path: Path) -> None:
        names = [entry.name for entry in iter_catalog_entries(bulk_path)]

        assert names == [
            "Lightning Bolt",
            "Fire // Ice",
            "Delver of Secrets // Insectile Aberration",
        ]


class TestGetBulkDataUrl:
    @respx.mock
    def test_finds_requested_type(self) -> None:
        respx.get(SCRYFALL_BULK_API).mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": [
                        {"type": "default_cards", "download_uri": "https://data/default.json"},
                        {"type": "oracle_cards", "download_uri": "https://data/oracle.json"},
                    ]
                },
            )
        )

        assert get_bulk_data_url() == "https://data/oracle.json"

    @respx.mock
    def test_missing_type_raises(self) -> None:
        respx.get(SCRYFALL_BULK_API).mock(return_value=httpx.Response(200, json={"data": []}))

        with pytest.raises(ValueError, match="oracle_cards"):
            get_bulk_data_url()
