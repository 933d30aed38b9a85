from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class CardCatalogEntry:
    """
    Reference metadata for one card, taken from an external catalog.

    Catalog data enriches rows in the ``cards`` table; decklist ingestion
    never depends on it.

    Attributes:
        name: Canonical card name (unique key)
        scryfall_id: Catalog identifier
        scryfall_url: Catalog page for the card
        cmc: Mana value
        power: Power as printed ("*" and "1+*" are valid)
        toughness: Toughness as printed
        type_line: Full type line
        set_code: Set code of the catalog printing
        set_name: Set name of the catalog printing
        colors: Color identity symbols in WUBRG order
        is_premodern_legal: Legal in Premodern
    """

    name: str
    scryfall_id: str | None = None
    scryfall_url: str | None = None
    cmc: float | None = None
    power: str | None = None
    toughness: str | None = None
    type_line: str | None = None
    set_code: str | None = None
    set_name: str | None = None
    colors: tuple[str, ...] = field(default_factory=tuple)
    is_premodern_legal: bool = False

    def catalog_fields(self) -> dict[str, Any]:
        """Column values owned by the catalog, excluding the name key."""
        return {
            "scryfall_id": self.scryfall_id,
            "scryfall_url": self.scryfall_url,
            "cmc": self.cmc,
            "power": self.power,
            "toughness": self.toughness,
            "type_line": self.type_line,
            "set_code": self.set_code,
            "set_name": self.set_name,
            "colors": list(self.colors),
            "is_premodern_legal": self.is_premodern_legal,
        }
