import datetime
from dataclasses import dataclass, field

from decklist_scraper.models.format import Format


@dataclass(frozen=True, slots=True)
class CardLine:
    """
    One line of a decklist: a quantity and a card name.

    Attributes:
        count: Number of copies, always at least 1
        name: Card name as printed by the source, trimmed
    """

    count: int
    name: str

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"Card count must be positive, got {self.count}")
        if not self.name or self.name != self.name.strip():
            raise ValueError(f"Card name must be non-empty trimmed text, got {self.name!r}")


@dataclass
class CanonicalDecklist:
    """
    A single player's deck from a single event, normalized across sources.

    Attributes:
        format: Tournament format
        player: Player name, if the source lists one
        event: Event title
        archetype: Archetype label given by the source
        result: Finishing position or record (e.g. "1", "5-0")
        name: Deck name given by the source
        date: Event or publication date, None if the source date was unparsable
        mainboard: Maindeck lines in source order
        sideboard: Sideboard lines in source order
    """

    format: Format
    player: str | None = None
    event: str | None = None
    archetype: str | None = None
    result: str | None = None
    name: str | None = None
    date: datetime.date | None = None
    mainboard: list[CardLine] = field(default_factory=list)
    sideboard: list[CardLine] = field(default_factory=list)

    def mainboard_count(self) -> int:
        """Total cards in mainboard."""
        return sum(line.count for line in self.mainboard)

    def sideboard_count(self) -> int:
        """Total cards in sideboard."""
        return sum(line.count for line in self.sideboard)

    def card_names(self) -> set[str]:
        """All unique card names in deck including sideboard."""
        return {line.name for line in self.mainboard} | {line.name for line in self.sideboard}
