from enum import Enum


class Format(str, Enum):
    """
    Tournament format a decklist was played in.

    Values are the lowercase tokens stored in the ``decks.format`` column.
    """

    STANDARD = "standard"
    PIONEER = "pioneer"
    MODERN = "modern"
    LEGACY = "legacy"
    VINTAGE = "vintage"
    PAUPER = "pauper"
    HISTORIC = "historic"
    ALCHEMY = "alchemy"
    EXPLORER = "explorer"
    PREMODERN = "premodern"
    OLD_SCHOOL = "oldschool"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, text: str | None) -> "Format":
        """
        Map a free-text label to a format.

        Matching is case-insensitive and ignores surrounding whitespace.
        Anything unrecognized maps to UNKNOWN; this never raises.
        """
        if not text:
            return cls.UNKNOWN

        label = " ".join(text.split()).lower()
        if label in _ALIASES:
            return _ALIASES[label]

        try:
            return cls(label)
        except ValueError:
            return cls.UNKNOWN

    @property
    def token(self) -> str:
        """Storage token for this format."""
        return self.value

    def __str__(self) -> str:
        return self.value


# Labels used by sources that differ from the storage token
_ALIASES: dict[str, Format] = {
    "old school": Format.OLD_SCHOOL,
    "old-school": Format.OLD_SCHOOL,
    "vintage old school": Format.OLD_SCHOOL,
}
