"""
SQLAlchemy ORM models for persistent storage.

Tables hold normalized decklists, one row per unique card name, the
deck-to-card junction and the crawl state of every attempted link.
"""

import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class DeckDB(Base):
    """
    One decklist from one event.

    Decks are never deduplicated; re-ingesting an event is prevented by
    crawl state, not by this table.
    """

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    format: Mapped[str] = mapped_column(String(50), index=True)
    event: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    player: Mapped[str | None] = mapped_column(Text, nullable=True)
    archetype: Mapped[str | None] = mapped_column(Text, nullable=True)
    result: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, format={self.format}, player={self.player})>"


class CardDB(Base):
    """
    A unique card, keyed by name.

    Catalog columns are filled by the catalog sync and stay empty for cards
    that were only ever seen in decklists.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    scryfall_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    scryfall_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    cmc: Mapped[float | None] = mapped_column(Float, nullable=True)
    power: Mapped[str | None] = mapped_column(String(16), nullable=True)
    toughness: Mapped[str | None] = mapped_column(String(16), nullable=True)
    type_line: Mapped[str | None] = mapped_column(Text, nullable=True)
    set_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    set_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    colors: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)
    is_premodern_legal: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name})>"


class DeckCardDB(Base):
    """
    A card line inside a deck.

    No uniqueness on (deck, card, sideboard): a source may list the same card
    twice and each listing is kept as its own row.
    """

    __tablename__ = "deck_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[int] = mapped_column(Integer, ForeignKey("cards.id"), index=True)
    count: Mapped[int] = mapped_column(Integer)
    is_sideboard: Mapped[bool] = mapped_column(Boolean, default=False)

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return (
            f"<DeckCardDB(deck={self.deck_id}, card={self.card_id}, "
            f"count={self.count}, sideboard={self.is_sideboard})>"
        )


class ScrapedLinkDB(Base):
    """
    Crawl outcome for one discovered link.

    A successful row is terminal; failed rows form the retry queue for the
    next run.
    """

    __tablename__ = "scraped_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    link: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    is_success: Mapped[bool] = mapped_column(Boolean, default=False)
    error_msg: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<ScrapedLinkDB(link={self.link}, success={self.is_success})>"
