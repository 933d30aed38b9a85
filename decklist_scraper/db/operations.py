"""
Decklist persistence.

Writes canonical decklists into the decks, cards and deck_cards tables,
resolving each card name to a single row in ``cards``, and reconciles card
rows with the external catalog.
"""

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from decklist_scraper.db._dialect import upsert_insert
from decklist_scraper.models.card import CardCatalogEntry
from decklist_scraper.models.db import CardDB, DeckCardDB, DeckDB
from decklist_scraper.models.deck import CanonicalDecklist
from decklist_scraper.models.errors import PersistenceError


class DecklistStore:
    """
    Persistence operations for decks and cards.

    All writes go through the session passed at construction. Nothing is
    committed here; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- Deck Operations ---

    async def upsert_deck(self, decklist: CanonicalDecklist) -> int:
        """
        Insert a deck row for a decklist and return its id.

        Decks are not deduplicated; every call creates a new row.
        """
        deck = DeckDB(
            name=decklist.name,
            format=decklist.format.token,
            event=decklist.event,
            date=decklist.date,
            player=decklist.player,
            archetype=decklist.archetype,
            result=decklist.result,
        )
        self._session.add(deck)
        await self._session.flush()
        return deck.id

    async def get_or_create_card(self, name: str) -> int:
        """
        Resolve a card name to its row id, inserting a bare row if needed.

        The insert is an atomic insert-if-absent, so the name stays unique
        even if two writers resolve the same card at once.
        """
        card_id = await self._find_card_id(name)
        if card_id is not None:
            return card_id

        stmt = upsert_insert(self._session, CardDB).values(name=name)
        await self._session.execute(stmt.on_conflict_do_nothing(index_elements=["name"]))

        card_id = await self._find_card_id(name)
        if card_id is None:
            msg = f"Card {name!r} not found after insert"
            raise PersistenceError(msg)
        return card_id

    async def link_card_to_deck(
        self, deck_id: int, card_id: int, count: int, is_sideboard: bool
    ) -> None:
        """Append one card line to a deck."""
        if count < 1:
            raise ValueError(f"Card count must be positive, got {count}")

        self._session.add(
            DeckCardDB(deck_id=deck_id, card_id=card_id, count=count, is_sideboard=is_sideboard)
        )
        await self._session.flush()

    async def insert_decklist(self, decklist: CanonicalDecklist) -> int:
        """
        Persist a full decklist: the deck row, its cards and every card line.

        Mainboard lines are written first, then sideboard lines.

        Returns:
            The new deck id

        Raises:
            PersistenceError: If any write fails. The session is left for the
                caller to roll back.
        """
        try:
            deck_id = await self.upsert_deck(decklist)

            for line in decklist.mainboard:
                card_id = await self.get_or_create_card(line.name)
                await self.link_card_to_deck(deck_id, card_id, line.count, is_sideboard=False)

            for line in decklist.sideboard:
                card_id = await self.get_or_create_card(line.name)
                await self.link_card_to_deck(deck_id, card_id, line.count, is_sideboard=True)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to insert decklist: {e}") from e

        return deck_id

    async def count_decks(self) -> int:
        """Total number of stored decks."""
        result = await self._session.execute(select(func.count()).select_from(DeckDB))
        return int(result.scalar_one())

    # --- Card Operations ---

    async def get_card(self, name: str) -> CardDB | None:
        """Get a card row by name, reloading any cached state."""
        result = await self._session.execute(
            select(CardDB).where(CardDB.name == name).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert_catalog_entry(self, entry: CardCatalogEntry) -> None:
        """
        Insert or refresh a card's catalog fields.

        New names get a fully populated row. Existing rows keep their id and
        deck associations; only catalog-owned columns are overwritten, so
        applying the same entry twice leaves the row unchanged.

        Raises:
            PersistenceError: If the write fails
        """
        fields = entry.catalog_fields()
        stmt = upsert_insert(self._session, CardDB).values(name=entry.name, **fields)
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={column: stmt.excluded[column] for column in fields},
        )

        try:
            await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to upsert catalog entry {entry.name!r}: {e}") from e

    async def _find_card_id(self, name: str) -> int | None:
        result = await self._session.execute(select(CardDB.id).where(CardDB.name == name))
        return result.scalar_one_or_none()
