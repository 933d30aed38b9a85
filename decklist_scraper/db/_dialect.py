from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from decklist_scraper.models.errors import PersistenceError


def upsert_insert(session: AsyncSession, table: Any) -> Any:
    """
    Return an INSERT construct that supports ON CONFLICT for the session's database.

    Raises:
        PersistenceError: If the database dialect has no ON CONFLICT support here
    """
    dialect = session.get_bind().dialect.name

    if dialect == "sqlite":
        return sqlite.insert(table)
    if dialect == "postgresql":
        return postgresql.insert(table)

    raise PersistenceError(f"Upserts are not supported for the {dialect} dialect")
