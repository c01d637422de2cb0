"""
Catalog read operations.

Natural-key lookups used by the import reconciliation, plus the counts the
health and CLI surfaces report.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.models.db import CardDB, CardPrintingDB


async def get_card(session: AsyncSession, game: str, name: str) -> CardDB | None:
    """
    Get a card by its natural key (game, name).

    Returns None if the catalog has no such card.
    """
    result = await session.execute(select(CardDB).where(CardDB.game == game, CardDB.name == name))
    return result.scalar_one_or_none()


async def get_printing(
    session: AsyncSession, game: str, set_code: str, number: str
) -> CardPrintingDB | None:
    """
    Get a printing by its natural key (game, set_code, number).

    The game lives on the parent card, so the lookup joins through it.
    """
    result = await session.execute(
        select(CardPrintingDB)
        .join(CardDB, CardPrintingDB.card_id == CardDB.id)
        .where(
            CardDB.game == game,
            CardPrintingDB.set_code == set_code,
            CardPrintingDB.number == number,
        )
    )
    return result.scalars().first()


async def count_cards(session: AsyncSession, game: str | None = None) -> int:
    """Count catalog cards, optionally restricted to one game."""
    stmt = select(func.count()).select_from(CardDB)
    if game is not None:
        stmt = stmt.where(CardDB.game == game)
    result = await session.execute(stmt)
    return int(result.scalar_one())


async def count_printings(session: AsyncSession, game: str | None = None) -> int:
    """Count catalog printings, optionally restricted to one game."""
    stmt = select(func.count()).select_from(CardPrintingDB)
    if game is not None:
        stmt = stmt.join(CardDB, CardPrintingDB.card_id == CardDB.id).where(CardDB.game == game)
    result = await session.execute(stmt)
    return int(result.scalar_one())
