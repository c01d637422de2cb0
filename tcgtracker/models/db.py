"""
SQLAlchemy ORM models for the card catalog.

A card is identified by (game, name); each card has one printing per
(set_code, number) it was released in.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    A catalog card, independent of where it was printed.

    Holds the game-level facts (type line, rules text) shared by every printing.
    """

    __tablename__ = "cards"
    __table_args__ = (UniqueConstraint("game", "name", name="uq_card_game_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game: Mapped[str] = mapped_column(String(100), index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    card_type: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Source-specific payload, stored verbatim for later enrichment
    details_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    printings: Mapped[list["CardPrintingDB"]] = relationship(
        back_populates="card", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<CardDB(game={self.game}, name={self.name})>"


class CardPrintingDB(Base):
    """
    One printing of a card in a specific set.

    Tracks rarity, finish style and artwork for that printing.
    """

    __tablename__ = "card_printings"
    __table_args__ = (
        UniqueConstraint("card_id", "set_code", "number", name="uq_printing_card_set_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    set_code: Mapped[str] = mapped_column(String(50), index=True)
    number: Mapped[str] = mapped_column(String(50))
    rarity: Mapped[str] = mapped_column(String(50), default="")
    style: Mapped[str] = mapped_column(String(50), default="Standard")
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    details_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)

    card: Mapped["CardDB"] = relationship(back_populates="printings")

    def __repr__(self) -> str:
        return f"<CardPrintingDB(set={self.set_code}, number={self.number})>"
