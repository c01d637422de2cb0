"""
Catalog reconciliation shared by every importer.

Dry-run and apply run exactly the same code: records are staged into the
session and flushed as they are reconciled, and ``dry_run_scope`` decides at
the very end whether the transaction is committed or rolled back. The
counters in the summary therefore cannot diverge between the two modes.
"""

import csv
import io
import json
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from typing import IO, Any

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.db.operations import get_card, get_printing
from tcgtracker.importing.models import CatalogRecord, ImportSummary
from tcgtracker.models.db import CardDB, CardPrintingDB

logger = logging.getLogger(__name__)


@asynccontextmanager
async def dry_run_scope(session: AsyncSession, dry_run: bool) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of import work inside one all-or-nothing transaction.

    On normal exit the transaction is committed, or rolled back when
    ``dry_run`` is set. Any exception, including task cancellation, rolls
    back and propagates.
    """
    try:
        yield session
    except BaseException:
        await session.rollback()
        raise

    if dry_run:
        await session.rollback()
    else:
        await session.commit()


def _apply_changes(target: object, values: dict[str, Any]) -> bool:
    """Copy differing values onto an ORM row. Returns True if anything changed."""
    changed = False
    for attr, value in values.items():
        if getattr(target, attr) != value:
            setattr(target, attr, value)
            changed = True
    return changed


class CatalogReconciler:
    """
    Upserts catalog records and tallies what changed.

    Cards are matched on (game, name) and printings on (game, set, number).
    A printing key seen twice in one batch is reported as an error instead of
    being written twice. A card key seen twice reuses the card from its first
    row; later rows only add printings.
    """

    def __init__(self, session: AsyncSession, summary: ImportSummary):
        self._session = session
        self._summary = summary
        self._seen: set[tuple[str, str, str]] = set()
        self._cards: dict[tuple[str, str], CardDB] = {}

    async def reconcile(
        self,
        rows: Iterable[Any],
        to_record: Callable[[Any], CatalogRecord],
        limit: int | None = None,
    ) -> int:
        """
        Reconcile source rows against the catalog.

        Args:
            rows: Raw source rows, in input order
            to_record: Maps one row to a CatalogRecord; raises ValueError for bad rows
            limit: Stop after this many rows

        Returns:
            Number of rows considered
        """
        processed = 0
        for row in rows:
            if limit is not None and processed >= limit:
                break
            processed += 1

            try:
                record = to_record(row)
            except ValueError as e:
                self._summary.add_error(_row_label(row), str(e))
                continue

            if record.printing_key in self._seen:
                self._summary.add_error("duplicate", record.label)
                continue
            self._seen.add(record.printing_key)

            try:
                await self.upsert(record)
            except ValueError as e:
                self._summary.add_error(record.name or "Unknown", str(e))

        return processed

    async def upsert(self, record: CatalogRecord) -> None:
        """Create or update the card and printing for one record."""
        _, set_code, number = record.printing_key
        if not set_code:
            raise ValueError("Missing set code.")
        if not number:
            raise ValueError("Missing collector number.")

        card = await self.upsert_card(record)
        await self.upsert_printing(record, card)
        await self._session.flush()

    async def upsert_card(self, record: CatalogRecord) -> CardDB:
        """Create or update the card half of a record, keyed on (game, name)."""
        game, name = record.card_key
        if not name:
            raise ValueError("Missing name.")
        if record.card_key in self._cards:
            return self._cards[record.card_key]

        card = await get_card(self._session, game, name)
        if card is None:
            card = CardDB(
                game=game,
                name=name,
                card_type=record.card_type,
                description=record.description,
                details_json=record.details_json,
            )
            self._session.add(card)
            # Flush so the printing can reference card.id
            await self._session.flush()
            self._summary.cards_created += 1
        elif _apply_changes(
            card,
            {
                "card_type": record.card_type,
                "description": record.description,
                "details_json": record.details_json,
            },
        ):
            self._summary.cards_updated += 1
        self._cards[record.card_key] = card
        return card

    async def upsert_printing(self, record: CatalogRecord, card: CardDB) -> CardPrintingDB:
        """Create or update the printing half of a record, keyed on (game, set, number)."""
        game, set_code, number = record.printing_key

        printing = await get_printing(self._session, game, set_code, number)
        if printing is None:
            printing = CardPrintingDB(
                card_id=card.id,
                set_code=set_code,
                number=number,
                rarity=record.rarity,
                style=record.style,
                image_url=record.image_url,
                details_json=record.printing_details_json,
                price=record.price,
            )
            self._session.add(printing)
            self._summary.printings_created += 1
            return printing

        values: dict[str, Any] = {
            "card_id": card.id,
            "rarity": record.rarity,
            "style": record.style,
            "details_json": record.printing_details_json,
        }
        # Sources that omit artwork or price must not blank out known values
        if record.image_url is not None:
            values["image_url"] = record.image_url
        if record.price is not None:
            values["price"] = record.price
        if _apply_changes(printing, values):
            self._summary.printings_updated += 1
        return printing


def _row_label(row: Any) -> str:
    if isinstance(row, dict):
        return get_str(row, "name") or "Unknown"
    return "Unknown"


# --- Row helpers ---


def get_str(row: dict[str, Any], *keys: str) -> str | None:
    """Return the first non-blank string value among ``keys``."""
    for key in keys:
        value = row.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def get_nested(row: dict[str, Any], *path: str) -> Any:
    """Walk nested dicts; returns None as soon as a step is missing."""
    current: Any = row
    for step in path:
        if not isinstance(current, dict):
            return None
        current = current.get(step)
    return current


def read_file_rows(file: IO[bytes]) -> list[Any]:
    """
    Read rows from a parsed upload buffer.

    The buffer holds either a JSON array (first non-blank byte is ``[``) or a
    CSV whose header names are trimmed and lower-cased.
    """
    file.seek(0)
    text = file.read().decode("utf-8-sig")

    if text.lstrip().startswith("["):
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("Expected an array of cards.")
        return data

    reader = csv.DictReader(io.StringIO(text))
    rows: list[Any] = []
    for raw in reader:
        rows.append(
            {
                key.strip().lower(): value.strip() if isinstance(value, str) else value
                for key, value in raw.items()
                if key is not None
            }
        )
    return rows
