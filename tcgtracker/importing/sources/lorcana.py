"""
LorcanaJSON importer for Disney Lorcana.

The project publishes one card dump; remote imports download it and filter
by set code locally. Field names vary between dump versions, so every
lookup tolerates the known spellings.
"""

import json
from typing import IO, Any

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.config import settings
from tcgtracker.importing.base import RemoteSourceImporter
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.reconcile import get_nested, get_str, read_file_rows

GAME = "Disney Lorcana"

# Per-printing fields, kept out of the card-level payload so every printing
# of a card produces the same card details
PRINTING_FIELDS = frozenset(
    {
        "id",
        "set",
        "set_code",
        "number",
        "collector_number",
        "rarity",
        "foil",
        "finish",
        "image",
        "images",
        "image_urls",
        "image_uris",
    }
)


def _is_foil(card: dict[str, Any]) -> bool:
    foil = card.get("foil")
    if foil is True or (isinstance(foil, str) and foil.strip().lower() == "true"):
        return True
    finish = card.get("finish")
    return isinstance(finish, str) and "foil" in finish.lower()


def _card_name(card: dict[str, Any]) -> str:
    """Full character name, e.g. 'Elsa - Snow Queen'; versions are distinct cards."""
    full_name = get_str(card, "fullName", "full_name")
    if full_name:
        return full_name
    name = get_str(card, "name")
    if not name:
        raise ValueError("Missing name.")
    version = get_str(card, "version", "subtitle")
    return f"{name} - {version}" if version else name


def _in_set(card: Any, set_code: str | None) -> bool:
    if not set_code:
        return True
    if not isinstance(card, dict):
        # Keep it so the reconciler reports it as invalid
        return True
    card_set = get_str(card, "set_code", "set") or ""
    return card_set.lower() == set_code.lower()


class LorcanaJsonImporter(RemoteSourceImporter):
    key = "lorcanajson"
    display_name = "Lorcana JSON"
    supported_games = (GAME,)
    set_code_example = "'TFC', 'ROTF', 'ITI'"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or settings.lorcana_base_url, timeout)

    async def fetch_cards(self) -> list[Any]:
        """
        Download the full card dump.

        Raises:
            httpx.HTTPError: If the download fails
            ValueError: If the dump is not a list of cards
        """
        async with self.client() as client:
            response = await client.get("/cards.json")
            response.raise_for_status()
            data = response.json()

        if isinstance(data, dict) and isinstance(data.get("cards"), list):
            data = data["cards"]
        if not isinstance(data, list):
            raise ValueError("Expected an array of cards.")
        return data

    async def import_from_remote(
        self, session: AsyncSession, options: ImportOptions
    ) -> ImportSummary:
        set_code = self.require_set_code(options)
        cards = await self.fetch_cards()
        return await self.reconcile(session, (c for c in cards if _in_set(c, set_code)), options)

    async def import_from_file(
        self, session: AsyncSession, file: IO[bytes], options: ImportOptions
    ) -> ImportSummary:
        rows = read_file_rows(file)
        return await self.reconcile(
            session, (r for r in rows if _in_set(r, options.set_code)), options
        )

    def to_record(self, row: Any) -> CatalogRecord:
        if not isinstance(row, dict):
            raise ValueError("Row is not an object.")

        number = get_str(row, "number", "collector_number")
        if number is None and isinstance(row.get("number"), int):
            number = str(row["number"])
        if not number:
            raise ValueError("Missing number")

        name = _card_name(row)
        set_code = (get_str(row, "set_code", "set") or "UNK").upper()
        rarity = get_str(row, "rarity") or "Unknown"
        style = "Foil" if _is_foil(row) else "Standard"
        image_url = (
            get_str(row, "image")
            or get_nested(row, "images", "en", "full")
            or get_nested(row, "image_urls", "en")
            or get_nested(row, "image_uris", "normal")
        )

        return CatalogRecord(
            game=GAME,
            name=name,
            set_code=set_code,
            number=number,
            card_type=get_str(row, "type", "card_type") or "",
            description=get_str(row, "rules_text", "text"),
            details_json=json.dumps(
                {k: v for k, v in row.items() if k not in PRINTING_FIELDS}, sort_keys=True
            ),
            rarity=rarity,
            style=style,
            image_url=image_url if isinstance(image_url, str) else None,
            printing_details_json=json.dumps(
                {
                    "set": set_code,
                    "number": number,
                    "rarity": rarity,
                    "style": style,
                    "images": {"url": image_url if isinstance(image_url, str) else None},
                },
                sort_keys=True,
            ),
        )
