"""
SWU DB importer for Star Wars Unlimited.

One request per set: ``/api/cards/<code>``. The API answers with PascalCase
field names, so rows are matched on lower-cased keys.
"""

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.config import settings
from tcgtracker.importing.base import RemoteSourceImporter
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.reconcile import get_str

GAME = "Star Wars Unlimited"

# Game-level fields copied into the card payload
CARD_DETAIL_FIELDS = (
    "subtitle",
    "type",
    "traits",
    "keywords",
    "aspects",
    "arenas",
    "cost",
    "power",
    "hp",
    "leader",
    "artist",
)


def _lower_keys(card: dict[str, Any]) -> dict[str, Any]:
    return {key.lower(): value for key, value in card.items() if isinstance(key, str)}


def _card_name(card: dict[str, Any]) -> str:
    """Name plus subtitle, e.g. 'Luke Skywalker - Faithful Friend'."""
    name = get_str(card, "name")
    if not name:
        raise ValueError("Missing name.")
    subtitle = get_str(card, "subtitle")
    return f"{name} - {subtitle}" if subtitle else name


class SwuDbImporter(RemoteSourceImporter):
    key = "swudb"
    display_name = "SWU DB"
    supported_games = (GAME,)
    set_code_example = "'SOR', 'SHD', 'TWI'"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or settings.swudb_base_url, timeout)

    async def fetch_set(self, set_code: str) -> list[Any]:
        """
        Fetch every card in a set.

        Raises:
            httpx.HTTPError: If the request fails
            ValueError: If the response holds no card list
        """
        async with self.client() as client:
            response = await client.get(f"/api/cards/{set_code.lower()}")
            response.raise_for_status()
            data = response.json()

        if isinstance(data, dict) and isinstance(data.get("data"), list):
            data = data["data"]
        if not isinstance(data, list):
            raise ValueError("Expected an array of cards.")
        return data

    async def import_from_remote(
        self, session: AsyncSession, options: ImportOptions
    ) -> ImportSummary:
        set_code = self.require_set_code(options)
        cards = await self.fetch_set(set_code)
        return await self.reconcile(session, cards, options)

    def to_record(self, row: Any) -> CatalogRecord:
        if not isinstance(row, dict):
            raise ValueError("Row is not an object.")
        card = _lower_keys(row)

        number = get_str(card, "number")
        if number is None and isinstance(card.get("number"), int):
            number = str(card["number"])
        if not number:
            raise ValueError("Missing card number.")

        set_code = (get_str(card, "set") or "UNK").upper()
        rarity = get_str(card, "rarity") or "Unknown"
        variant = get_str(card, "varianttype", "variant") or ""
        style = "Foil" if "foil" in variant.lower() else "Standard"
        text = get_str(card, "fronttext", "text", "rulestext")

        return CatalogRecord(
            game=GAME,
            name=_card_name(card),
            set_code=set_code,
            number=number,
            card_type=get_str(card, "type") or "",
            description=text,
            details_json=json.dumps(
                {field: card.get(field) for field in CARD_DETAIL_FIELDS} | {"text": text},
                sort_keys=True,
            ),
            rarity=rarity,
            style=style,
            image_url=get_str(card, "frontart", "image", "imageurl", "frontimage"),
            printing_details_json=json.dumps(
                {
                    "set": set_code,
                    "number": number,
                    "rarity": rarity,
                    "style": style,
                    "variant": variant or None,
                    "release": get_str(card, "release"),
                },
                sort_keys=True,
            ),
        )
