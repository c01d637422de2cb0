"""
FaB DB importer for Flesh and Blood.

Remote imports page through ``/cards?set=<code>&page=<n>`` and stop at an
empty page or when ``links.next`` is null.
"""

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.config import settings
from tcgtracker.importing.base import RemoteSourceImporter
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.reconcile import get_nested, get_str

GAME = "Flesh and Blood"


def _get_int(card: dict[str, Any], key: str) -> int | None:
    value = card.get(key)
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None


def _has_next_page(payload: dict[str, Any]) -> bool:
    return get_nested(payload, "links", "next") is not None


class FabDbImporter(RemoteSourceImporter):
    key = "fabdb"
    display_name = "FaB DB"
    supported_games = (GAME,)
    set_code_example = "'WTR', 'DYN', 'MST'"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        api_key: str | None = None,
    ):
        super().__init__(base_url or settings.fabdb_base_url, timeout)
        self.api_key = api_key if api_key is not None else settings.fabdb_api_key

    def headers(self) -> dict[str, str]:
        headers = super().headers()
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    async def fetch_set(self, set_code: str, limit: int | None = None) -> list[dict[str, Any]]:
        """
        Fetch every card in a set, following the pagination links.

        Raises:
            httpx.HTTPError: If any page request fails
        """
        cards: list[dict[str, Any]] = []
        page = 1
        async with self.client() as client:
            while True:
                response = await client.get("/cards", params={"set": set_code, "page": page})
                response.raise_for_status()
                payload = response.json()
                if not isinstance(payload, dict):
                    break

                chunk = payload.get("data")
                if not isinstance(chunk, list) or not chunk:
                    break
                cards.extend(c for c in chunk if isinstance(c, dict))

                if not _has_next_page(payload):
                    break
                if limit is not None and len(cards) >= limit:
                    break
                page += 1

        return cards

    async def import_from_remote(
        self, session: AsyncSession, options: ImportOptions
    ) -> ImportSummary:
        set_code = self.require_set_code(options)
        cards = await self.fetch_set(set_code, limit=options.limit)
        return await self.reconcile(session, cards, options)

    def to_record(self, row: Any) -> CatalogRecord:
        if not isinstance(row, dict):
            raise ValueError("Row is not an object.")

        number = get_str(row, "number")
        if not number:
            raise ValueError("Missing card number.")
        name = get_str(row, "name")
        if not name:
            raise ValueError("Missing name.")

        set_code = (get_str(row, "set") or "UNK").upper()
        card_type = get_str(row, "type") or ""
        text = get_str(row, "rules", "text")
        rarity = get_str(row, "rarity") or "Unknown"
        finish = get_str(row, "finish") or ""
        style = "Foil" if "foil" in finish.lower() else "Standard"
        image_url = (
            get_nested(row, "images", "full")
            or get_nested(row, "images", "normal")
            or get_str(row, "image")
        )

        traits = row.get("keywords")
        if not isinstance(traits, list):
            traits = row.get("traits") if isinstance(row.get("traits"), list) else None

        return CatalogRecord(
            game=GAME,
            name=name,
            set_code=set_code,
            number=number,
            card_type=card_type,
            description=text,
            details_json=json.dumps(
                {
                    "class": get_str(row, "class"),
                    "talent": get_str(row, "talent"),
                    "subtype": get_str(row, "subtype"),
                    "type": card_type,
                    "cost": _get_int(row, "cost"),
                    "pitch": _get_int(row, "pitch"),
                    "power": _get_int(row, "power"),
                    "defense": _get_int(row, "defense"),
                    "legality": row.get("legality"),
                    "variants": row.get("variants"),
                    "traits": traits,
                    "text": text,
                },
                sort_keys=True,
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
                    "images": row.get("images"),
                    "release": get_str(row, "release"),
                },
                sort_keys=True,
            ),
        )
