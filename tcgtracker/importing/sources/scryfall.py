"""
Scryfall importer for Magic: The Gathering.

Remote imports page through the card search API for one set:
https://scryfall.com/docs/api/cards/search

Files may contain Scryfall card objects or the generic name/set/number rows.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.config import settings
from tcgtracker.importing.base import RemoteSourceImporter
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.reconcile import get_nested, get_str

GAME = "Magic"


def _rules_text(card: dict[str, Any]) -> str | None:
    """Oracle text, or each face's name and text joined for multi-faced cards."""
    oracle = card.get("oracle_text")
    if isinstance(oracle, str):
        return oracle

    faces = card.get("card_faces")
    if isinstance(faces, list) and faces:
        parts = []
        for face in faces:
            if not isinstance(face, dict):
                continue
            lines = [s for s in (face.get("name"), face.get("oracle_text")) if s]
            parts.append("\n".join(lines))
        return "\n//\n".join(parts)
    return None


def _image_url(card: dict[str, Any]) -> str | None:
    url = get_nested(card, "image_uris", "normal")
    if isinstance(url, str):
        return url

    faces = card.get("card_faces")
    if isinstance(faces, list) and faces and isinstance(faces[0], dict):
        face_url = get_nested(faces[0], "image_uris", "normal")
        if isinstance(face_url, str):
            return face_url

    return get_str(card, "image_url", "image")


def _price(card: dict[str, Any]) -> float | None:
    raw = get_nested(card, "prices", "usd")
    if raw is None:
        raw = card.get("price")
    try:
        return float(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


class ScryfallImporter(RemoteSourceImporter):
    key = "scryfall"
    display_name = "Scryfall"
    supported_games = (GAME,)
    set_code_example = "'LEA', 'DMU', 'MKM'"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or settings.scryfall_base_url, timeout)

    async def fetch_set(self, set_code: str, limit: int | None = None) -> list[dict[str, Any]]:
        """
        Fetch every printing in a set, following search pagination.

        Args:
            set_code: Scryfall set code
            limit: Stop fetching once this many cards are collected

        Returns:
            Scryfall card objects in set order

        Raises:
            httpx.HTTPError: If any page request fails
        """
        cards: list[dict[str, Any]] = []
        async with self.client() as client:
            response = await client.get(
                "/cards/search",
                params={"q": f"set:{set_code} unique:prints", "order": "set"},
            )
            while True:
                response.raise_for_status()
                page = response.json()
                cards.extend(c for c in page.get("data", []) if isinstance(c, dict))

                if limit is not None and len(cards) >= limit:
                    break
                next_page = page.get("next_page")
                if not page.get("has_more") or not next_page:
                    break
                response = await client.get(next_page)

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

        finishes = row.get("finishes")
        style = "Foil" if isinstance(finishes, list) and "foil" in finishes else "Standard"

        return CatalogRecord(
            game=GAME,
            name=get_str(row, "name") or "",
            set_code=get_str(row, "set", "set_code") or "",
            number=get_str(row, "collector_number", "number") or "",
            card_type=get_str(row, "type_line", "type") or "",
            description=_rules_text(row),
            rarity=get_str(row, "rarity") or "common",
            style=get_str(row, "style") or style,
            image_url=_image_url(row),
            price=_price(row),
        )
