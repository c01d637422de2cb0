"""
Pokemon TCG API importer.

Remote imports query ``/cards?q=set.id:<code>`` page by page until a short
page comes back: https://docs.pokemontcg.io/api-reference/cards/search-cards
"""

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.config import settings
from tcgtracker.importing.base import RemoteSourceImporter
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.reconcile import get_nested, get_str

GAME = "Pokemon"
PAGE_SIZE = 250

# Game-level fields copied into the card payload
CARD_DETAIL_FIELDS = (
    "supertype",
    "subtypes",
    "types",
    "attacks",
    "abilities",
    "weaknesses",
    "resistances",
    "retreatCost",
    "regulationMark",
    "legalities",
)


def _rules_text(card: dict[str, Any]) -> str | None:
    lines: list[str] = []
    for ability in card.get("abilities") or []:
        if isinstance(ability, dict):
            lines.append(f"{ability.get('name', '')}: {ability.get('text', '')}".strip())
    for attack in card.get("attacks") or []:
        if isinstance(attack, dict):
            damage = f" ({attack['damage']})" if attack.get("damage") else ""
            text = f" {attack['text']}" if attack.get("text") else ""
            lines.append(f"{attack.get('name', '')}{damage}{text}".strip())
    for rule in card.get("rules") or []:
        if isinstance(rule, str):
            lines.append(rule)
    if not lines:
        return get_str(card, "text", "description")
    return "\n".join(lines)


def _market_price(card: dict[str, Any]) -> float | None:
    prices = get_nested(card, "tcgplayer", "prices")
    if not isinstance(prices, dict):
        return None
    for variant in prices.values():
        market = variant.get("market") if isinstance(variant, dict) else None
        if isinstance(market, int | float):
            return float(market)
    return None


class PokemonTcgImporter(RemoteSourceImporter):
    key = "pokemon"
    display_name = "Pokemon TCG"
    supported_games = (GAME,)
    set_code_example = "'base1', 'swsh12', 'sv3'"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        api_key: str | None = None,
    ):
        super().__init__(base_url or settings.pokemon_base_url, timeout)
        self.api_key = api_key if api_key is not None else settings.pokemon_api_key

    def headers(self) -> dict[str, str]:
        headers = super().headers()
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    async def fetch_set(self, set_code: str, limit: int | None = None) -> list[dict[str, Any]]:
        """
        Fetch every card in a set.

        Raises:
            httpx.HTTPError: If any page request fails
        """
        cards: list[dict[str, Any]] = []
        page = 1
        async with self.client() as client:
            while True:
                response = await client.get(
                    "/cards",
                    params={
                        "q": f"set.id:{set_code.lower()}",
                        "page": page,
                        "pageSize": PAGE_SIZE,
                    },
                )
                response.raise_for_status()
                chunk = response.json().get("data") or []
                cards.extend(c for c in chunk if isinstance(c, dict))

                if len(chunk) < PAGE_SIZE:
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

        number = get_str(row, "number", "collector_number")
        if not number:
            raise ValueError("Missing card number.")
        name = get_str(row, "name")
        if not name:
            raise ValueError("Missing name.")

        set_id = get_nested(row, "set", "id")
        set_code = set_id if isinstance(set_id, str) else get_str(row, "set", "set_code")
        image = get_nested(row, "images", "large") or get_nested(row, "images", "small")

        return CatalogRecord(
            game=GAME,
            name=name,
            set_code=(set_code or "UNK").upper(),
            number=number,
            card_type=get_str(row, "supertype", "type") or "",
            description=_rules_text(row),
            details_json=json.dumps(
                {field: row.get(field) for field in CARD_DETAIL_FIELDS}, sort_keys=True
            ),
            rarity=get_str(row, "rarity") or "Unknown",
            image_url=image if isinstance(image, str) else get_str(row, "image_url"),
            price=_market_price(row),
        )
