"""
Dummy importer.

A self-contained source used for smoke tests and demos. Its remote import
synthesizes one card per set code (natural key: game + name, no printing);
its file import accepts the generic ``name,set,number`` layout.
"""

from typing import IO, Any

from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.importing.base import SourceImporter
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.reconcile import CatalogReconciler, dry_run_scope, get_str

GAME = "Test Game"
DEFAULT_SET_CODE = "GEN"


class DummyImporter(SourceImporter):
    key = "dummy"
    display_name = "Dummy"
    supported_games = (GAME,)

    async def import_from_remote(
        self, session: AsyncSession, options: ImportOptions
    ) -> ImportSummary:
        set_code = (options.set_code or DEFAULT_SET_CODE).strip().upper()
        record = CatalogRecord(
            game=GAME,
            name=f"Card {set_code}",
            set_code=set_code,
            number="",
            card_type="Test",
            details_json="{}",
        )

        summary = self.new_summary(options)
        async with dry_run_scope(session, options.dry_run):
            await CatalogReconciler(session, summary).upsert_card(record)

        summary.add_info("Dummy importer ran")
        return summary

    async def import_from_file(
        self, session: AsyncSession, file: IO[bytes], options: ImportOptions
    ) -> ImportSummary:
        return await self.reconcile_file(session, file, options)

    def to_record(self, row: Any) -> CatalogRecord:
        if not isinstance(row, dict):
            raise ValueError("Row is not an object.")

        return CatalogRecord(
            game=GAME,
            name=get_str(row, "name") or "",
            set_code=get_str(row, "set", "set_code") or "",
            number=get_str(row, "number", "collector_number") or "",
            card_type=get_str(row, "type", "card_type") or "",
            description=get_str(row, "text", "description"),
            rarity=get_str(row, "rarity") or "Unknown",
            style=get_str(row, "style") or "Standard",
            image_url=get_str(row, "image_url", "image"),
        )
