"""Tests for the import orchestrator."""

import io
import json
from typing import IO, Any

import httpx
import pytest
import respx
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.db.operations import count_cards
from tcgtracker.importing.base import SourceImporter
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.orchestrator import ImportOrchestrator, ImportRequest, effective_limit
from tcgtracker.importing.registry import ImporterRegistry
from tcgtracker.importing.sources import DummyImporter, ScryfallImporter
from tcgtracker.models.failure import (
    FailureKind,
    FileParseError,
    ImportFailedError,
    InvalidLimitError,
    SourceNotFoundError,
)


class ExplodingImporter(SourceImporter):
    """Importer whose storage layer always fails."""

    key = "exploding"
    display_name = "Exploding"
    supported_games = ("Test Game",)

    async def import_from_remote(
        self, session: AsyncSession, options: ImportOptions
    ) -> ImportSummary:
        raise RuntimeError("database unavailable")

    async def import_from_file(
        self, session: AsyncSession, file: IO[bytes], options: ImportOptions
    ) -> ImportSummary:
        raise RuntimeError("database unavailable")

    def to_record(self, row: Any) -> CatalogRecord:
        raise NotImplementedError


def upload(content: bytes, filename: str) -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


@pytest.fixture
def orchestrator(registry: ImporterRegistry) -> ImportOrchestrator:
    return ImportOrchestrator(registry)


class TestEffectiveLimit:
    def test_default(self) -> None:
        assert effective_limit(None) == 100

    @pytest.mark.parametrize("limit", [1, 500, 1000])
    def test_in_range(self, limit: int) -> None:
        assert effective_limit(limit) == limit

    @pytest.mark.parametrize("limit", [-1, 0, 1001, 5000])
    def test_out_of_range(self, limit: int) -> None:
        with pytest.raises(InvalidLimitError) as exc_info:
            effective_limit(limit)

        assert exc_info.value.errors == {"limit": ["limit must be between 1 and 1000"]}


class TestOptions:
    def test_sorted_by_display_name(self, orchestrator: ImportOrchestrator) -> None:
        sources = orchestrator.options().sources

        assert [s.display_name for s in sources] == [
            "Dummy",
            "FaB DB",
            "Lorcana JSON",
            "Pokemon TCG",
            "Scryfall",
            "SWU DB",
        ]

    def test_canonical_and_registry_keys(self, orchestrator: ImportOrchestrator) -> None:
        by_name = {s.display_name: s for s in orchestrator.options().sources}

        pokemon = by_name["Pokemon TCG"]
        assert (pokemon.key, pokemon.importer_key) == ("PokemonTcg", "pokemon")
        assert [s.code for s in pokemon.sets] == ["base1", "swsh12", "sv3"]

        lorcana = by_name["Lorcana JSON"]
        assert (lorcana.key, lorcana.importer_key) == ("LorcanaJSON", "lorcanajson")
        assert lorcana.games == ["Disney Lorcana"]
        assert by_name["Scryfall"].sets == []

    def test_games_deduplicated_case_insensitively(self) -> None:
        class MultiGameImporter(DummyImporter):
            key = "multi"
            display_name = "Multi"
            supported_games = ("Magic", "magic", "Lorcana")

        options = ImportOrchestrator(ImporterRegistry([MultiGameImporter()])).options()

        assert options.sources[0].games == ["Magic", "Lorcana"]


class TestDryRun:
    async def test_remote_preview(
        self, orchestrator: ImportOrchestrator, session: AsyncSession
    ) -> None:
        preview = await orchestrator.dry_run(session, ImportRequest(source="dummy", set_code="BETA"))

        assert preview.summary.new == 1
        assert preview.rows[0].status == "New"
        assert preview.rows[0].set == "BETA"
        assert preview.rows[-1].messages == ["Dummy importer ran"]
        assert await count_cards(session) == 0

    async def test_unknown_source(
        self, orchestrator: ImportOrchestrator, session: AsyncSession
    ) -> None:
        with pytest.raises(SourceNotFoundError):
            await orchestrator.dry_run(session, ImportRequest(source="yugioh"))

    async def test_limit_checked_before_import(
        self, orchestrator: ImportOrchestrator, session: AsyncSession
    ) -> None:
        with pytest.raises(InvalidLimitError):
            await orchestrator.dry_run(session, ImportRequest(source="dummy", limit=0))

    async def test_file_limit_applies_to_rows(
        self, orchestrator: ImportOrchestrator, session: AsyncSession
    ) -> None:
        rows = [{"name": f"Card {i}", "set": "TST", "number": str(i)} for i in range(5)]
        request = ImportRequest(
            source="dummy",
            limit=2,
            file=upload(json.dumps(rows).encode(), "cards.json"),
        )

        preview = await orchestrator.dry_run(session, request)

        assert preview.summary.new == 4  # two cards, two printings
        assert "Processed 2 records for set=(all)." in preview.rows[-1].messages

    async def test_set_code_required_becomes_import_failure(
        self, orchestrator: ImportOrchestrator, session: AsyncSession
    ) -> None:
        with pytest.raises(ImportFailedError) as exc_info:
            await orchestrator.dry_run(session, ImportRequest(source="scryfall"))

        error = exc_info.value
        assert error.kind == FailureKind.IMPORT_FAILED
        assert error.message == "Import failed"
        assert error.detail.startswith("Set code is required for Scryfall imports")
        assert list(error.errors) == ["request"]

    @respx.mock
    async def test_remote_http_failure(self, session: AsyncSession) -> None:
        respx.get("https://scryfall.test/cards/search").mock(return_value=httpx.Response(500))
        orchestrator = ImportOrchestrator(
            ImporterRegistry([ScryfallImporter(base_url="https://scryfall.test")])
        )

        with pytest.raises(ImportFailedError):
            await orchestrator.dry_run(session, ImportRequest(source="mtg", set_code="DMU"))


class TestApply:
    async def test_apply_counters(
        self, orchestrator: ImportOrchestrator, session: AsyncSession, sample_csv: bytes
    ) -> None:
        result = await orchestrator.apply(
            session, ImportRequest(source="dummy", file=upload(sample_csv, "cards.csv"))
        )

        assert (result.created, result.updated, result.skipped, result.invalid) == (6, 0, 0, 0)
        assert await count_cards(session) == 3

    async def test_apply_validates_whole_file(
        self, orchestrator: ImportOrchestrator, session: AsyncSession
    ) -> None:
        """A structural problem past the preview limit still blocks apply."""
        content = json.dumps(
            [{"name": "A", "set": "TST", "number": "1"}, {"set": "TST", "number": "2"}]
        ).encode()

        preview = await orchestrator.dry_run(
            session, ImportRequest(source="dummy", limit=1, file=upload(content, "cards.json"))
        )
        assert preview.summary.new == 2

        with pytest.raises(FileParseError, match="Item 2 missing 'name'."):
            await orchestrator.apply(
                session, ImportRequest(source="dummy", limit=1, file=upload(content, "cards.json"))
            )

    async def test_importer_failure_rolls_back(self, session: AsyncSession) -> None:
        orchestrator = ImportOrchestrator(ImporterRegistry([ExplodingImporter()]))

        with pytest.raises(ImportFailedError) as exc_info:
            await orchestrator.apply(
                session,
                ImportRequest(source="exploding", file=upload(b"name,set,number\n", "c.csv")),
            )

        assert exc_info.value.errors == {"file": ["database unavailable"]}
        assert exc_info.value.detail == "database unavailable"
