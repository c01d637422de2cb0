"""Base importer interface for external catalog sources."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import IO, Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.config import settings
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.reconcile import CatalogReconciler, dry_run_scope, read_file_rows

logger = logging.getLogger(__name__)


class SourceImporter(ABC):
    """
    Base class for catalog source importers.

    Subclasses pull records from their source (remote endpoint or uploaded
    file), map each one with ``to_record`` and hand them to ``reconcile``.
    Both entry points honour ``options.dry_run`` through the same code path.

    Attributes:
        key: Stable lowercase registry key
        display_name: Name shown in the import options list
        supported_games: Games this source populates
    """

    key: str = "unknown"
    display_name: str = "Base Importer"
    supported_games: tuple[str, ...] = ()

    @abstractmethod
    async def import_from_remote(
        self, session: AsyncSession, options: ImportOptions
    ) -> ImportSummary:
        """
        Fetch records from the source's remote endpoint and reconcile them.

        Args:
            session: Catalog session; committed only when not a dry run
            options: Import options (set code, limit, dry-run flag)

        Returns:
            ImportSummary: Counters and messages for this run.
        """

    @abstractmethod
    async def import_from_file(
        self, session: AsyncSession, file: IO[bytes], options: ImportOptions
    ) -> ImportSummary:
        """
        Reconcile records from an already-parsed upload buffer.

        Args:
            session: Catalog session; committed only when not a dry run
            file: Seekable buffer holding a CSV or JSON array
            options: Import options (limit, dry-run flag)

        Returns:
            ImportSummary: Counters and messages for this run.
        """

    @abstractmethod
    def to_record(self, row: Any) -> CatalogRecord:
        """Map one source row to a CatalogRecord. Raises ValueError for invalid rows."""

    def new_summary(self, options: ImportOptions) -> ImportSummary:
        return ImportSummary(source=self.key, dry_run=options.dry_run)

    async def reconcile(
        self,
        session: AsyncSession,
        rows: Iterable[Any],
        options: ImportOptions,
    ) -> ImportSummary:
        """Reconcile rows inside one transaction that is rolled back on dry runs."""
        summary = self.new_summary(options)
        async with dry_run_scope(session, options.dry_run):
            reconciler = CatalogReconciler(session, summary)
            processed = await reconciler.reconcile(rows, self.to_record, limit=options.limit)

        summary.add_info(f"Processed {processed} records for set={options.set_code or '(all)'}.")
        logger.info(
            "%s import (%s): %d created, %d updated, %d errors",
            self.key,
            "dry run" if options.dry_run else "apply",
            summary.created,
            summary.updated,
            summary.errors,
        )
        return summary

    async def reconcile_file(
        self, session: AsyncSession, file: IO[bytes], options: ImportOptions
    ) -> ImportSummary:
        """Read a parsed upload and reconcile its rows."""
        return await self.reconcile(session, read_file_rows(file), options)


class RemoteSourceImporter(SourceImporter):
    """
    Importer backed by an HTTP API.

    Provides a configured ``httpx.AsyncClient`` and the set-code precondition
    shared by every remote source.
    """

    base_url: str = ""
    set_code_example: str = ""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or self.base_url
        self.timeout = timeout if timeout is not None else settings.http_timeout

    def headers(self) -> dict[str, str]:
        return {"User-Agent": settings.user_agent, "Accept": "application/json"}

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers(),
            timeout=self.timeout,
            follow_redirects=True,
        )

    def require_set_code(self, options: ImportOptions) -> str:
        """Return the trimmed set code, or raise if the caller gave none."""
        set_code = (options.set_code or "").strip()
        if not set_code:
            example = f" (e.g., {self.set_code_example})" if self.set_code_example else ""
            raise ValueError(f"Set code is required for {self.display_name} imports{example}.")
        return set_code

    async def import_from_file(
        self, session: AsyncSession, file: IO[bytes], options: ImportOptions
    ) -> ImportSummary:
        return await self.reconcile_file(session, file, options)
