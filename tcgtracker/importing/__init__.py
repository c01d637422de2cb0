"""
Catalog import pipeline.

Ingests card data from remote sources or uploaded files and reconciles it
into the catalog, either as a dry run or committed.
"""

from tcgtracker.importing.base import RemoteSourceImporter, SourceImporter
from tcgtracker.importing.file_parser import FileParser, FileParseResult
from tcgtracker.importing.models import CatalogRecord, ImportOptions, ImportSummary
from tcgtracker.importing.orchestrator import ImportOrchestrator, ImportRequest
from tcgtracker.importing.preview import build_preview
from tcgtracker.importing.reconcile import CatalogReconciler, dry_run_scope
from tcgtracker.importing.registry import (
    CANONICAL_TO_IMPORTER_KEY,
    SOURCE_ALIASES,
    ImporterRegistry,
    build_default_registry,
    canonical_source,
    resolve_importer,
)

__all__ = [
    "CANONICAL_TO_IMPORTER_KEY",
    "SOURCE_ALIASES",
    "CatalogRecord",
    "CatalogReconciler",
    "FileParseResult",
    "FileParser",
    "ImportOptions",
    "ImportOrchestrator",
    "ImportRequest",
    "ImportSummary",
    "ImporterRegistry",
    "RemoteSourceImporter",
    "SourceImporter",
    "build_default_registry",
    "build_preview",
    "canonical_source",
    "dry_run_scope",
    "resolve_importer",
]
