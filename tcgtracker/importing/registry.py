"""
Importer registry and source-name resolution.

A source name goes through two read-only tables:

    user spelling --SOURCE_ALIASES--> canonical source --CANONICAL_TO_IMPORTER_KEY--> registry key

The canonical name is what the options endpoint shows; the registry key is
what the importer declares. Names missing from either table pass through
unchanged, so the registry stays the only authority on which sources exist.
"""

from collections.abc import Iterable
from types import MappingProxyType

from tcgtracker.importing.base import SourceImporter
from tcgtracker.importing.sources import (
    DummyImporter,
    FabDbImporter,
    LorcanaJsonImporter,
    PokemonTcgImporter,
    ScryfallImporter,
    SwuDbImporter,
)
from tcgtracker.models.failure import SourceNotFoundError


def _casefold_keys(table: dict[str, str]) -> MappingProxyType[str, str]:
    return MappingProxyType({key.lower(): value for key, value in table.items()})


SOURCE_ALIASES = _casefold_keys(
    {
        "LorcanaJSON": "LorcanaJSON",
        "lorcana-json": "LorcanaJSON",
        "lorcana": "LorcanaJSON",
        "disneylorcana": "LorcanaJSON",
        "FabDb": "FabDb",
        "fab": "FabDb",
        "fleshandblood": "FabDb",
        "Scryfall": "Scryfall",
        "mtg": "Scryfall",
        "magic": "Scryfall",
        "PokemonTcg": "PokemonTcg",
        "pokemon": "PokemonTcg",
        "ptcg": "PokemonTcg",
        "SwuDb": "SwuDb",
        "swu": "SwuDb",
        "Dummy": "Dummy",
    }
)

CANONICAL_TO_IMPORTER_KEY = _casefold_keys(
    {
        "LorcanaJSON": "lorcanajson",
        "FabDb": "fabdb",
        "Scryfall": "scryfall",
        "PokemonTcg": "pokemon",
        "SwuDb": "swudb",
        "Dummy": "dummy",
    }
)

# Canonical source -> ((code, name), ...) offered in the import UI
STATIC_SET_OPTIONS: MappingProxyType[str, tuple[tuple[str, str], ...]] = MappingProxyType(
    {
        "lorcanajson": (
            ("TFC", "The First Chapter"),
            ("ROTF", "Rise of the Floodborn"),
            ("ITI", "Into the Inklands"),
            ("URR", "Ursula's Return"),
        ),
        "fabdb": (
            ("WTR", "Welcome to Rathe"),
            ("ARC", "Arcane Rising"),
            ("MON", "Monarch"),
            ("DYN", "Dynasty"),
            ("MST", "Part the Mistveil"),
        ),
        "pokemontcg": (
            ("base1", "Base Set"),
            ("swsh12", "Silver Tempest"),
            ("sv3", "Obsidian Flames"),
        ),
    }
)


def canonical_source(source: str) -> str:
    """Map a user-facing spelling to its canonical source name (pass-through if unknown)."""
    return SOURCE_ALIASES.get(source.lower(), source)


def importer_key_for(canonical: str) -> str:
    """Map a canonical source name to its registry key (pass-through if unknown)."""
    return CANONICAL_TO_IMPORTER_KEY.get(canonical.lower(), canonical)


def set_options_for(canonical: str) -> tuple[tuple[str, str], ...]:
    return STATIC_SET_OPTIONS.get(canonical.lower(), ())


class ImporterRegistry:
    """
    Fixed set of importers keyed by their lower-cased ``key``.

    Built once at startup and never mutated afterwards.
    """

    def __init__(self, importers: Iterable[SourceImporter]):
        by_key: dict[str, SourceImporter] = {}
        for importer in importers:
            key = importer.key.lower()
            if key in by_key:
                raise ValueError(f"Duplicate importer key: {importer.key}")
            by_key[key] = importer
        self._by_key = MappingProxyType(by_key)

    def get(self, key: str) -> SourceImporter | None:
        return self._by_key.get(key.lower())

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._by_key)

    @property
    def all(self) -> tuple[SourceImporter, ...]:
        return tuple(self._by_key.values())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._by_key

    def __len__(self) -> int:
        return len(self._by_key)


def resolve_importer(registry: ImporterRegistry, source: str | None) -> SourceImporter:
    """
    Resolve a raw source name to its importer.

    Raises:
        SourceNotFoundError: If the name is blank or no importer matches
    """
    raw = (source or "").strip()
    if not raw:
        raise SourceNotFoundError(source)

    importer = registry.get(importer_key_for(canonical_source(raw)))
    if importer is None:
        raise SourceNotFoundError(source)
    return importer


def build_default_registry() -> ImporterRegistry:
    """Construct every bundled importer."""
    return ImporterRegistry(
        [
            DummyImporter(),
            FabDbImporter(),
            LorcanaJsonImporter(),
            PokemonTcgImporter(),
            ScryfallImporter(),
            SwuDbImporter(),
        ]
    )
