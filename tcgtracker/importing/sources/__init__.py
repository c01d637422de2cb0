from tcgtracker.importing.sources.dummy import DummyImporter
from tcgtracker.importing.sources.fab import FabDbImporter
from tcgtracker.importing.sources.lorcana import LorcanaJsonImporter
from tcgtracker.importing.sources.pokemon import PokemonTcgImporter
from tcgtracker.importing.sources.scryfall import ScryfallImporter
from tcgtracker.importing.sources.swu import SwuDbImporter

__all__ = [
    "DummyImporter",
    "FabDbImporter",
    "LorcanaJsonImporter",
    "PokemonTcgImporter",
    "ScryfallImporter",
    "SwuDbImporter",
]
