from tcgtracker.api.health import router as health_router
from tcgtracker.api.imports import router as import_router

__all__ = [
    "health_router",
    "import_router",
]
