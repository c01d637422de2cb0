from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "TCG Tracker"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/tcgtracker"
    db_pool_size: int = 5

    # Outbound HTTP for remote catalog sources
    http_timeout: float = 300.0
    user_agent: str = "TCGTracker/1.0"

    scryfall_base_url: str = "https://api.scryfall.com"
    lorcana_base_url: str = "https://raw.githubusercontent.com/LorcanaJSON/LorcanaJSON/main"
    pokemon_base_url: str = "https://api.pokemontcg.io/v2"
    pokemon_api_key: str = ""
    fabdb_base_url: str = "https://api.fabdb.net"
    fabdb_api_key: str = ""
    swudb_base_url: str = "https://www.swu-db.com"


settings = Settings()


# =============================================================================
# IMPORT PREVIEW LIMITS
# =============================================================================

# Records considered when the caller gives no limit
DEFAULT_PREVIEW_LIMIT = 100

# Accepted range for a caller-supplied limit; apply parses files at the max
MIN_PREVIEW_LIMIT = 1
MAX_PREVIEW_LIMIT = 1000
