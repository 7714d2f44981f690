from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CardLedger"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/cardledger"

    cardmarket_price_guide_url: str = (
        "https://downloads.s3.cardmarket.com/productCatalog/priceGuide/price_guide_1.json"
    )

    scryfall_base_url: str = "https://api.scryfall.com"
    scryfall_requests_per_second: int = 8

    edhrec_base_url: str = "https://edhrec.com"
    edhrec_build_id_ttl_seconds: int = 24 * 60 * 60

    http_timeout_seconds: float = 30.0


settings = Settings()


# =============================================================================
# PERSISTENCE LIMITS
# =============================================================================

# Price guides are inserted in batches of this many rows
PRICE_INSERT_CHUNK_SIZE = 1000

# Largest accepted collection export (bytes)
MAX_IMPORT_SIZE = 10 * 1024 * 1024

USER_AGENT = "CardLedger/1.0"
