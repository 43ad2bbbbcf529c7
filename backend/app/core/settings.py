from pydantic import BaseModel
import os

class Settings(BaseModel):
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./tribe_market.db")
    marketcheck_api_key: str | None = os.getenv("MARKETCHECK_API_KEY")
    marketcheck_base_url: str = os.getenv("MARKETCHECK_BASE_URL", "https://api.marketcheck.com/v2")
    marketcheck_timeout: float = float(os.getenv("MARKETCHECK_TIMEOUT", "15"))
    marketcheck_rows: int = int(os.getenv("MARKETCHECK_ROWS", "40"))
    marketcheck_default_zip: str = os.getenv("MARKETCHECK_DEFAULT_ZIP", "10523")
    marketcheck_default_radius: int = int(os.getenv("MARKETCHECK_DEFAULT_RADIUS", "25"))
    listing_cache_ttl_seconds: float = float(os.getenv("LISTING_CACHE_TTL_SECONDS", "600"))
    listing_cache_capacity: int = int(os.getenv("LISTING_CACHE_CAPACITY", "1024"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
