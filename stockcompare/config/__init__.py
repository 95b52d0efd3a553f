"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Market Data
    # ======================
    MARKET_DATA_PROVIDER: str = "yahoo"
    MARKET_DATA_TIMEOUT_SECONDS: float = 10.0
    MARKET_DATA_CACHE_TTL: int = 60
    YAHOO_CHART_BASE_URL: str = "https://query1.finance.yahoo.com"

    # Day-granularity comparisons happen in this timezone
    REFERENCE_TIMEZONE: str = "America/New_York"

    # Nearest sample farther than this from the anchor is treated as missing
    MAX_ANCHOR_GAP_DAYS: int = 10

    # ======================
    # Company data (Finnhub)
    # ======================
    FINNHUB_API_KEY: Optional[str] = None
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"

    # ======================
    # Treemap layout
    # ======================
    TREEMAP_MIN_VISIBLE_PCT: float = 8.0
    TREEMAP_LARGE_PCT: float = 40.0
    TREEMAP_TALL_PCT: float = 30.0
    TREEMAP_SMALL_PCT: float = 15.0

    # ======================
    # Portfolio sessions
    # ======================
    # Least recently used sessions beyond this are dropped
    AGGREGATOR_MAX_SESSIONS: int = 256

    # ======================
    # Watchlist
    # ======================
    WATCHLIST_FILE: str = ""

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
