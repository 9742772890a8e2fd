import logging
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from canews.models.enums import SportsDatePolicy


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        None, description="URL for the Supabase project."
    )
    supabase_key: Optional[str] = Field(
        None, description="Anon key for the Supabase project."
    )
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key for Supabase (use with caution!)."
    )
    store_connect_attempts: int = Field(
        5, ge=1, description="Attempts made when creating the Supabase client."
    )
    store_connect_wait_seconds: float = Field(
        3.0, ge=0, description="Seconds to wait between client creation attempts."
    )

    # Collection (table) names, one per domain
    sports_table: str = "sports"
    general_table: str = "general"
    academic_table: str = "academic"
    results_table: str = "results"
    roster_table: str = "roster"

    # Normalization Settings
    sports_date_policy: SportsDatePolicy = Field(
        SportsDatePolicy.UPCOMING,
        description="'upcoming' keeps today-and-future sports events, 'all' keeps everything.",
    )
    assumed_year_window_days: int = Field(
        30,
        ge=0,
        description="MM-DD dates further than this in the past roll over to next year.",
    )

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    def table_for(self, domain: str) -> str:
        """Returns the configured table name for a domain value."""
        return getattr(self, f"{domain}_table")


VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def load_settings() -> AppSettings:
    """Reads settings from the environment and ``.env``.

    An unknown LOG_LEVEL degrades to INFO. Any other invalid value exits.
    """
    try:
        loaded = AppSettings()
    except ValidationError as e:
        logging.error(f"Invalid application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.") from e

    level = loaded.log_level.upper()
    if level not in VALID_LOG_LEVELS:
        logging.warning(f"Unknown LOG_LEVEL '{loaded.log_level}', falling back to INFO.")
        level = "INFO"
    loaded.log_level = level
    return loaded


settings: AppSettings = load_settings()
