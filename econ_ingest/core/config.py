"""
Configuration module with strict validation.

Key principles:
- APP STARTUP does NOT require any provider API key
- A provider whose key is required but missing is marked unavailable, not fatal
- Scheduler cadence, timeouts and retry policy are configurable
- Safe defaults for all optional settings
"""
from typing import Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation.

    Loads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database (REQUIRED for startup)
    database_url: str = Field(
        ...,
        description="SQLAlchemy connection URL for the indicator store"
    )

    # Provider credentials (OPTIONAL for startup)
    fred_api_key: Optional[str] = Field(
        default=None,
        description="FRED API key - required for FRED ingestion"
    )

    alpha_vantage_api_key: Optional[str] = Field(
        default=None,
        description="Alpha Vantage API key - required for market data ingestion"
    )

    bls_api_key: Optional[str] = Field(
        default=None,
        description="BLS API key - optional but recommended for higher quotas"
    )

    rapidapi_key: Optional[str] = Field(
        default=None,
        description="RapidAPI key - required for Bull/Bear sentiment ingestion"
    )

    finnhub_api_key: Optional[str] = Field(
        default=None,
        description="Finnhub API key - required for index, forex and crypto ingestion"
    )

    fmp_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("fmp_api_key", "financial_modeling_prep_api_key"),
        description="Financial Modeling Prep key - required for commodity and yield curve ingestion"
    )

    sec_user_agent: str = Field(
        default="EconIngest data-team@example.com",
        description="User-Agent sent to SEC EDGAR (must identify the requester)"
    )

    # HTTP client behaviour
    max_concurrency: int = Field(
        default=2,
        ge=1,
        le=50,
        description="Maximum concurrent requests per provider client"
    )

    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for a failed HTTP request"
    )

    retry_backoff_factor: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Exponential backoff factor for HTTP retries"
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout for provider calls"
    )

    # Scheduler
    scheduler_enabled: bool = Field(
        default=True,
        description="Start the background sync scheduler with the application"
    )

    scheduler_timezone: str = Field(
        default="America/New_York",
        description="Timezone used to evaluate cron schedules"
    )

    sync_job_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Hard wall-clock limit for a single sync job run"
    )

    sync_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Automatic retries of a failed scheduled run"
    )

    sync_retry_delay_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Base retry delay; the n-th retry waits delay * n"
    )

    sync_history_size: int = Field(
        default=50,
        ge=1,
        description="Number of run records kept for status reporting"
    )

    # Freshness windows used when a sync is not forced
    freshness_daily_hours: float = Field(default=1.0, ge=0)
    freshness_default_hours: float = Field(default=6.0, ge=0)

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Testing
    run_integration_tests: bool = Field(
        default=False,
        description="Enable integration tests (requires API keys and network)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    def get_api_key(self, config_key: Optional[str]) -> Optional[str]:
        """
        Look up a provider credential by its settings field name.

        Returns:
            Optional[str]: The key if configured (blank values count as missing)
        """
        if not config_key:
            return None
        value = getattr(self, config_key, None)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None


# Lazily created instance for entry points (CLI, FastAPI app).
# Core services receive Settings explicitly.
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Reset the process-wide settings instance.

    Useful for testing to ensure clean state between tests.
    """
    global _settings
    _settings = None
