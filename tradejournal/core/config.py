"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here; no scattered magic strings.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        database_url: SQLAlchemy URL of the journal database.
        database_echo: Log every SQL statement at INFO.
        jwt_secret: Secret used to sign session tokens.
        jwt_algorithm: Signing algorithm for session tokens.
        access_token_expire_minutes: Lifetime of a session token.
        bcrypt_rounds: Work factor of password hashes.
        openai_api_key: API key of the hosted LLM.
        openai_model: Model used for insight generation.
        quote_api_base_url: Base URL of the chart/quote API.
        quote_cache_ttl_seconds: How long a fetched quote is reused.
        insights_cache_ttl_seconds: How long generated insights are reused.
        stats_cache_ttl_seconds: How long trade statistics are reused.
        rate_limit_storage_uri: Backend of the rate limiter
            (``memory://`` or ``redis://host:port``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "TradeJournal"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./tradejournal.db"
    database_echo: bool = False

    # Session tokens
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 12

    # LLM
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.4
    openai_max_tokens: int = 2000
    openai_timeout_seconds: float = 60.0

    # Stock quotes
    quote_api_base_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    quote_api_timeout_seconds: float = 10.0
    quote_cache_ttl_seconds: int = 300

    # Caches
    insights_cache_ttl_seconds: int = 300
    stats_cache_ttl_seconds: int = 60

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    rate_limit_standard: str = "60/minute"
    rate_limit_auth: str = "10/minute"
    rate_limit_ai: str = "10/minute"
    rate_limit_strict: str = "5/minute"


settings = Settings()
