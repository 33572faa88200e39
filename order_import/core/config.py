"""
Centralized application configuration.

All settings are loaded from environment variables (or a `.env` file) using
Pydantic Settings, with defaults suitable for local development.
Per-shop remote credentials are NOT settings: they live in the
`remote_connection_configs` table owned by the host application.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings backed by Pydantic Settings.

    Values are read from environment variables with sensible defaults
    for development.
    """

    # === BASIC APP SETTINGS ===
    APP_NAME: str = "Ticimax-Shopify Order Import"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # === LOGGING ===
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: Optional[str] = None
    LOG_MAX_SIZE_MB: int = 10
    LOG_BACKUP_COUNT: int = 5
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # === SYNC LEDGER DATABASE ===
    LEDGER_DATABASE_URL: str = "sqlite+aiosqlite:///./order_import.db"
    LEDGER_ECHO_SQL: bool = False

    # === SHOPIFY (HOST PLATFORM) ===
    SHOPIFY_API_VERSION: str = "2025-04"
    SHOPIFY_MAX_RETRIES: int = 3
    SHOPIFY_REQUEST_TIMEOUT: int = 30
    SHOPIFY_MIN_REQUEST_INTERVAL: float = 0.5

    # === TICIMAX (REMOTE SOAP SERVICE) ===
    REMOTE_WSDL_TIMEOUT: int = 30
    REMOTE_OPERATION_TIMEOUT: int = 60
    REMOTE_PAGE_SIZE: int = 100
    REMOTE_SORT_FIELD: str = "ID"
    REMOTE_SORT_DIRECTION: str = "DESC"

    # === SYNC BEHAVIOUR ===
    SYNC_MAX_CONCURRENT_LOOKUPS: int = Field(default=5, ge=1)
    DEFAULT_COUNTRY_CODE: str = "TR"
    DEFAULT_CURRENCY: str = "TRY"
    ORDER_TAG_PREFIX: str = "ticimax"
    # Draft orders stay as drafts unless explicitly enabled
    COMPLETE_DRAFT_ORDERS: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validates the log level name."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validates the deployment environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {valid_envs}")
        return v.lower()

    @field_validator("REMOTE_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v):
        """Ticimax rejects pages larger than 500 records."""
        if not 1 <= v <= 500:
            raise ValueError("REMOTE_PAGE_SIZE must be between 1 and 500")
        return v

    @field_validator("REMOTE_SORT_DIRECTION")
    @classmethod
    def validate_sort_direction(cls, v):
        if v.upper() not in ("ASC", "DESC"):
            raise ValueError("REMOTE_SORT_DIRECTION must be ASC or DESC")
        return v.upper()

    @field_validator("DEFAULT_CURRENCY", "DEFAULT_COUNTRY_CODE")
    @classmethod
    def uppercase_codes(cls, v):
        return v.strip().upper()

    @property
    def is_production(self) -> bool:
        """Checks whether we run in production."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Checks whether we run in development."""
        return self.ENVIRONMENT == "development"

    @property
    def import_tag(self) -> str:
        """Tag put on every imported draft order."""
        return f"{self.ORDER_TAG_PREFIX}-import"

    def order_tag(self, order_number: str) -> str:
        """Tag that embeds the source order number for traceability."""
        return f"{self.ORDER_TAG_PREFIX}-{order_number}"

    def shopify_graphql_url(self, shop_url: str) -> str:
        """
        Builds the Admin GraphQL endpoint for a shop.

        Args:
            shop_url: Shop domain, with or without protocol

        Returns:
            str: GraphQL endpoint URL
        """
        if not shop_url.startswith(("http://", "https://")):
            shop_url = f"https://{shop_url}"
        return f"{shop_url.rstrip('/')}/admin/api/{self.SHOPIFY_API_VERSION}/graphql.json"


@lru_cache()
def get_settings() -> Settings:
    """
    Returns the cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


settings = get_settings()


def reload_settings() -> Settings:
    """
    Reloads configuration from the environment (useful for testing).

    Returns:
        Settings: Fresh settings instance
    """
    get_settings.cache_clear()
    return get_settings()
