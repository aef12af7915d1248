"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Every field has a default so the app boots without a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # DATA SOURCES
    # ===================
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the operator and product config files"
    )
    users_file: str = Field(
        default="users.json",
        description="Operator directory file name (JSON list)"
    )
    products_file: str = Field(
        default="products.xlsx",
        description="Product workbook file name (one sheet per store)"
    )

    # ===================
    # EXPORT
    # ===================
    export_layout: str = Field(
        default="flat",
        pattern="^(flat|with_header)$",
        description="Default export layout: item table only, or metadata rows first"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Origins allowed to call the API"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def users_path(self) -> Path:
        """Full path of the operator directory file."""
        return self.data_dir / self.users_file

    @property
    def products_path(self) -> Path:
        """Full path of the product workbook."""
        return self.data_dir / self.products_file


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
