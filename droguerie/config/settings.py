"""
Droguerie Jamal Data Tooling
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, `.env` files, validation, and type safety.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class SourceStoreSettings(BaseSettings):
    """SQLite source store (the storefront's original file database)"""

    model_config = SettingsConfigDict(env_prefix="SQLITE_", env_file=".env", extra="ignore")

    path: Path = Field(default=Path("database.sqlite"), description="SQLite database file")
    echo: bool = Field(default=False, description="Echo SQL queries")

    @property
    def async_url(self) -> str:
        """Async database URL for aiosqlite"""
        return f"sqlite+aiosqlite:///{self.path}"

    @property
    def read_only_url(self) -> str:
        """Async URL opening the existing file read-only; a missing file fails to connect"""
        return f"sqlite+aiosqlite:///file:{self.path}?mode=ro&uri=true"


class DestinationStoreSettings(BaseSettings):
    """MySQL destination store"""

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=".env", extra="ignore")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=3306, description="Database port")
    user: str = Field(default="root", description="Database user")
    password: SecretStr = Field(default="", description="Database password")
    name: str = Field(default="droguerie_jamal", description="Database name")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, description="Full SQLAlchemy URL (overrides host/port)")

    def get_url(self) -> str:
        """Async database URL - uses DB_URL if set, otherwise builds an aiomysql URL"""
        if self.url:
            return self.url
        return URL.create(
            drivername="mysql+aiomysql",
            username=self.user,
            password=self.password.get_secret_value() or None,
            host=self.host,
            port=self.port,
            database=self.name,
            query={"charset": "utf8mb4"},
        ).render_as_string(hide_password=False)


class AdminSettings(BaseSettings):
    """Admin credential seeding"""

    model_config = SettingsConfigDict(env_prefix="ADMIN_", env_file=".env", extra="ignore")

    email: str = Field(default="admin@drogueriejamal.ma", description="Designated admin email")
    password: SecretStr = Field(
        default="DroguerieJamal2024!SecureAdmin",
        description="Admin plaintext password (printed once, stored only as a hash)",
    )
    display_name: str = Field(default="Admin Droguerie Jamal", description="Name for a newly created admin")
    bcrypt_rounds: int = Field(default=12, description="bcrypt cost factor")
    panel_url: str = Field(default="http://localhost:5173/admin", description="Admin panel address")

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_rounds(cls, v: int) -> int:
        """bcrypt accepts log2 rounds between 4 and 31"""
        if not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v


class SmokeTestSettings(BaseSettings):
    """HTTP flow tester targets"""

    model_config = SettingsConfigDict(env_prefix="SMOKE_", env_file=".env", extra="ignore")

    api_base_url: str = Field(default="http://localhost:5000/api", description="Storefront API base URL")
    client_base_url: str = Field(default="http://localhost:5173", description="Storefront frontend URL")
    timeout_ms: int = Field(default=5000, description="Per-call timeout in milliseconds")
    listing_timeout_ms: int = Field(default=10000, description="Timeout for the product listing call")
    product_id: int = Field(default=1, description="Product used for detail, cart and order checks")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def listing_timeout_seconds(self) -> float:
        return self.listing_timeout_ms / 1000


class LoggingSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="console", alias="LOG_FORMAT", description="Log format: console or json")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        allowed = ["console", "json"]
        if v.lower() not in allowed:
            raise ValueError(f"Log format must be one of: {allowed}")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="droguerie-tools", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    source: SourceStoreSettings = Field(default_factory=SourceStoreSettings)
    destination: DestinationStoreSettings = Field(default_factory=DestinationStoreSettings)
    admin: AdminSettings = Field(default_factory=AdminSettings)
    smoke: SmokeTestSettings = Field(default_factory=SmokeTestSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
