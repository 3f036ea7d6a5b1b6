"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        LIMCOIN_DB_HOST: Database host (default: localhost)
        LIMCOIN_DB_PORT: Database port (default: 5432)
        LIMCOIN_DB_DATABASE: Database name (default: limcoin)
        LIMCOIN_DB_USERNAME: Database user (default: limcoin)
        LIMCOIN_DB_PASSWORD: Database password (required in production)
        LIMCOIN_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        LIMCOIN_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="LIMCOIN_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="limcoin", description="Database name")
    username: str = Field(default="limcoin", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AuctionServiceSettings(BaseSettings):
    """Location of the remote Auction service.

    Environment variables:
        LIMCOIN_AUCTION_BASE_URL: Root of the auction resource
        LIMCOIN_AUCTION_TIMEOUT_SECONDS: Per-request timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="LIMCOIN_AUCTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8085/Encheres",
        description="Auction service base URL",
    )
    timeout_seconds: float = Field(
        default=10.0, gt=0, description="Request timeout in seconds"
    )


class ValuationServiceSettings(BaseSettings):
    """Location of the remote Item service.

    Environment variables:
        LIMCOIN_VALUATION_BASE_URL: Root of the item service
        LIMCOIN_VALUATION_TIMEOUT_SECONDS: Per-request timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="LIMCOIN_VALUATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8084",
        description="Item service base URL",
    )
    timeout_seconds: float = Field(
        default=10.0, gt=0, description="Request timeout in seconds"
    )


class AccountSettings(BaseSettings):
    """Account and token settings.

    Environment variables:
        LIMCOIN_ACCOUNTS_STARTING_GRANT: LimCoins given at registration (default: 1000)
        LIMCOIN_ACCOUNTS_JWT_SECRET: HMAC secret for access tokens
        LIMCOIN_ACCOUNTS_JWT_ALGORITHM: Signing algorithm (default: HS256)
        LIMCOIN_ACCOUNTS_TOKEN_TTL_MINUTES: Token lifetime (default: 60)
        LIMCOIN_ACCOUNTS_TOP_USERS_LIMIT: Leaderboard size (default: 5)
    """

    model_config = SettingsConfigDict(
        env_prefix="LIMCOIN_ACCOUNTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    starting_grant: int = Field(
        default=1000, ge=0, description="LimCoins credited on registration"
    )
    jwt_secret: SecretStr = Field(
        default=SecretStr("change-me-in-production"),
        description="Secret used to sign access tokens",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_issuer: str = Field(default="limcoin-users", description="JWT issuer claim")
    token_ttl_minutes: int = Field(
        default=60, ge=1, description="Access token lifetime in minutes"
    )
    top_users_limit: int = Field(
        default=5, ge=1, description="Number of users on the leaderboard"
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="LimCoin Users API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_format: Literal["auto", "console", "json"] = Field(
        default="auto", description="Log renderer: console, json, or auto by TTY"
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def auction_service(self) -> AuctionServiceSettings:
        """Get Auction service settings."""
        return get_auction_service_settings()

    @property
    def valuation_service(self) -> ValuationServiceSettings:
        """Get Item service settings."""
        return get_valuation_service_settings()

    @property
    def accounts(self) -> AccountSettings:
        """Get account settings."""
        return get_account_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_auction_service_settings() -> AuctionServiceSettings:
    """Get cached Auction service settings."""
    return AuctionServiceSettings()


@lru_cache
def get_valuation_service_settings() -> ValuationServiceSettings:
    """Get cached Item service settings."""
    return ValuationServiceSettings()


@lru_cache
def get_account_settings() -> AccountSettings:
    """Get cached account settings."""
    return AccountSettings()
