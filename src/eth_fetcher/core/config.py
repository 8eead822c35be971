"""Application configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from eth_fetcher.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="eth-fetcher", description="Application name")
    environment: Literal["development", "testing", "staging", "production"] = Field(
        default="development", description="Runtime environment"
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # API
    api_prefix: str = Field(default="/lime", description="API route prefix")
    api_host: str = Field(default="0.0.0.0", description="HTTP bind host")
    api_port: int = Field(default=8080, description="HTTP bind port")

    # Database
    db_host: str = Field(default="localhost", description="PostgreSQL host")
    db_port: int = Field(default=5432, description="PostgreSQL port")
    db_user: str = Field(default="postgres", description="PostgreSQL user")
    db_password: str = Field(default="postgres", description="PostgreSQL password")
    db_name: str = Field(default="postgres", description="PostgreSQL database name")
    db_connection_url: str | None = Field(
        default=None, description="Full database URL, overrides the db_* fields"
    )
    db_auto_create: bool = Field(
        default=True, description="Create missing tables on startup"
    )

    # Ethereum node
    eth_node_url: str = Field(
        default="http://localhost:8545", description="Node HTTP endpoint"
    )
    eth_socket_url: str = Field(
        default="ws://localhost:8546", description="Node WebSocket endpoint"
    )
    rpc_max_retries: int = Field(default=3, description="Retries per read query")
    rpc_retry_delay: float = Field(
        default=1.0, description="Base delay between read retries in seconds"
    )

    # Contract and signing
    person_info_contract_address: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="SimplePersonInfo contract address",
    )
    private_key: str = Field(default="", description="Signing key for contract writes")
    tx_gas_limit: int = Field(default=300_000, description="Fixed gas limit for writes")
    confirmation_timeout: float = Field(
        default=300.0, description="Seconds to wait for a receipt after submission"
    )
    confirmation_poll_interval: float = Field(
        default=1.0, description="Receipt polling interval in seconds"
    )

    # Event ingestion
    ingestor_enabled: bool = Field(
        default=True, description="Run the PersonInfoUpdated ingestor"
    )
    ingestor_max_reconnect_attempts: int = Field(
        default=5, description="Re-subscribe attempts after a subscription error (0 = stop)"
    )
    ingestor_reconnect_delay: float = Field(
        default=2.0, description="Base reconnect delay in seconds"
    )

    # Authentication
    jwt_secret: str = Field(
        default="dev-secret-key-change-in-production",
        description="Secret for signing tokens and hashing passwords",
    )
    access_token_expire_minutes: int = Field(
        default=24 * 60, description="Access token expiration in minutes"
    )
    default_users: list[str] = Field(
        default=["alice", "bob", "carol", "dave"],
        description="Users seeded at startup, password equals username",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="json", description="Log output format"
    )

    @computed_field
    @property
    def database_url(self) -> str:
        """Construct async database URL from components."""
        if self.db_connection_url:
            url = self.db_connection_url
            if url.startswith("postgres://"):
                url = "postgresql://" + url[len("postgres://"):]
            if url.startswith("postgresql://"):
                url = "postgresql+asyncpg://" + url[len("postgresql://"):]
            return url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @computed_field
    @property
    def has_signing_key(self) -> bool:
        """Check whether a signing key is configured."""
        return bool(self.private_key.strip())

    def require_signing_key(self) -> str:
        """Return the signing key normalised with a 0x prefix.

        Raises:
            ConfigurationError: No key configured
        """
        key = self.private_key.strip()
        if not key:
            raise ConfigurationError("PRIVATE_KEY must be set to submit transactions")
        return key if key.startswith("0x") else f"0x{key}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
