"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Upper bound on accumulator depth; the zero-hash table is generated up to here.
MAX_TREE_DEPTH = 32

# ASCII "shieldpool.commitment.v1" read as a big-endian integer (fits below 2**192)
DEFAULT_DOMAIN_TAG = int.from_bytes(b"shieldpool.commitment.v1", "big")


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PoolSettings(BaseSettings):
    """Protocol constants for a privacy pool instance."""

    model_config = SettingsConfigDict(env_prefix="POOL_")

    # Bound to every log entry of the pool's state transitions
    name: str = Field(default="main", min_length=1)
    tree_depth: int = Field(default=15, ge=1, le=MAX_TREE_DEPTH)
    max_amount: int = Field(default=100_000_000, gt=0, lt=2**64)
    max_inputs: int = Field(default=2, ge=1)
    max_outputs: int = Field(default=2, ge=1)

    # Changes every derived commitment, so it is never toggled implicitly.
    domain_separation: bool = False
    domain_tag: int = Field(default=DEFAULT_DOMAIN_TAG, gt=0)

    @property
    def capacity(self) -> int:
        """Number of leaves the accumulator can hold."""
        return 2**self.tree_depth

    @model_validator(mode="after")
    def check_amount_sum_fits(self) -> "PoolSettings":
        """Sums of amounts must stay inside the unsigned 64-bit domain."""
        if self.max_amount * max(self.max_inputs, self.max_outputs) >= 2**64:
            raise ValueError("max_amount times max_inputs/max_outputs overflows 64 bits")
        return self


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False
    service_name: str = "shieldpool"

    # Protocol
    pool: PoolSettings = Field(default_factory=PoolSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
