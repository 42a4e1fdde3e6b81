"""Settings loaded from environment variables.

Environment Configuration:
    PUBMANIFEST_ENV: Deployment environment (local | test | prod)
    PUBMANIFEST_LOG_JSON: Emit JSON logs (default true)

Fetch Configuration:
    PUBMANIFEST_FETCH_TIMEOUT_S: Timeout for a single fetch, in seconds
    PUBMANIFEST_MAX_FETCH_BYTES: Upper bound on a fetched body
    PUBMANIFEST_USER_AGENT: User-Agent header sent with every fetch
    PUBMANIFEST_FOLLOW_REDIRECTS: Follow HTTP redirects when fetching
    PUBMANIFEST_MIN_FETCH_PORT: Explicit ports at or below this value are refused
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

# Smallest body limit accepted from configuration
MIN_FETCH_BYTES_FLOOR = 1024


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """Processing configuration.

    Validation rules:
    - PUBMANIFEST_FETCH_TIMEOUT_S must be positive
    - PUBMANIFEST_MAX_FETCH_BYTES must be at least MIN_FETCH_BYTES_FLOOR
    - PUBMANIFEST_MIN_FETCH_PORT must be a valid port number
    """

    pubmanifest_env: Environment = Field(default=Environment.LOCAL, alias="PUBMANIFEST_ENV")
    log_json: bool = Field(default=True, alias="PUBMANIFEST_LOG_JSON")

    fetch_timeout_s: float = Field(default=10.0, alias="PUBMANIFEST_FETCH_TIMEOUT_S")
    max_fetch_bytes: int = Field(default=5 * 1024 * 1024, alias="PUBMANIFEST_MAX_FETCH_BYTES")  # 5 MB
    user_agent: str = Field(default="pubmanifest/0.1", alias="PUBMANIFEST_USER_AGENT")
    follow_redirects: bool = Field(default=True, alias="PUBMANIFEST_FOLLOW_REDIRECTS")
    min_fetch_port: int = Field(default=1024, alias="PUBMANIFEST_MIN_FETCH_PORT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_fetch_settings(self) -> "Settings":
        """Reject fetch limits that would make every fetch fail."""
        if self.fetch_timeout_s <= 0:
            raise ValueError("PUBMANIFEST_FETCH_TIMEOUT_S must be positive")
        if self.max_fetch_bytes < MIN_FETCH_BYTES_FLOOR:
            raise ValueError(
                f"PUBMANIFEST_MAX_FETCH_BYTES must be at least {MIN_FETCH_BYTES_FLOOR}"
            )
        if not 0 <= self.min_fetch_port <= 65535:
            raise ValueError("PUBMANIFEST_MIN_FETCH_PORT must be between 0 and 65535")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
