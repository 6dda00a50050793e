"""Environment-driven settings for stateless-auth.

Every field can be set with a ``STATELESS_AUTH_`` prefixed environment
variable (e.g. ``STATELESS_AUTH_SECRET_KEY``) or in a ``.env`` file.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["LOG_LEVELS", "MissingSecretError", "Settings", "get_settings"]


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class MissingSecretError(RuntimeError):
    """No secret key was passed in and none is configured."""


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STATELESS_AUTH_",
        env_file=".env",
        extra="ignore",
    )

    # Should carry at least 128 bits of entropy
    secret_key: SecretStr | None = None

    token_lifetime: int = Field(60, description="Default token lifetime in seconds")
    xsrf_lifetime: int = Field(3600, description="Lifetime of tokens embedded in forms")
    xsrf_field_name: str = "xsrf_token"
    xsrf_xhtml: bool = True

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @classmethod
    def load(cls) -> Settings:
        """Read settings fresh from the environment."""
        return cls()

    def require_secret(self) -> str:
        if self.secret_key is None or not self.secret_key.get_secret_value():
            raise MissingSecretError(
                "No secret key configured; set STATELESS_AUTH_SECRET_KEY or pass one explicitly"
            )
        return self.secret_key.get_secret_value()


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first call."""
    return Settings.load()
