"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI and the worker.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from backend.configs.auth import AuthSettings
from backend.configs.base import BaseSettings
from backend.configs.database import DatabaseSettings
from backend.configs.queue import QueueSettings
from backend.configs.storage import StorageSettings
from backend.configs.worker import WorkerSettings

MIN_PRODUCTION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    def validate_secrets(self) -> None:
        """
        Refuse to start with an unusable token secret.

        Raises:
            ValueError: Secret missing, or too short in production
        """
        secret = self.auth.jwt_secret
        if not secret:
            raise ValueError("AUTH_JWT_SECRET is not set")
        if self.is_production and len(secret) < MIN_PRODUCTION_SECRET_LENGTH:
            raise ValueError(
                f"AUTH_JWT_SECRET must be at least {MIN_PRODUCTION_SECRET_LENGTH} "
                "characters in production"
            )


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from backend.configs import get_settings
        settings = get_settings()
    """
    return Settings()
