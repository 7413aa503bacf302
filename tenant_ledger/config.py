"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # Application
        self.APP_NAME: str = "Tenant Ledger"
        self.APP_VERSION: str = "0.1.0"
        self.DEBUG: bool = _env_bool("DEBUG")

        # Server
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8000"))

        # Database
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "postgresql://localhost:5432/ledger"
        )
        self.DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
        self.DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "0"))
        self.DB_POOL_TIMEOUT: float = float(os.getenv("DB_POOL_TIMEOUT", "5"))

        # Mirror the bound tenant into the app.current_tenant_id setting so
        # PostgreSQL row-level security policies can filter as well.
        self.DB_SET_TENANT_CONTEXT: bool = _env_bool("DB_SET_TENANT_CONTEXT")

        # Per-request deadline applied by the HTTP layer (seconds, 0 = none)
        self.REQUEST_TIMEOUT_SECONDS: float = float(
            os.getenv("REQUEST_TIMEOUT_SECONDS", "30")
        )

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Environment
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
