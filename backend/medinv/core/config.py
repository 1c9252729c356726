"""Application configuration.

Environment variables override all defaults. A `.env` file next to the
backend is loaded for local development.
CRITICAL: SECRET_KEY must be set in production - startup fails fast if missing.
"""

import os
import warnings
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


ISOLATION_LEVELS = ("READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE")
STOCK_POLICIES = ("best_effort", "strict")
DEPLOYMENT_MODES = ("local", "demo")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./medinv.db")
    DB_ECHO: bool = _env_bool("DB_ECHO")

    # Connection pool limits
    DB_CONNECTION_LIMIT: int = int(os.getenv("DB_CONNECTION_LIMIT", "40"))
    # Callers allowed to wait for a connection when the pool is exhausted (0 = unbounded)
    DB_QUEUE_LIMIT: int = int(os.getenv("DB_QUEUE_LIMIT", "30"))
    DB_ACQUIRE_TIMEOUT_SECONDS: float = float(os.getenv("DB_ACQUIRE_TIMEOUT_SECONDS", "30"))
    DB_POOL_RECYCLE_SECONDS: int = int(os.getenv("DB_POOL_RECYCLE_SECONDS", "3600"))

    # Order placement
    ORDER_ISOLATION_LEVEL: Optional[str] = os.getenv("ORDER_ISOLATION_LEVEL") or None
    ORDER_STOCK_POLICY: str = os.getenv("ORDER_STOCK_POLICY", "best_effort")

    # Deployment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEPLOYMENT_MODE: str = os.getenv("DEPLOYMENT_MODE", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # JWT Security - CRITICAL
    SECRET_KEY: str = os.getenv("SECRET_KEY", None)
    if not SECRET_KEY:
        if os.getenv("ENVIRONMENT", "development") == "production":
            raise ValueError(
                "CRITICAL: SECRET_KEY must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        warnings.warn(
            "SECRET_KEY not set in environment. Using development default. "
            "Set SECRET_KEY in .env to a strong random value before production.",
            RuntimeWarning
        )
        SECRET_KEY = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    AUTH_COOKIE_NAME: str = "authToken"
    # Login page of the dashboard front end; browsers without a session are sent here
    LOGIN_URL: str = os.getenv("LOGIN_URL", "/login")
    SECURE_COOKIES: bool = os.getenv("ENVIRONMENT", "development") == "production"
    SAME_SITE_COOKIE: str = "strict"

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        ).split(",")
        if origin.strip()
    ]

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)
        self.validate()

    def validate(self) -> None:
        """Reject configuration values the application cannot run with."""
        if self.ORDER_ISOLATION_LEVEL is not None:
            level = self.ORDER_ISOLATION_LEVEL.strip().upper().replace("_", " ")
            if level not in ISOLATION_LEVELS:
                raise ValueError(
                    f"ORDER_ISOLATION_LEVEL must be one of {', '.join(ISOLATION_LEVELS)}; "
                    f"got {self.ORDER_ISOLATION_LEVEL!r}"
                )
            self.ORDER_ISOLATION_LEVEL = level
        if self.ORDER_STOCK_POLICY not in STOCK_POLICIES:
            raise ValueError(
                f"ORDER_STOCK_POLICY must be one of {', '.join(STOCK_POLICIES)}; "
                f"got {self.ORDER_STOCK_POLICY!r}"
            )
        if self.DEPLOYMENT_MODE not in DEPLOYMENT_MODES:
            raise ValueError(f"DEPLOYMENT_MODE must be one of {', '.join(DEPLOYMENT_MODES)}")
        if self.DB_CONNECTION_LIMIT < 1:
            raise ValueError("DB_CONNECTION_LIMIT must be at least 1")
        if self.DB_QUEUE_LIMIT < 0:
            raise ValueError("DB_QUEUE_LIMIT cannot be negative")

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
