"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for StockTrack happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

Signing secret policy:
  JWT_SECRET may be empty at startup. An empty secret is NOT replaced with a
  generated one: token issuance and verification fail closed at call time
  (auth.tokens raises SigningKeyMissingError, surfaced as HTTP 500). This
  lets operators see a distinct "server misconfigured" error instead of a
  process that silently signs with a throwaway key.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
audit/, inventory/, or client/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("stocktrack.config")

_SEVEN_DAYS = 7 * 24 * 60 * 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `jwt_secret` reads from JWT_SECRET, `debug` reads from DEBUG.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False  # FastAPI debug mode: tracebacks in 500 responses
    log_level: str = "INFO"
    database_url: str = f"sqlite:///{Path.cwd() / 'stocktrack.db'}"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured".
    jwt_secret: str = ""
    token_expire_seconds: int = _SEVEN_DAYS
    login_rate_limit: str = "10/minute"
    password_reset_enabled: bool = False

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # ------------------------------------------------------------------
    # Product images
    # ------------------------------------------------------------------

    media_dir: Path = Path.cwd() / "media"
    media_base_url: str = "/media"
    max_upload_bytes: int = 5 * 1024 * 1024

    @model_validator(mode="after")
    def check_jwt_secret(self) -> "Settings":
        """Warn about weak or missing signing secrets without refusing to start."""
        if not self.jwt_secret:
            logger.warning("JWT_SECRET is not set -- login and protected routes will return 500")
        elif len(self.jwt_secret) < 32:
            logger.warning("JWT_SECRET is shorter than 32 characters")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() after changing environment
    variables so the next call re-reads them.
    """
    return Settings()
