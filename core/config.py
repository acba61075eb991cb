"""
core/config.py -- Armory settings, read from the environment and .env.

get_settings() is the only place environment variables are read. It is
lru_cached, so the first call builds Settings and every later call returns
that instance. api/main.py hands the relevant values to the store and token
constructors; code below the API layer never imports this module.

SECRET_KEY rules (enforced in Settings.check_secret_key):
  DEBUG=true, no key   -> random key, logged warning, tokens die on restart
  DEBUG=false, no key  -> ValueError at startup
  any key < 32 chars   -> ValueError at startup

Layer rule: core/ is the kernel. No imports from api/, auth/ or inventory/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("armory.config")

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

MIN_SECRET_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Every field maps to the upper-case environment variable of the same name."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    log_level: str = "INFO"

    # "" means unset; check_secret_key replaces or rejects it.
    secret_key: str = ""
    token_expire_seconds: int = 5 * 24 * 60 * 60

    database_url: str = f"sqlite:///{_PROJECT_ROOT / 'armory.db'}"

    # Lists are given as JSON, e.g. CORS_ORIGINS='["https://armory.example"]'
    cors_origins: list[str] = ["http://localhost:3000"]
    allowed_hosts: list[str] = ["*"]

    @model_validator(mode="after")
    def check_secret_key(self) -> "Settings":
        if not self.secret_key:
            if not self.debug:
                raise ValueError("SECRET_KEY must be set unless DEBUG=true.")
            self.secret_key = secrets.token_hex(MIN_SECRET_KEY_LENGTH)
            logger.warning("SECRET_KEY not set; generated a throwaway key for this DEBUG run.")
        if len(self.secret_key) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters.")
        if self.token_expire_seconds <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Cached Settings. Tests that change the environment call get_settings.cache_clear()."""
    return Settings()
