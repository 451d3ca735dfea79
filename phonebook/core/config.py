"""
Configuration helpers for the phonebook backend.

Settings are read from environment variables once and cached, so that
services and repositories do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    activation_token_ttl_seconds: int
    recovery_token_ttl_seconds: int
    log_level: str

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.smtp_from and self.smtp_port)


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", ""),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        activation_token_ttl_seconds=_int(os.getenv("ACTIVATION_TOKEN_TTL_SECONDS", "86400"), 86400),
        recovery_token_ttl_seconds=_int(os.getenv("RECOVERY_TOKEN_TTL_SECONDS", "3600"), 3600),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
