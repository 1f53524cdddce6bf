"""
Configuration helpers for the waitlist backend.

Settings are read once from environment variables so that routers/services do
not fetch os.environ directly. Tests call ``get_settings.cache_clear()`` after
changing the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    brand_name: str
    storage_backend: str
    mongodb_uri: str
    mongodb_db: str
    mongodb_collection: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    smtp_timeout: int
    admin_email: str
    signup_cooldown_ms: int
    mock_signup_delay_ms: int
    log_level: str
    log_dir: str

    @property
    def debug_errors(self) -> bool:
        return self.app_env == "dev"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port and self.smtp_user and self.smtp_password)


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
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        brand_name=os.getenv("BRAND_NAME", "Nawab & Co."),
        storage_backend=(os.getenv("STORAGE_BACKEND") or "mongo").lower(),
        mongodb_uri=os.getenv("MONGODB_URI", ""),
        mongodb_db=os.getenv("MONGODB_DB", "wishlist"),
        mongodb_collection=os.getenv("MONGODB_COLLECTION", "emails"),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        smtp_timeout=_int(os.getenv("SMTP_TIMEOUT", "10"), 10),
        admin_email=os.getenv("ADMIN_EMAIL", "").strip(),
        signup_cooldown_ms=_int(os.getenv("SIGNUP_COOLDOWN_MS", "2000"), 2000),
        mock_signup_delay_ms=_int(os.getenv("MOCK_SIGNUP_DELAY_MS", "500"), 500),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_dir=os.getenv("LOG_DIR", ""),
    )
