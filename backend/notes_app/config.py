"""
Application configuration using Pydantic Settings.
All config is loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "notes-autosave"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"  # comma-separated

    # ── Supabase ─────────────────────────────────────────
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""  # anon/public key, RLS applies
    SUPABASE_SERVICE_KEY: str = ""  # service_role key, notes are scoped by user_id filters
    NOTES_TABLE: str = "notes"

    # ── Session tokens (issued by Supabase Auth) ─────────
    SUPABASE_JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # ── Auto-save ────────────────────────────────────────
    AUTO_SAVE_DELAY_MS: int = 2000

    # ── Edit sessions ────────────────────────────────────
    EDIT_SESSION_IDLE_TIMEOUT_S: int = 1800  # evict sessions untouched this long
    MAX_EDIT_SESSIONS_PER_USER: int = 20

    # ── Note validation ──────────────────────────────────
    MIN_TITLE_LENGTH: int = 3
    MAX_TITLE_LENGTH: int = 200
    MIN_CONTENT_LENGTH: int = 10

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @property
    def auto_save_delay(self) -> float:
        """Debounce delay in seconds."""
        return self.AUTO_SAVE_DELAY_MS / 1000

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance (singleton)."""
    return Settings()
