"""
Storyboard Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; checked again during startup.

Every value has a development default so the server starts with no
environment at all. Production deployments override the session secret
and the auth credentials.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_SESSION_SECRET = "storyboard-secret-change-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── Server ────────────────────────────────────────────────────────────
    app_host: str = Field(default="0.0.0.0")
    port: int = Field(default=3856, ge=1, le=65535)

    # What: Deployment environment name
    # "production" turns on https-only session cookies
    app_env: str = Field(default="development")

    # ── Database ──────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///path or postgresql+asyncpg://user:pw@host/db
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/storyboard.db",
        description="Async SQLAlchemy connection URL",
    )

    # What: Create missing tables at startup (Alembic remains the migration tool)
    auto_create_schema: bool = Field(default=True)

    # Pool sizing, ignored for SQLite
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)

    # ── Sessions ──────────────────────────────────────────────────────────
    session_secret: str = Field(default=DEFAULT_SESSION_SECRET)

    # What: Session cookie lifetime in SECONDS (default: 60 days)
    # Earlier deployments configured SESSION_MAX_AGE in milliseconds;
    # divide such values by 1000 when carrying them over
    session_max_age: int = Field(default=60 * 24 * 60 * 60, ge=60)

    session_cookie_name: str = Field(default="storyboard_session")

    # ── Authentication (single editor account) ────────────────────────────
    auth_username: str = Field(default="admin")

    # What: Plaintext password, only consulted when no hash is configured
    auth_password: str = Field(default="admin")

    # What: bcrypt hash ($2b$...) of the editor password
    auth_password_hash: str = Field(default="")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: "*" or comma-separated origins
    cors_origin: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    # ── Uploads ───────────────────────────────────────────────────────────
    # What: Directory holding uploaded images, served under /uploads
    upload_dir: str = Field(default="./public/uploads")

    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    max_upload_size: int = Field(default=10_485_760, ge=1_024)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_required_for_production(self) -> None:
        """
        What:  Checks that security-sensitive settings were overridden.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        if not self.is_production:
            return
        errors = []
        if self.session_secret == DEFAULT_SESSION_SECRET:
            errors.append("SESSION_SECRET is still the built-in default.")
        if not self.auth_password_hash:
            errors.append(
                "AUTH_PASSWORD_HASH is not set; the plaintext AUTH_PASSWORD is in use."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance imported throughout the application
settings = Settings()
