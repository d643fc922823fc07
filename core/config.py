"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Intrevue happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. firebase_project_id -> FIREBASE_PROJECT_ID).

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved. Production mode refuses to start without the Firebase
      project and web API key; development mode only warns.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
docstore/, or records/.
"""

import logging
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("intrevue.config")

# Session cookie lifetime: 60 * 60 * 24 * 7 seconds.
ONE_WEEK = 604800


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    # "production" turns on the secure flag for the session cookie.
    environment: str = "development"

    # ------------------------------------------------------------------
    # Firebase (identity provider + document store)
    # ------------------------------------------------------------------

    firebase_project_id: str = ""
    # Path to a service-account JSON file. Empty means Application Default
    # Credentials (Cloud Run, GOOGLE_APPLICATION_CREDENTIALS, gcloud login).
    firebase_credentials: str = ""
    # Web API key for the Identity Toolkit REST endpoints (password sign-up
    # and sign-in). Same key the browser SDK is configured with.
    firebase_web_api_key: str = ""

    # ------------------------------------------------------------------
    # Scoring model
    # ------------------------------------------------------------------

    gemini_api_key: str = ""
    scoring_model: str = "gemini-2.0-flash-001"

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    session_max_age: int = ONE_WEEK

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    latest_interviews_limit: int = 20
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def secure_cookies(self) -> bool:
        """Session cookies carry the secure flag in production only."""
        return self.is_production

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_firebase(self) -> "Settings":
        """Refuse to start a production server without Firebase configuration.

        Without a project id the Admin SDK cannot verify tokens, and without
        the web API key password sign-in cannot reach the Identity Toolkit.
        Development mode only logs a warning so tests and local runs can use
        fakes.
        """
        if self.session_max_age <= 0:
            raise ValueError("SESSION_MAX_AGE must be a positive number of seconds.")
        missing = [
            name
            for name, value in (
                ("FIREBASE_PROJECT_ID", self.firebase_project_id),
                ("FIREBASE_WEB_API_KEY", self.firebase_web_api_key),
            )
            if not value
        ]
        if missing:
            if self.is_production:
                raise ValueError(
                    f"{', '.join(missing)} required in production mode. "
                    "Set them in your environment or .env file."
                )
            logger.warning("Firebase not fully configured (missing %s)", ", ".join(missing))
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
