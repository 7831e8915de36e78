"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for AuthForms happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. submit_timeout_seconds -> SUBMIT_TIMEOUT_SECONDS). Type coercion and
      validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Used to reject a simulated backend latency
      that would always trip the submit timeout.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or cache/.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("authforms.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `min_password_length` reads from MIN_PASSWORD_LENGTH.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validation rules
    # ------------------------------------------------------------------

    min_password_length: int = Field(default=8, ge=1)
    min_full_name_length: int = Field(default=2, ge=1)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    # 0 disables the bound. A hung backend call otherwise holds the session
    # in the submitting phase forever.
    submit_timeout_seconds: float = 30.0
    submit_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Simulated backend
    # ------------------------------------------------------------------

    simulated_latency_seconds: float = 2.0
    simulated_rejected_emails: list[str] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # External identity providers
    # ------------------------------------------------------------------

    google_sign_in_enabled: bool = True
    microsoft_sign_in_enabled: bool = True

    # ------------------------------------------------------------------
    # HTTP session registry
    # ------------------------------------------------------------------

    session_ttl_seconds: int = Field(default=30 * 60, ge=1)

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_timing(self) -> "Settings":
        """Reject timing combinations that make every submission fail.

        Negative timeouts and latencies are meaningless. A simulated latency
        at or above a non-zero timeout would turn every simulated submit into
        a timeout failure, which is never what a developer intends.
        """
        if self.submit_timeout_seconds < 0:
            raise ValueError("SUBMIT_TIMEOUT_SECONDS must be 0 (disabled) or positive.")
        if self.simulated_latency_seconds < 0:
            raise ValueError("SIMULATED_LATENCY_SECONDS must not be negative.")
        if self.submit_timeout_seconds and self.simulated_latency_seconds >= self.submit_timeout_seconds:
            raise ValueError("SIMULATED_LATENCY_SECONDS must be below SUBMIT_TIMEOUT_SECONDS.")
        if self.debug and self.log_level.upper() != "DEBUG":
            logger.info("DEBUG=true -- forcing log level DEBUG (was %s)", self.log_level)
            self.log_level = "DEBUG"
        return self

    @property
    def submit_timeout(self) -> float | None:
        """Timeout in seconds for one backend call, or None when disabled."""
        return self.submit_timeout_seconds or None


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings()
    directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
