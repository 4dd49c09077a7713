"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Backend credentials are optional at load time; backend_config() raises
      ConfigurationError per request when any is missing (500, not a crash on boot)

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - BackendConfig dataclass handed to the handler/clients: logic never reads Settings
      or the environment directly
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from staff_provisioning.core.errors import ConfigurationError


@dataclass(frozen=True)
class BackendConfig:
    """Validated backend configuration passed into the provisioning handler."""
    url: str
    anon_key: str
    service_role_key: str
    invite_redirect_to: str | None = None
    strict_role_mode: bool = False
    timeout_seconds: float = 30.0


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Backend (Supabase)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None
    supabase_timeout_seconds: float = 30.0

    @field_validator("supabase_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Paths are appended as /auth/v1/..., so drop a trailing slash."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    # Provisioning
    invite_redirect_to: str | None = None
    strict_role_mode: bool = False

    # API
    cors_origins: list[str] = []

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def missing_backend_settings(self) -> list[str]:
        """Env var names of required backend settings that are unset or empty."""
        required = (
            ("SUPABASE_URL", self.supabase_url),
            ("SUPABASE_SERVICE_ROLE_KEY", self.supabase_service_role_key),
            ("SUPABASE_ANON_KEY", self.supabase_anon_key),
        )
        return [name for name, value in required if not value]

    def backend_config(self) -> BackendConfig:
        missing = self.missing_backend_settings()
        if missing:
            raise ConfigurationError(missing)
        return BackendConfig(
            url=self.supabase_url,
            anon_key=self.supabase_anon_key,
            service_role_key=self.supabase_service_role_key,
            invite_redirect_to=self.invite_redirect_to or None,
            strict_role_mode=self.strict_role_mode,
            timeout_seconds=self.supabase_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
