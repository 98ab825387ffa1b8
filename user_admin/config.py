from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import os

from .errors import ConfigurationError


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values exposed to FastAPI components."""

    app_name: str = "user-admin-service"
    version: str = "0.1.0"
    supabase_url: str = field(default_factory=lambda: _env("SUPABASE_URL"))
    supabase_anon_key: str = field(default_factory=lambda: _env("SUPABASE_ANON_KEY"))
    supabase_service_role_key: str = field(
        default_factory=lambda: _env("SUPABASE_SERVICE_ROLE_KEY")
    )
    http_host: str = field(default_factory=lambda: _env("HTTP_HOST", "0.0.0.0"))
    http_port: int = field(default_factory=lambda: int(_env("HTTP_PORT", "8000")))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())
    profiles_table: str = field(default_factory=lambda: _env("PROFILES_TABLE", "profiles"))
    admin_rpc: str = field(default_factory=lambda: _env("ADMIN_RPC", "is_admin"))

    def require(self, name: str) -> str:
        """Return a non-empty setting value or raise ``ConfigurationError``.

        Errors name the environment variable the value is read from so an
        operator can fix the deployment without reading the code.
        """
        value = getattr(self, name)
        if not value:
            raise ConfigurationError(f"Missing env var: {name.upper()}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
