from __future__ import annotations

import pytest

from user_admin.config import Settings
from user_admin.errors import ConfigurationError


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.require("supabase_url") == "https://project.supabase.co"
    assert settings.require("supabase_service_role_key") == "service"
    assert settings.log_level == "DEBUG"
    assert settings.profiles_table == "profiles"
    assert settings.admin_rpc == "is_admin"


def test_require_names_the_missing_variable(monkeypatch):
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

    with pytest.raises(ConfigurationError) as excinfo:
        Settings().require("supabase_anon_key")
    assert str(excinfo.value) == "Missing env var: SUPABASE_ANON_KEY"
