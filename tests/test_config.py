import pytest
from pydantic import ValidationError

from cardwallet.config import Settings


def test_log_level_is_normalized():
    assert Settings(log_level=" debug ").log_level == "DEBUG"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="verbose")


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")

    assert Settings().log_level == "WARNING"


def test_blank_secrets_become_none():
    settings = Settings(supabase_jwt_secret="   ", supabase_anon_key="")

    assert settings.supabase_jwt_secret is None
    assert settings.supabase_anon_key is None
