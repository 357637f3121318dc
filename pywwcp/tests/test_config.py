"""Tests for configuration."""
import pytest
from pydantic import ValidationError

from pywwcp.config import Settings

ENV_VARS = ["WWCP_HISTORY_MAX_DEPTH", "WWCP_DEFAULT_HISTORY_SIZE", "WWCP_LOCK_TIMEOUT", "WWCP_MUTATION_RETRIES",
            "WWCP_SEND_UPSTREAM", "WWCP_UPSTREAM_URL", "WWCP_UPSTREAM_TIMEOUT", "WWCP_DEBUG"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


def test_settings_defaults():
    settings = Settings()
    assert settings.history_max_depth == 50
    assert settings.default_history_size == 1
    assert settings.lock_timeout == 2.0
    assert settings.mutation_retries == 3
    assert settings.send_upstream is True
    assert settings.upstream_url is None
    assert settings.upstream_timeout == 5.0
    assert settings.debug is False


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("WWCP_HISTORY_MAX_DEPTH", "7")
    monkeypatch.setenv("WWCP_SEND_UPSTREAM", "no")
    monkeypatch.setenv("WWCP_UPSTREAM_URL", "http://upstream.example")
    monkeypatch.setenv("WWCP_DEBUG", "yes")
    settings = Settings()
    assert settings.history_max_depth == 7
    assert settings.send_upstream is False
    assert settings.upstream_url == "http://upstream.example"
    assert settings.debug is True


def test_settings_from_env_file(tmp_path):
    (tmp_path / ".env").write_text("WWCP_MUTATION_RETRIES=9\n")
    assert Settings().mutation_retries == 9


def test_keyword_arguments_override_env(monkeypatch):
    monkeypatch.setenv("WWCP_HISTORY_MAX_DEPTH", "7")
    assert Settings(history_max_depth=3).history_max_depth == 3


def test_invalid_values_are_rejected(monkeypatch):
    monkeypatch.setenv("WWCP_HISTORY_MAX_DEPTH", "0")
    with pytest.raises(ValidationError):
        Settings()
