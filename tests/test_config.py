"""Tests for moutai_index.config and moutai_index.web.config."""

import os

import pytest

from moutai_index.config import load_config
from moutai_index.web.config import load_web_config

CONFIG_VARS = (
    "LLM_PROVIDER", "LLM_MODEL", "LLM_TEMPERATURE", "LLM_TIMEOUT_SECONDS",
    "CACHE_TTL_SECONDS", "MIN_HISTORY_POINTS", "REFRESH_INTERVAL_MINUTES",
    "LOG_LEVEL", "LOG_FORMAT", "APP_ENV", "WEB_HOST", "WEB_PORT", "STATIC_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove all config-related env vars before each test."""
    for key in list(os.environ):
        if key in CONFIG_VARS:
            monkeypatch.delenv(key, raising=False)
    # Prevent .env file from re-setting variables during tests
    monkeypatch.setattr("moutai_index.config.load_dotenv", lambda *a, **kw: None)
    monkeypatch.setattr("moutai_index.web.config.load_dotenv", lambda *a, **kw: None)


def test_defaults():
    """Config loads with no environment at all."""
    config = load_config()
    assert config.llm_provider == "gemini"
    assert config.llm_model == "gemini-3-pro-preview"
    assert config.llm_temperature == 0.0
    assert config.llm_timeout_seconds == 120
    assert config.cache_ttl_seconds == 300
    assert config.min_history_points == 5
    assert config.refresh_interval_minutes == 60
    assert config.log_level == "INFO"
    assert config.log_format == "json"
    assert config.app_env == "production"


def test_api_key_not_required_at_startup(monkeypatch):
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    assert load_config().llm_provider == "gemini"


def test_overrides(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "Anthropic")
    monkeypatch.setenv("LLM_MODEL", "claude-sonnet-4-20250514")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("MIN_HISTORY_POINTS", "1")
    monkeypatch.setenv("LOG_FORMAT", "text")
    config = load_config()
    assert config.llm_provider == "anthropic"
    assert config.llm_model == "claude-sonnet-4-20250514"
    assert config.cache_ttl_seconds == 60
    assert config.min_history_points == 1
    assert config.log_format == "text"


def test_invalid_values_all_listed(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "five")
    monkeypatch.setenv("MIN_HISTORY_POINTS", "0")
    with pytest.raises(ValueError, match="Invalid configuration") as exc_info:
        load_config()
    msg = str(exc_info.value)
    assert "LLM_PROVIDER" in msg
    assert "CACHE_TTL_SECONDS" in msg
    assert "MIN_HISTORY_POINTS" in msg


def test_bad_temperature(monkeypatch):
    monkeypatch.setenv("LLM_TEMPERATURE", "cold")
    with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
        load_config()


def test_config_is_frozen():
    config = load_config()
    with pytest.raises(AttributeError):
        config.llm_model = "other"


class TestWebConfig:
    def test_defaults(self):
        config = load_web_config()
        assert config.web_host == "0.0.0.0"
        assert config.web_port == 8080
        assert config.static_dir == "./static"

    def test_port_override(self, monkeypatch):
        monkeypatch.setenv("WEB_PORT", "9000")
        assert load_web_config().web_port == 9000

    @pytest.mark.parametrize("port", ["http", "0", "70000"])
    def test_invalid_port(self, monkeypatch, port):
        monkeypatch.setenv("WEB_PORT", port)
        with pytest.raises(ValueError, match="WEB_PORT"):
            load_web_config()
