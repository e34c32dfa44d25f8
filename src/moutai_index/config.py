"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

VALID_PROVIDERS = frozenset({"gemini", "anthropic"})
VALID_LOG_FORMATS = frozenset({"json", "text"})


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables.

    The LLM API key is not part of the config: it is read from LLM_API_KEY
    each time the model is called.
    """

    # LLM
    llm_provider: str = "gemini"
    llm_model: str = "gemini-3-pro-preview"
    llm_temperature: float = 0.0
    llm_timeout_seconds: int = 120

    # Prediction
    cache_ttl_seconds: int = 300
    min_history_points: int = 5
    refresh_interval_minutes: int = 60

    # Application
    log_level: str = "INFO"
    log_format: str = "json"
    app_env: str = "production"


def _int(name: str, default: str, errors: list[str]) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        errors.append(f"{name} must be an integer, got '{raw}'")
        return int(default)


def _float(name: str, default: str, errors: list[str]) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        errors.append(f"{name} must be a number, got '{raw}'")
        return float(default)


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    every value. Raises ValueError listing all invalid variables.
    """
    load_dotenv(dotenv_path=env_path)

    errors: list[str] = []
    config = Config(
        # LLM
        llm_provider=os.environ.get("LLM_PROVIDER", "gemini").lower(),
        llm_model=os.environ.get("LLM_MODEL", "gemini-3-pro-preview"),
        llm_temperature=_float("LLM_TEMPERATURE", "0.0", errors),
        llm_timeout_seconds=_int("LLM_TIMEOUT_SECONDS", "120", errors),
        # Prediction
        cache_ttl_seconds=_int("CACHE_TTL_SECONDS", "300", errors),
        min_history_points=_int("MIN_HISTORY_POINTS", "5", errors),
        refresh_interval_minutes=_int("REFRESH_INTERVAL_MINUTES", "60", errors),
        # Application
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        app_env=os.environ.get("APP_ENV", "production"),
    )

    if config.llm_provider not in VALID_PROVIDERS:
        errors.append(
            f"LLM_PROVIDER '{config.llm_provider}' is not valid; "
            f"must be one of: {', '.join(sorted(VALID_PROVIDERS))}"
        )
    if config.log_format not in VALID_LOG_FORMATS:
        errors.append(f"LOG_FORMAT '{config.log_format}' must be 'json' or 'text'")
    if config.llm_timeout_seconds <= 0:
        errors.append("LLM_TIMEOUT_SECONDS must be positive")
    if config.cache_ttl_seconds < 0:
        errors.append("CACHE_TTL_SECONDS must not be negative")
    if config.min_history_points < 1:
        errors.append("MIN_HISTORY_POINTS must be at least 1")
    if config.refresh_interval_minutes <= 0:
        errors.append("REFRESH_INTERVAL_MINUTES must be positive")

    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")
    return config
