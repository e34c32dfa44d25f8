"""Web server configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class WebConfig:
    """HTTP server settings. Separate from the prediction config."""

    web_host: str = "0.0.0.0"
    web_port: int = 8080
    static_dir: str = "./static"


def load_web_config(env_path: str | Path | None = None) -> WebConfig:
    """Load web configuration from environment variables.

    Raises ValueError if WEB_PORT is not a valid port number.
    """
    load_dotenv(dotenv_path=env_path)

    raw_port = os.environ.get("WEB_PORT", "8080")
    try:
        port = int(raw_port)
    except ValueError:
        raise ValueError(f"WEB_PORT must be an integer, got '{raw_port}'") from None
    if not 0 < port < 65536:
        raise ValueError(f"WEB_PORT {port} is out of range")

    return WebConfig(
        web_host=os.environ.get("WEB_HOST", "0.0.0.0"),
        web_port=port,
        static_dir=os.environ.get("STATIC_DIR", "./static"),
    )
