"""Application entry point — runs the refresh scheduler and web server in one process."""

from __future__ import annotations

import json
import logging
import sys
import threading
from contextlib import asynccontextmanager

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from moutai_index.config import Config, load_config
from moutai_index.dashboard import DashboardController
from moutai_index.forecast.cache import StalenessCache
from moutai_index.forecast.fetcher import PredictionFetcher
from moutai_index.forecast.generator import create_generator
from moutai_index.jobs import run_refresh
from moutai_index.web.app import create_app
from moutai_index.web.config import load_web_config

logger = logging.getLogger("moutai_index")


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def build_controller(config: Config) -> DashboardController:
    """Wire generator, cache, fetcher, and view state from config."""
    generator = create_generator(
        config.llm_provider,
        model=config.llm_model,
        temperature=config.llm_temperature,
        timeout=config.llm_timeout_seconds,
    )
    fetcher = PredictionFetcher(
        generator,
        StalenessCache(ttl_seconds=config.cache_ttl_seconds),
        min_history=config.min_history_points,
    )
    return DashboardController(fetcher)


def _build_scheduler(config: Config, controller: DashboardController) -> BackgroundScheduler:
    """Create a BackgroundScheduler with the periodic refresh job."""
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_refresh,
        trigger=IntervalTrigger(minutes=config.refresh_interval_minutes),
        args=[controller],
        id="refresh",
        name="Prediction refresh",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main() -> None:
    """Load config, set up logging, and start scheduler + web server."""
    config = load_config()
    web_config = load_web_config()

    _setup_logging(config.log_level, config.log_format)

    logger.info(
        "Moutai index starting (env=%s, provider=%s, model=%s)",
        config.app_env,
        config.llm_provider,
        config.llm_model,
    )

    controller = build_controller(config)
    scheduler = _build_scheduler(config, controller)

    @asynccontextmanager
    async def lifespan(app):
        logger.info("Scheduler starting")
        scheduler.start()
        # Initial load in background so the page is served immediately
        threading.Thread(target=run_refresh, args=(controller,), daemon=True).start()
        yield
        logger.info("Scheduler shutting down")
        scheduler.shutdown(wait=False)

    app = create_app(web_config, controller, lifespan=lifespan)

    uvicorn.run(app, host=web_config.web_host, port=web_config.web_port)


if __name__ == "__main__":
    main()
