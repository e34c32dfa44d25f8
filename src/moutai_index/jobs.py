"""Scheduled job functions."""

from __future__ import annotations

import logging

from moutai_index.dashboard import DashboardController

logger = logging.getLogger(__name__)


def run_refresh(controller: DashboardController, force: bool = False) -> None:
    """Refresh the dashboard from the scheduler. Never raises.

    Expected failures are already turned into the dashboard error banner;
    anything else is logged so the scheduler keeps running.
    """
    if controller.is_busy:
        logger.info("Skipping scheduled refresh; a refresh is already running")
        return
    try:
        snapshot = controller.refresh(force=force)
    except Exception:
        logger.exception("Scheduled refresh crashed")
        return
    if snapshot.error:
        logger.warning("Scheduled refresh finished with error: %s", snapshot.error)
    else:
        logger.info("Scheduled refresh complete (sync %s)", snapshot.state.last_update)
