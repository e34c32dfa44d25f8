"""Dashboard view state — refresh action, error banner, history draft editing."""

from __future__ import annotations

import copy
import dataclasses
import logging
import math
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from moutai_index.forecast.errors import DraftError, InsufficientDataError, PredictionError
from moutai_index.forecast.fetcher import PredictionFetcher
from moutai_index.forecast.models import PredictionState, PricePoint

logger = logging.getLogger(__name__)

FALLBACK_NEWS = "Index calibrated to the latest wholesale price."
EMPTY_FORECAST_MESSAGE = "The model returned no usable forecast; refresh later."


@dataclass(frozen=True)
class DashboardSnapshot:
    """Read-only copy of what the page renders."""

    state: PredictionState
    error: str | None
    draft: tuple[PricePoint, ...] | None


class DashboardController:
    """Owns the view state. Never writes into the fetcher's cache.

    ``is_updating`` is advisory: it lets the page disable its refresh button
    but does not stop a second refresh from running. Concurrent refreshes
    race and the last one to finish wins.
    """

    def __init__(
        self,
        fetcher: PredictionFetcher,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.fetcher = fetcher
        self.now = now
        self._lock = threading.Lock()
        self._state = PredictionState()
        self._error: str | None = None
        self._draft: list[PricePoint] | None = None

    @property
    def is_busy(self) -> bool:
        return self._state.is_updating

    def snapshot(self) -> DashboardSnapshot:
        with self._lock:
            return DashboardSnapshot(
                state=self._state,
                error=self._error,
                draft=tuple(self._draft) if self._draft is not None else None,
            )

    def refresh(self, force: bool = False) -> DashboardSnapshot:
        """Fetch and apply new data, or record the failure as the error banner.

        Prior data stays visible on failure and the busy flag is always cleared.
        """
        with self._lock:
            self._state = dataclasses.replace(self._state, is_updating=True)
            self._error = None

        try:
            result = self.fetcher.fetch(force_refresh=force)
            if not result.data.prediction:
                raise InsufficientDataError(EMPTY_FORECAST_MESSAGE)
        except PredictionError as exc:
            logger.warning("Refresh failed: %s", exc.user_message)
            with self._lock:
                self._error = f"Calibration failed: {exc.user_message}"
                self._state = dataclasses.replace(self._state, is_updating=False)
            return self.snapshot()
        except Exception:
            with self._lock:
                self._state = dataclasses.replace(self._state, is_updating=False)
            raise

        data = result.data
        with self._lock:
            self._state = PredictionState(
                current_price=data.current_price,
                last_update=self.now().strftime("%H:%M"),
                history=data.history,
                prediction=data.prediction,
                sentiment_score=data.sentiment_score,
                news=data.market_summary or FALLBACK_NEWS,
                sources=result.sources,
                is_updating=False,
            )
            self._error = None
        return self.snapshot()

    # --- History draft ---

    def begin_history_edit(self) -> tuple[PricePoint, ...]:
        """Open a draft holding a deep copy of the displayed history."""
        with self._lock:
            self._draft = copy.deepcopy(list(self._state.history))
            return tuple(self._draft)

    def update_draft_point(self, index: int, price: float) -> PricePoint:
        """Overwrite one draft price.

        Raises IndexError for an unknown index and ValueError for a negative
        or non-finite price.
        """
        price = float(price)
        if not math.isfinite(price) or price < 0:
            raise ValueError(f"price must be a non-negative number, got {price}")
        with self._lock:
            if self._draft is None:
                raise DraftError()
            if not 0 <= index < len(self._draft):
                raise IndexError(f"history index {index} out of range")
            point = dataclasses.replace(self._draft[index], price=price)
            self._draft[index] = point
            return point

    def commit_history_edit(self) -> PredictionState:
        """Copy the draft into the displayed history and close it."""
        with self._lock:
            if self._draft is None:
                raise DraftError()
            self._state = dataclasses.replace(self._state, history=tuple(self._draft))
            self._draft = None
            logger.info("Manual history edit committed (%d points)", len(self._state.history))
            return self._state

    def discard_history_edit(self) -> None:
        with self._lock:
            if self._draft is None:
                raise DraftError()
            self._draft = None
