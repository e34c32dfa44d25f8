"""Price index data contract shared by the fetcher, cache, and dashboard."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SOURCE_TITLE = "Industry data source"
DEFAULT_SOURCE_URI = "#"
LAST_UPDATE_PLACEHOLDER = "--:--"


@dataclass(frozen=True)
class PricePoint:
    """One day's observed or predicted price.

    Bounds are only present on forecast points. When both are present the
    upstream model is expected to keep ``lower_bound <= price <= upper_bound``;
    misordered bounds are passed through unchanged.
    """

    date: str  # YYYY-MM-DD
    price: float
    upper_bound: float | None = None
    lower_bound: float | None = None


@dataclass(frozen=True)
class Source:
    """A web citation the model reported using."""

    title: str = DEFAULT_SOURCE_TITLE
    uri: str = DEFAULT_SOURCE_URI


@dataclass(frozen=True)
class PredictionData:
    """Normalized result of one generation call."""

    current_price: float
    market_summary: str = ""
    sentiment_score: int = 0
    history: tuple[PricePoint, ...] = ()
    prediction: tuple[PricePoint, ...] = ()


@dataclass(frozen=True)
class CacheEntry:
    """The single cached fetch result. Replaced wholesale, never mutated."""

    data: PredictionData
    sources: tuple[Source, ...]
    fetched_at_ms: int


@dataclass(frozen=True)
class PredictionState:
    """Render model handed to the dashboard."""

    current_price: float = 0.0  # 0 means not loaded yet
    last_update: str = LAST_UPDATE_PLACEHOLDER
    history: tuple[PricePoint, ...] = ()
    prediction: tuple[PricePoint, ...] = ()
    sentiment_score: int = 0
    news: str = ""
    sources: tuple[Source, ...] = ()
    is_updating: bool = False
