"""Prediction pipeline — grounded LLM call, normalization, and staleness cache."""

from moutai_index.forecast.cache import StalenessCache
from moutai_index.forecast.errors import (
    InsufficientDataError,
    MalformedResponseError,
    ParseError,
    PredictionError,
    UpstreamError,
)
from moutai_index.forecast.fetcher import FetchResult, PredictionFetcher
from moutai_index.forecast.normalize import normalize

__all__ = [
    "FetchResult",
    "InsufficientDataError",
    "MalformedResponseError",
    "ParseError",
    "PredictionError",
    "PredictionFetcher",
    "StalenessCache",
    "UpstreamError",
    "normalize",
]
