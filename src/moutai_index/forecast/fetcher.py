"""Prediction fetcher — cache check, grounded generation call, normalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from moutai_index.forecast.cache import StalenessCache
from moutai_index.forecast.errors import UpstreamError
from moutai_index.forecast.generator import Generator
from moutai_index.forecast.models import CacheEntry, PredictionData, Source
from moutai_index.forecast.normalize import DEFAULT_MIN_HISTORY, extract_sources, normalize
from moutai_index.forecast.prompt import RESPONSE_SCHEMA, format_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Normalized data and citations, and whether they came from the cache."""

    data: PredictionData
    sources: tuple[Source, ...]
    from_cache: bool = False


class PredictionFetcher:
    """Fetch the price prediction, serving the cache while it is fresh.

    Failures are never retried and never touch the cache.
    """

    def __init__(
        self,
        generator: Generator,
        cache: StalenessCache,
        *,
        min_history: int = DEFAULT_MIN_HISTORY,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.generator = generator
        self.cache = cache
        self.min_history = min_history
        self.today = today

    def fetch(self, force_refresh: bool = False) -> FetchResult:
        """Return the prediction.

        Raises UpstreamError when the generation call fails, ParseError when
        the text is not JSON, and InsufficientDataError when the data is too
        thin to display.
        """
        if not force_refresh:
            entry = self.cache.fresh_entry()
            if entry is not None:
                logger.info("Serving cached prediction fetched at %d", entry.fetched_at_ms)
                return FetchResult(data=entry.data, sources=entry.sources, from_cache=True)

        prompt = format_prompt(self.today())
        logger.info("Requesting prediction from upstream (force=%s)", force_refresh)
        try:
            generation = self.generator.generate(prompt, RESPONSE_SCHEMA)
        except Exception as exc:
            logger.exception("Generation call failed")
            raise UpstreamError(str(exc) or type(exc).__name__) from exc

        data = normalize(generation.text, min_history=self.min_history)
        sources = extract_sources(generation.grounding_chunks)

        self.cache.put(CacheEntry(data=data, sources=sources, fetched_at_ms=self.cache.clock()))
        logger.info(
            "Prediction updated: price=%.2f history=%d forecast=%d sources=%d",
            data.current_price,
            len(data.history),
            len(data.prediction),
            len(sources),
        )
        return FetchResult(data=data, sources=sources)
