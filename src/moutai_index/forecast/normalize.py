"""Response normalizer — turn untrusted model output into PredictionData.

This is the only place where upstream data becomes an internal value. The
output schema sent with the request is a hint to the model, so every field
is type-checked here and defaulted when missing or of the wrong type.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Iterable
from datetime import date
from urllib.parse import urlsplit

from moutai_index.forecast.errors import InsufficientDataError, ParseError
from moutai_index.forecast.models import (
    DEFAULT_SOURCE_TITLE,
    DEFAULT_SOURCE_URI,
    PredictionData,
    PricePoint,
    Source,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_HISTORY = 5
SENTIMENT_MIN = -100
SENTIMENT_MAX = 100
SOURCE_URI_SCHEMES = frozenset({"http", "https"})

# A bare date, optionally followed by a time of day and UTC offset.
_DATE_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2})"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?"
)
_FENCE_OPEN = re.compile(r"^```[A-Za-z]*")


def normalize(raw_text: str, *, min_history: int = DEFAULT_MIN_HISTORY) -> PredictionData:
    """Parse and validate the model's JSON text.

    Raises ParseError if the text is not a JSON object, and
    InsufficientDataError if the price is not positive or the history holds
    fewer than ``min_history`` usable points.
    """
    parsed = _parse_json(raw_text)

    data = PredictionData(
        current_price=_number(parsed.get("current_price")) or 0.0,
        market_summary=_string(parsed.get("market_summary")),
        sentiment_score=_sentiment(parsed.get("sentiment_score")),
        history=_price_points(parsed.get("history"), with_bounds=False),
        prediction=_price_points(parsed.get("forecast"), with_bounds=True),
    )

    errors = validate_sufficiency(data, min_history=min_history)
    if errors:
        logger.warning("Insufficient prediction data: %s", "; ".join(errors))
        raise InsufficientDataError(
            f"Retrieved data is incomplete ({'; '.join(errors)})."
        )
    return data


def validate_sufficiency(data: PredictionData, *, min_history: int) -> list[str]:
    """Check minimum-content rules. Empty list means displayable."""
    errors: list[str] = []
    if not data.current_price > 0:
        errors.append("current_price must be positive")
    if len(data.history) < min_history:
        errors.append(
            f"history has {len(data.history)} points, at least {min_history} required"
        )
    return errors


def extract_sources(chunks: Iterable[dict] | None) -> tuple[Source, ...]:
    """Map grounding chunks onto Sources, skipping chunks without a web citation."""
    if not chunks:
        return ()
    sources: list[Source] = []
    for chunk in chunks:
        if not isinstance(chunk, dict):
            continue
        web = chunk.get("web")
        if not isinstance(web, dict):
            continue
        sources.append(
            Source(
                title=_string(web.get("title")) or DEFAULT_SOURCE_TITLE,
                uri=_source_uri(web.get("uri")),
            )
        )
    return tuple(sources)


def _parse_json(raw: str) -> dict:
    """Parse the response text, tolerating markdown code fences."""
    if not isinstance(raw, str):
        raise ParseError()
    text = raw.strip()
    if text.startswith("```"):
        text = _FENCE_OPEN.sub("", text, count=1)
        text = text.removesuffix("```").strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Response is not valid JSON: %s", exc)
        raise ParseError() from exc
    if not isinstance(parsed, dict):
        logger.warning("Response JSON is a %s, expected an object", type(parsed).__name__)
        raise ParseError()
    return parsed


def _number(value) -> float | None:
    # bool is an int subclass; true/false is never a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _string(value) -> str:
    return value if isinstance(value, str) else ""


def _source_uri(value) -> str:
    """Keep only absolute http(s) links; anything else becomes the placeholder."""
    uri = _string(value).strip()
    if not uri:
        return DEFAULT_SOURCE_URI
    try:
        parts = urlsplit(uri)
    except ValueError:
        return DEFAULT_SOURCE_URI
    if parts.scheme.lower() not in SOURCE_URI_SCHEMES or not parts.netloc:
        return DEFAULT_SOURCE_URI
    return uri


def _sentiment(value) -> int:
    number = _number(value)
    if number is None:
        return 0
    return max(SENTIMENT_MIN, min(SENTIMENT_MAX, round(number)))


def _iso_date(value) -> str | None:
    if not isinstance(value, str):
        return None
    match = _DATE_PATTERN.fullmatch(value.strip())
    if match is None:
        return None
    try:
        return date.fromisoformat(match.group(1)).isoformat()
    except ValueError:
        return None


def _price_points(entries, *, with_bounds: bool) -> tuple[PricePoint, ...]:
    """Build a date-ordered, de-duplicated sequence; the last entry for a date wins."""
    if not isinstance(entries, list):
        return ()
    by_date: dict[str, PricePoint] = {}
    dropped = 0
    for entry in entries:
        if not isinstance(entry, dict):
            dropped += 1
            continue
        day = _iso_date(entry.get("date"))
        price = _number(entry.get("price"))
        if day is None or price is None or price < 0:
            dropped += 1
            continue
        by_date[day] = PricePoint(
            date=day,
            price=price,
            upper_bound=_number(entry.get("upper_bound")) if with_bounds else None,
            lower_bound=_number(entry.get("lower_bound")) if with_bounds else None,
        )
    if dropped:
        logger.info("Dropped %d malformed price entries", dropped)
    return tuple(by_date[day] for day in sorted(by_date))
