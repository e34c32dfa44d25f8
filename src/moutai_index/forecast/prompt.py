"""Forecast prompt template and declared output schema."""

from __future__ import annotations

from datetime import date

FORECAST_DAYS = 30
HISTORY_DAYS = 7

PROMPT_TEMPLATE = """\
You are the chief data analyst for the Chinese baijiu industry. Your task is \
to build a precise price model for Feitian Moutai (53% ABV, 500ml, loose bottle).

HISTORICAL PRICE CALIBRATION:
1. Use web search to find the industry-recognised daily wholesale price \
(pijia) for each of the past {history_days} days, counting back from yesterday.
2. Prefer the daily quote sheets of specialist trade media ("today's liquor \
price", liquor market quotes and similar daily wholesale reports).
3. Do NOT invent estimates. If a day is missing, reconcile it against the \
neighbouring daily quotes.

LIVE BENCHMARK:
- Retrieve today's ({today}) live wholesale price.

MULTI-FACTOR ANALYSIS:
- Combine channel inventory, distillery release cadence and the current \
financial environment into a {forecast_days}-day forecast.
- Give every forecast day a confidence interval (upper and lower bound) that \
reflects market volatility risk.
- Compute a market sentiment score from -100 to 100 based on the search results.

OUTPUT REQUIREMENTS:
- history must reflect real day-to-day movement, oldest first.
- forecast must continue from today's ({today}) price and every entry must \
include upper_bound and lower_bound.
- Dates use the YYYY-MM-DD format.

Respond in the following JSON format only. Do not include any text outside the JSON.

{{
  "market_summary": "...",
  "sentiment_score": 0,
  "current_price": 0,
  "history": [{{"date": "YYYY-MM-DD", "price": 0}}],
  "forecast": [
    {{"date": "YYYY-MM-DD", "price": 0, "upper_bound": 0, "lower_bound": 0}}
  ]
}}"""

_PRICE_POINT = {
    "type": "OBJECT",
    "properties": {
        "date": {"type": "STRING"},
        "price": {"type": "NUMBER"},
    },
    "required": ["date", "price"],
}

_FORECAST_POINT = {
    "type": "OBJECT",
    "properties": {
        "date": {"type": "STRING"},
        "price": {"type": "NUMBER"},
        "upper_bound": {"type": "NUMBER"},
        "lower_bound": {"type": "NUMBER"},
    },
    "required": ["date", "price", "upper_bound", "lower_bound"],
}

# A hint for the model only; the normalizer re-validates every field.
RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "market_summary": {"type": "STRING"},
        "sentiment_score": {"type": "NUMBER"},
        "current_price": {"type": "NUMBER"},
        "history": {"type": "ARRAY", "items": _PRICE_POINT},
        "forecast": {"type": "ARRAY", "items": _FORECAST_POINT},
    },
    "required": [
        "market_summary",
        "sentiment_score",
        "current_price",
        "history",
        "forecast",
    ],
}


def format_prompt(today: date) -> str:
    """Format the forecast prompt for the given calendar date."""
    return PROMPT_TEMPLATE.format(
        today=today.isoformat(),
        history_days=HISTORY_DAYS,
        forecast_days=FORECAST_DAYS,
    )
