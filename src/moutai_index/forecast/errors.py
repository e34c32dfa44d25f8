"""Failure kinds raised by the prediction pipeline."""

from __future__ import annotations


class PredictionError(Exception):
    """Base class. ``user_message`` is what the dashboard shows."""

    default_message = "Unexpected prediction failure."

    def __init__(self, message: str | None = None) -> None:
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class UpstreamError(PredictionError):
    """The generation call itself failed (network, auth, quota)."""

    default_message = "Network fluctuation."


class MalformedResponseError(PredictionError, ValueError):
    """The upstream returned something that is not the expected document."""

    default_message = "AI data terminal parse exception."


class ParseError(MalformedResponseError):
    """The upstream text is not a JSON object."""


class InsufficientDataError(PredictionError, ValueError):
    """The JSON parsed but does not carry enough data to display."""

    default_message = "Retrieved data is incomplete."


class DraftError(PredictionError):
    """A history draft operation was attempted in the wrong state."""

    default_message = "No history edit in progress."
