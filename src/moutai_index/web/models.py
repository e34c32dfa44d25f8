"""Pydantic v2 request/response models for the dashboard API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from moutai_index.dashboard import DashboardSnapshot
from moutai_index.forecast.models import PricePoint, Source


class PricePointOut(BaseModel):
    date: str
    price: float
    upper_bound: float | None = None
    lower_bound: float | None = None

    @classmethod
    def from_point(cls, point: PricePoint) -> PricePointOut:
        return cls(
            date=point.date,
            price=point.price,
            upper_bound=point.upper_bound,
            lower_bound=point.lower_bound,
        )


class SourceOut(BaseModel):
    title: str
    uri: str

    @classmethod
    def from_source(cls, source: Source) -> SourceOut:
        return cls(title=source.title, uri=source.uri)


class PredictionResponse(BaseModel):
    current_price: float
    last_update: str
    history: list[PricePointOut]
    prediction: list[PricePointOut]
    sentiment_score: int
    news: str
    sources: list[SourceOut]
    is_updating: bool
    error: str | None = None

    @classmethod
    def from_snapshot(cls, snapshot: DashboardSnapshot) -> PredictionResponse:
        state = snapshot.state
        return cls(
            current_price=state.current_price,
            last_update=state.last_update,
            history=[PricePointOut.from_point(p) for p in state.history],
            prediction=[PricePointOut.from_point(p) for p in state.prediction],
            sentiment_score=state.sentiment_score,
            news=state.news,
            sources=[SourceOut.from_source(s) for s in state.sources],
            is_updating=state.is_updating,
            error=snapshot.error,
        )


class DraftResponse(BaseModel):
    history: list[PricePointOut]


class DraftPointUpdate(BaseModel):
    price: float = Field(ge=0)
