"""API route handlers for the dashboard."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from moutai_index.dashboard import DashboardController
from moutai_index.forecast.errors import DraftError
from moutai_index.web.models import (
    DraftPointUpdate,
    DraftResponse,
    PredictionResponse,
    PricePointOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()


def _controller(request: Request) -> DashboardController:
    return request.app.state.controller


@health_router.get("/health")
def health(request: Request) -> JSONResponse:
    """Report liveness and whether a prediction has been loaded."""
    snapshot = _controller(request).snapshot()
    return JSONResponse({
        "status": "healthy",
        "data_loaded": snapshot.state.current_price > 0,
        "last_update": snapshot.state.last_update,
    })


@router.get("/prediction", response_model=PredictionResponse)
def prediction(request: Request) -> PredictionResponse:
    return PredictionResponse.from_snapshot(_controller(request).snapshot())


@router.post("/refresh", response_model=PredictionResponse)
def refresh(request: Request, force: bool = False) -> PredictionResponse:
    """Run a refresh. Failures are reported in the ``error`` field, not as HTTP errors."""
    controller = _controller(request)
    if controller.is_busy:
        raise HTTPException(status_code=409, detail="Refresh already in progress")
    return PredictionResponse.from_snapshot(controller.refresh(force=force))


@router.post("/history/draft", response_model=DraftResponse)
def begin_draft(request: Request) -> DraftResponse:
    points = _controller(request).begin_history_edit()
    return DraftResponse(history=[PricePointOut.from_point(p) for p in points])


@router.put("/history/draft/{index}", response_model=PricePointOut)
def update_draft(request: Request, index: int, body: DraftPointUpdate) -> PricePointOut:
    try:
        point = _controller(request).update_draft_point(index, body.price)
    except DraftError as exc:
        raise HTTPException(status_code=409, detail=exc.user_message) from exc
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return PricePointOut.from_point(point)


@router.post("/history/draft/commit", response_model=PredictionResponse)
def commit_draft(request: Request) -> PredictionResponse:
    controller = _controller(request)
    try:
        controller.commit_history_edit()
    except DraftError as exc:
        raise HTTPException(status_code=409, detail=exc.user_message) from exc
    return PredictionResponse.from_snapshot(controller.snapshot())


@router.delete("/history/draft", status_code=204)
def discard_draft(request: Request) -> None:
    try:
        _controller(request).discard_history_edit()
    except DraftError as exc:
        raise HTTPException(status_code=409, detail=exc.user_message) from exc
