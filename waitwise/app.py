from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .recommendations.models import (
    BrowseRequest,
    BrowseResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from .service import WaitTimeService
from .wait_times.aggregator import ReportRejectedError
from .wait_times.classifiers import classify_time_slot
from .wait_times.contributions import ContributionSummary
from .wait_times.models import (
    CurrentEstimateResponse,
    HistoricalAverageResponse,
    SubmissionResponse,
    VenueWaitState,
    WaitTimeSubmission,
)

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

app = FastAPI(title="WaitWise API", version="1.0.0")
app.state.service = WaitTimeService()


def get_service(request: Request) -> WaitTimeService:
    return request.app.state.service


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Wait-time endpoints ──────────────────────────────────────────────────


@app.post("/venues/{venue_id}/wait-times", response_model=SubmissionResponse, status_code=201)
def submit_wait_time(
    venue_id: str,
    body: WaitTimeSubmission,
    service: WaitTimeService = Depends(get_service),
) -> SubmissionResponse:
    try:
        report = service.submit_wait_time(
            venue_id,
            minutes=body.minutes,
            party_size=body.party_size,
            submitter_id=body.submitter_id,
            anonymous=body.anonymous,
            verification_method=body.verification_method,
        )
    except ReportRejectedError as exc:
        raise HTTPException(status_code=422, detail={"reason": exc.reason.value})

    return SubmissionResponse(
        status="accepted",
        report_id=report.id,
        current_estimate=service.get_current_estimate(venue_id),
    )


@app.get("/venues/{venue_id}/wait-time", response_model=CurrentEstimateResponse)
def current_wait_time(
    venue_id: str,
    service: WaitTimeService = Depends(get_service),
) -> CurrentEstimateResponse:
    state = service.get_wait_state(venue_id) or VenueWaitState(venue_id=venue_id)
    return CurrentEstimateResponse(
        venue_id=venue_id,
        current_estimate=state.current_estimate,
        confidence=state.confidence,
        display_text=state.display_text,
    )


@app.get("/venues/{venue_id}/wait-time/history", response_model=HistoricalAverageResponse)
def historical_wait_time(
    venue_id: str,
    hour: int = Query(..., ge=0, le=23),
    service: WaitTimeService = Depends(get_service),
) -> HistoricalAverageResponse:
    aggregate = service.get_historical_average(venue_id, hour)
    response = HistoricalAverageResponse(
        venue_id=venue_id,
        hour=hour,
        time_slot=classify_time_slot(hour),
    )
    if aggregate is None:
        return response
    return response.model_copy(update={
        "average": aggregate.average,
        "report_count": aggregate.report_count,
        "confidence": aggregate.confidence,
    })


@app.get("/venues/{venue_id}/wait-state", response_model=VenueWaitState)
def wait_state(
    venue_id: str,
    service: WaitTimeService = Depends(get_service),
) -> VenueWaitState:
    state = service.get_wait_state(venue_id)
    if state is None:
        raise HTTPException(status_code=404, detail="No wait time data for venue")
    return state


@app.get("/contributors/{user_id}", response_model=ContributionSummary)
def contributor(
    user_id: str,
    service: WaitTimeService = Depends(get_service),
) -> ContributionSummary:
    return service.get_contributions(user_id)


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    service: WaitTimeService = Depends(get_service),
) -> RecommendationResponse:
    candidates = service.get_recommendations(body.profile, body.catalog, body.limit)
    return RecommendationResponse(
        recommendations=candidates,
        total_candidates=len(body.catalog),
    )


@app.post("/venues/browse", response_model=BrowseResponse)
def browse(
    body: BrowseRequest,
    service: WaitTimeService = Depends(get_service),
) -> BrowseResponse:
    items = service.browse(body.catalog, body.filter, body.sort)
    return BrowseResponse(venues=items, total=len(items))


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
