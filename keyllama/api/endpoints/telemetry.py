"""
FastAPI endpoints for live session telemetry.

Editor surface sends raw notifications → SessionTracker updates the session →
snapshot / analysis / summary are read back on demand.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from typing import List
from datetime import datetime
import logging

from ..deps import get_tracker
from ...services.session_engine.tracker import SessionTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/telemetry", tags=["telemetry"])


# --- REQUEST/RESPONSE MODELS ---

class ChangeRequest(BaseModel):
    """One content-change notification from the editor."""
    inserted_text: str = Field("", description="Text inserted by the change")
    deleted_length: int = Field(0, description="Number of characters replaced or removed")


class FocusRequest(BaseModel):
    """One window focus/blur transition."""
    focused: bool = Field(..., description="Window focused after the transition")


class SessionCounters(BaseModel):
    """Running counters after an ingested event."""
    activity_state: str = Field(..., description="active or inactive")
    active_time_ms: int
    inactive_time_ms: int
    total_edit_events: int
    chars_inserted: int
    chars_deleted: int
    paste_events: int
    focus_events: int
    timestamp: datetime = Field(default_factory=datetime.now)


class AnalysisResponse(BaseModel):
    score: int = Field(..., description="Authenticity score (0-100)")
    reasons: List[str] = Field(..., description="Up to 5 supporting reasons")


def _counters(tracker: SessionTracker) -> SessionCounters:
    session = tracker.session
    return SessionCounters(
        activity_state=tracker.activity_state.value,
        active_time_ms=session.active_time_ms,
        inactive_time_ms=session.inactive_time_ms,
        total_edit_events=session.total_edit_events,
        chars_inserted=session.chars_inserted,
        chars_deleted=session.chars_deleted,
        paste_events=len(session.paste_events),
        focus_events=len(session.focus_events),
    )


# --- ENDPOINTS ---

@router.post("/change", response_model=SessionCounters)
async def record_change(request: ChangeRequest, tracker: SessionTracker = Depends(get_tracker)):
    """Ingest one content change (insert, delete or replacement)."""
    tracker.record_change(request.inserted_text, request.deleted_length)
    return _counters(tracker)


@router.post("/focus", response_model=SessionCounters)
async def focus_change(request: FocusRequest, tracker: SessionTracker = Depends(get_tracker)):
    """Ingest one window focus transition."""
    tracker.on_focus_change(request.focused)
    return _counters(tracker)


@router.get("/snapshot")
async def snapshot(tracker: SessionTracker = Depends(get_tracker)):
    """Full session export (camelCase, deep copy)."""
    return tracker.snapshot().to_dict()


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(tracker: SessionTracker = Depends(get_tracker)):
    """
    Score the session so far.

    Scoring failures are recovered by the tracker, so this always returns a
    score (possibly the 50 / "LLM analysis failed" fallback).
    """
    logger.info("Analysis requested")
    analysis = await tracker.request_analysis()
    return AnalysisResponse(score=analysis.score, reasons=analysis.reasons)


@router.get("/summary", response_class=PlainTextResponse)
async def summary(tracker: SessionTracker = Depends(get_tracker)):
    """Human-readable report using the most recent analysis."""
    return tracker.print_summary()


@router.get("/health")
async def health_check(tracker: SessionTracker = Depends(get_tracker)):
    """Check if telemetry processing is available"""
    return {
        "status": "healthy",
        "services": {
            "session_tracker": "available",
            "scorer": "configured" if tracker.scorer is not None else "missing",
        },
    }
