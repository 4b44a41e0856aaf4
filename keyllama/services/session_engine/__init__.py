"""
Session Engine - live telemetry for one editing session.

The tracker itself lives in .tracker; this package exports the shared types.
"""

from .clock import Clock, SystemClock
from .models import (
    ActivityState,
    EditEvent,
    EditKind,
    FocusEvent,
    HumanLikelihoodAnalysis,
    PasteEvent,
    SessionStats,
)

__all__ = [
    "ActivityState",
    "Clock",
    "EditEvent",
    "EditKind",
    "FocusEvent",
    "HumanLikelihoodAnalysis",
    "PasteEvent",
    "SessionStats",
    "SystemClock",
]
