from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator

# --- DEFINING THE ENUMS ---

class EditKind(str, Enum):
    INSERT = "insert"
    DELETE = "delete"

class ActivityState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

# --- EVENT RECORDS ---

@dataclass(frozen=True)
class EditEvent:
    """A single insert or delete, recorded once and never changed."""
    timestamp: int
    kind: EditKind
    length: int
    delta_ms: int

@dataclass(frozen=True)
class PasteEvent:
    """
    Large single insertion, classified as a paste.

    `external` is raised for every insertion over the paste threshold; there is
    no clipboard-origin detection behind it.
    """
    timestamp: int
    length: int
    external: bool
    after_focus_loss: bool

@dataclass(frozen=True)
class FocusEvent:
    timestamp: int
    focused: bool

@dataclass
class SessionStats:
    """
    Aggregate of the whole editing session. All instants are epoch milliseconds.

    Invariants (maintained by SessionTracker):
    - active_time_ms + inactive_time_ms == last_event_time - start_time
    - total_edit_events counts raw changes, not EditEvent records
    - chars_inserted / chars_deleted are the per-kind sums of edit_events
    """
    start_time: int
    last_event_time: int
    active_time_ms: int = 0
    inactive_time_ms: int = 0

    total_edit_events: int = 0
    chars_inserted: int = 0
    chars_deleted: int = 0

    edit_events: List[EditEvent] = field(default_factory=list)
    paste_events: List[PasteEvent] = field(default_factory=list)
    focus_events: List[FocusEvent] = field(default_factory=list)

    @property
    def external_paste_count(self) -> int:
        return sum(1 for p in self.paste_events if p.external)

    def to_dict(self) -> dict:
        """JSON-ready export with camelCase keys, for persistence and UI collaborators."""
        return {
            "startTime": self.start_time,
            "lastEventTime": self.last_event_time,
            "activeTimeMs": self.active_time_ms,
            "inactiveTimeMs": self.inactive_time_ms,
            "totalEditEvents": self.total_edit_events,
            "charsInserted": self.chars_inserted,
            "charsDeleted": self.chars_deleted,
            "editEvents": [
                {
                    "timestamp": e.timestamp,
                    "type": e.kind.value,
                    "length": e.length,
                    "deltaMs": e.delta_ms,
                }
                for e in self.edit_events
            ],
            "pasteEvents": [
                {
                    "timestamp": p.timestamp,
                    "length": p.length,
                    "external": p.external,
                    "afterFocusLoss": p.after_focus_loss,
                }
                for p in self.paste_events
            ],
            "focusEvents": [asdict(f) for f in self.focus_events],
        }

# --- SCORER OUTPUT ---

class HumanLikelihoodAnalysis(BaseModel):
    """Score + reasons returned by the scorer. Not owned by the tracker."""
    score: int = Field(..., ge=0, le=100, description="0 = highly suspicious, 100 = fully authentic")
    reasons: List[str] = Field(default_factory=list, description="Up to 5 short explanations")

    @field_validator("reasons")
    @classmethod
    def _keep_first_five(cls, value: List[str]) -> List[str]:
        return value[:5]


FALLBACK_ANALYSIS_REASON = "LLM analysis failed"
NO_ANALYSIS_REASON = "No analysis available"
