import copy
import json
import logging
from typing import Callable, Optional

from .clock import Clock, SystemClock
from .models import (
    ActivityState,
    EditEvent,
    EditKind,
    FocusEvent,
    HumanLikelihoodAnalysis,
    PasteEvent,
    SessionStats,
    FALLBACK_ANALYSIS_REASON,
    NO_ANALYSIS_REASON,
)
from .summary import build_summary, format_report
from ..ai_orchestrator.prompts import (
    CHAT_ERROR_RESPONSE,
    CHAT_RELAY,
    FAIRNESS_SCORING,
    PromptTemplate,
)
from ..ai_orchestrator.scorer import Scorer, parse_analysis

logger = logging.getLogger(__name__)

Observer = Callable[[str, dict], None]


class SessionTracker:
    """
    Session telemetry state machine.

    Consumes edit and focus notifications from the editor surface, classifies
    activity, accumulates duration and volume counters, flags paste-like
    insertions and hands out independent snapshots for scoring.

    Concurrency: record_change, on_focus_change and snapshot are synchronous
    and never suspend, so they run to completion between awaits on the event
    loop. Only request_analysis and ask await the scorer.
    """

    # =====================================================================
    # THRESHOLDS
    # =====================================================================

    INACTIVITY_THRESHOLD_MS = 3000
    # Gaps above this are split: the first 3000 ms still count as active,
    # the remainder as inactive.

    PASTE_THRESHOLD_CHARS = 50
    # A single insertion of at least this many characters is a paste.

    FOCUS_LOOKBACK_MS = 2000
    # How far back a focus loss still counts as "right before" a paste.

    def __init__(
        self,
        scorer: Optional[Scorer] = None,
        clock: Optional[Clock] = None,
        focused: bool = True,
        prompt_template: PromptTemplate = FAIRNESS_SCORING,
        observer: Optional[Observer] = None,
    ):
        """
        Args:
            scorer: Async text-in/text-out scoring call (analysis falls back without one)
            clock: Time source (defaults to wall-clock milliseconds)
            focused: Window focus state at session start
            prompt_template: Scoring prompt; must accept {features}
            observer: Optional sink called synchronously for every tracked event
        """
        self.clock = clock or SystemClock()
        self.scorer = scorer
        self.prompt_template = prompt_template
        self.observer = observer

        now = self.clock.now()
        self._last_timestamp = now
        self._state = ActivityState.ACTIVE
        self._cached_analysis: Optional[HumanLikelihoodAnalysis] = None

        self.session = SessionStats(
            start_time=now,
            last_event_time=now,
            focus_events=[FocusEvent(timestamp=now, focused=focused)],
        )

    @property
    def activity_state(self) -> ActivityState:
        return self._state

    @property
    def cached_analysis(self) -> Optional[HumanLikelihoodAnalysis]:
        return self._cached_analysis

    # --- INGESTION ---

    def record_change(self, inserted_text: str, deleted_length: int) -> None:
        """
        Record one raw content change from the editor.

        A change that both inserts and deletes (a replacement) appends two
        EditEvents but counts as a single edit.
        """
        now = self.clock.now()
        delta = now - self._last_timestamp

        # Activity classification
        if delta > self.INACTIVITY_THRESHOLD_MS:
            if self._state == ActivityState.ACTIVE:
                self._emit("STATE", {"transition": "active -> inactive", "gapMs": delta})
            self._state = ActivityState.INACTIVE
            self.session.active_time_ms += self.INACTIVITY_THRESHOLD_MS
            self.session.inactive_time_ms += delta - self.INACTIVITY_THRESHOLD_MS
        else:
            self._state = ActivityState.ACTIVE
            self.session.active_time_ms += delta

        self._last_timestamp = now
        self.session.last_event_time = now

        inserted = len(inserted_text)
        if inserted > 0:
            self.session.edit_events.append(
                EditEvent(timestamp=now, kind=EditKind.INSERT, length=inserted, delta_ms=delta)
            )
            self.session.chars_inserted += inserted
            self._emit("INSERT", {"length": inserted, "deltaMs": delta})

            if inserted >= self.PASTE_THRESHOLD_CHARS:
                paste = PasteEvent(
                    timestamp=now,
                    length=inserted,
                    external=True,
                    after_focus_loss=self.was_recent_focus_loss(now),
                )
                self.session.paste_events.append(paste)
                self._emit("PASTE", {"length": paste.length, "afterFocusLoss": paste.after_focus_loss})

        if deleted_length > 0:
            self.session.edit_events.append(
                EditEvent(timestamp=now, kind=EditKind.DELETE, length=deleted_length, delta_ms=delta)
            )
            self.session.chars_deleted += deleted_length
            self._emit("DELETE", {"length": deleted_length, "deltaMs": delta})

        self.session.total_edit_events += 1

    def on_focus_change(self, focused: bool) -> None:
        """Append a focus transition. Repeated identical states are kept."""
        event = FocusEvent(timestamp=self.clock.now(), focused=focused)
        self.session.focus_events.append(event)
        self._emit("FOCUS", {"focused": focused})

    def was_recent_focus_loss(self, now: int) -> bool:
        """
        True if the newest focus event is within FOCUS_LOOKBACK_MS of `now`
        and says the window was unfocused.
        """
        for event in reversed(self.session.focus_events):
            if now - event.timestamp > self.FOCUS_LOOKBACK_MS:
                break
            return not event.focused
        return False

    # --- EXPORT ---

    def snapshot(self) -> SessionStats:
        """Deep, independent copy of the current session."""
        return copy.deepcopy(self.session)

    async def request_analysis(self) -> HumanLikelihoodAnalysis:
        """
        Score the session through the scorer.

        Never raises: any failure yields the fallback analysis
        (score 50, "LLM analysis failed") and is logged.
        """
        # Taken before the first await; the live session keeps changing
        stats = self.snapshot()
        summary = build_summary(stats)

        try:
            if self.scorer is None:
                raise RuntimeError("No scorer configured")

            prompt = self.prompt_template.render(features=json.dumps(summary, indent=2))
            reply = await self.scorer(prompt)
            analysis = parse_analysis(reply)

        except Exception as e:
            logger.error(f"LLM analysis failed: {e}", exc_info=True)
            return HumanLikelihoodAnalysis(score=50, reasons=[FALLBACK_ANALYSIS_REASON])

        self._cached_analysis = analysis
        logger.info(f"Session analysis: score={analysis.score}, reasons={len(analysis.reasons)}")
        return analysis

    def print_summary(
        self,
        stats: Optional[SessionStats] = None,
        analysis: Optional[HumanLikelihoodAnalysis] = None,
    ) -> str:
        """Format (and log) the report for the given or most recent snapshot/analysis."""
        stats = stats or self.snapshot()
        analysis = analysis or self._cached_analysis or HumanLikelihoodAnalysis(
            score=50, reasons=[NO_ANALYSIS_REASON]
        )
        report = format_report(stats, analysis)
        logger.info("\n" + report)
        return report

    # --- CHAT RELAY ---

    async def ask(self, message: str) -> str:
        """Relay a chat message to the scorer with the session as context."""
        try:
            if self.scorer is None:
                raise RuntimeError("No scorer configured")

            prompt = CHAT_RELAY.render(
                total_edits=self.session.total_edit_events,
                chars_inserted=self.session.chars_inserted,
                chars_deleted=self.session.chars_deleted,
                external_pastes=self.session.external_paste_count,
                message=message,
            )
            return await self.scorer(prompt)

        except Exception as e:
            logger.error(f"askAI failed: {e}", exc_info=True)
            return CHAT_ERROR_RESPONSE

    # --- OBSERVABILITY ---

    def _emit(self, tag: str, data: dict) -> None:
        logger.debug(f"[{tag}] {data}")
        if self.observer is None:
            return
        try:
            self.observer(tag, data)
        except Exception as e:
            logger.warning(f"Observer failed on {tag} event: {e}")
