"""
Derived views over a SessionStats snapshot.

- build_summary: the compact feature dict sent to the scorer
- format_report: the human-readable end-of-session report
"""

import math
from typing import Dict

from .models import SessionStats, HumanLikelihoodAnalysis

MS_PER_MINUTE = 60000

RULE = "═" * 59


def round_minutes(ms: int) -> int:
    """
    Milliseconds to whole minutes, rounding halves up.

    Python's round() rounds halves to even; the summary contract expects
    2.5 minutes to read as 3.
    """
    return int(math.floor(ms / MS_PER_MINUTE + 0.5))


def build_summary(stats: SessionStats) -> Dict[str, int]:
    """
    Summary object embedded (JSON-encoded) in the scoring prompt.

    Field names are part of the scorer contract; keep them camelCase.
    """
    return {
        "totalEdits": stats.total_edit_events,
        "charsInserted": stats.chars_inserted,
        "charsDeleted": stats.chars_deleted,
        "pasteEvents": len(stats.paste_events),
        "externalPasteEvents": stats.external_paste_count,
        "focusEvents": len(stats.focus_events),
        "activeMinutes": round_minutes(stats.active_time_ms),
        "inactiveMinutes": round_minutes(stats.inactive_time_ms),
    }


def format_report(stats: SessionStats, analysis: HumanLikelihoodAnalysis) -> str:
    lines = [
        RULE,
        "📊 Keyllama Final Human Likelihood Summary (LLM)",
        RULE,
        f"Human Likelihood Score: {analysis.score}/100",
        "Reasons:",
    ]
    lines.extend(f"  {i}. {reason}" for i, reason in enumerate(analysis.reasons, start=1))
    lines.extend([
        "",
        "Session Metrics:",
        f"  Total Edits: {stats.total_edit_events}",
        f"  Characters Inserted: {stats.chars_inserted}",
        f"  Characters Deleted: {stats.chars_deleted}",
        f"  Paste Events: {len(stats.paste_events)}",
        f"  External Paste Events: {stats.external_paste_count}",
        f"  Focus Events: {len(stats.focus_events)}",
        f"  Active Time: {round_minutes(stats.active_time_ms)} minutes",
        f"  Inactive Time: {round_minutes(stats.inactive_time_ms)} minutes",
        RULE,
    ])
    return "\n".join(lines)
