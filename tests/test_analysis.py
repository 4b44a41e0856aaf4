import asyncio
import json

import pytest

from keyllama.services.ai_orchestrator.prompts import HUMAN_LIKELIHOOD_SCORING
from keyllama.services.ai_orchestrator.scorer import LLMScorer
from keyllama.services.session_engine.models import HumanLikelihoodAnalysis
from keyllama.services.session_engine.tracker import SessionTracker

from conftest import RecordingScorer

FALLBACK = {"score": 50, "reasons": ["LLM analysis failed"]}


def _features(prompt: str) -> dict:
    """Pull the embedded summary object back out of a rendered prompt."""
    return json.loads(prompt[prompt.index("{"):prompt.rindex("}") + 1])


@pytest.mark.asyncio
async def test_analysis_parses_reply_and_caches_it(clock):
    scorer = RecordingScorer(
        'Sure! Here is the result:\n```json\n{"score": 87, "reasons": ["Steady typing", "No pastes"]}\n```'
    )
    tracker = SessionTracker(scorer=scorer, clock=clock)

    analysis = await tracker.request_analysis()

    assert analysis.score == 87
    assert analysis.reasons == ["Steady typing", "No pastes"]
    assert tracker.cached_analysis == analysis
    assert len(scorer.prompts) == 1


@pytest.mark.asyncio
async def test_prompt_embeds_session_summary(clock):
    scorer = RecordingScorer('{"score": 40, "reasons": []}')
    tracker = SessionTracker(scorer=scorer, clock=clock)

    clock.set(90_000)
    tracker.record_change("x" * 120, 0)
    clock.set(90_500)
    tracker.record_change("", 7)
    clock.set(91_000)
    tracker.on_focus_change(False)

    await tracker.request_analysis()

    prompt = scorer.prompts[0]
    assert "fair play and originality" in prompt
    assert _features(prompt) == {
        "totalEdits": 2,
        "charsInserted": 120,
        "charsDeleted": 7,
        "pasteEvents": 1,
        "externalPasteEvents": 1,
        "focusEvents": 2,
        "activeMinutes": 0,
        "inactiveMinutes": 1,
    }


@pytest.mark.asyncio
async def test_alternate_scoring_template(clock):
    scorer = RecordingScorer('{"score": 90, "reasons": ["Human-like"]}')
    tracker = SessionTracker(scorer=scorer, clock=clock, prompt_template=HUMAN_LIKELIHOOD_SCORING)

    await tracker.request_analysis()

    assert "how likely it is that a human typed" in scorer.prompts[0]
    assert _features(scorer.prompts[0])["totalEdits"] == 0


@pytest.mark.asyncio
async def test_snapshot_is_taken_before_the_scorer_suspends(clock):
    tracker = None

    async def scorer(prompt):
        tracker.record_change("typed while waiting", 0)
        await asyncio.sleep(0)
        return json.dumps({"score": 70, "reasons": [str(_features(prompt)["totalEdits"])]})

    tracker = SessionTracker(scorer=scorer, clock=clock)
    analysis = await tracker.request_analysis()

    assert analysis.reasons == ["0"]
    assert tracker.session.total_edit_events == 1


@pytest.mark.asyncio
async def test_reasons_are_capped_at_five(clock):
    reply = json.dumps({"score": 10, "reasons": [f"r{i}" for i in range(8)]})
    tracker = SessionTracker(scorer=RecordingScorer(reply), clock=clock)

    analysis = await tracker.request_analysis()
    assert analysis.reasons == ["r0", "r1", "r2", "r3", "r4"]


@pytest.mark.parametrize("reply", [
    "",
    "I cannot score this session.",
    "{score: 80, reasons: nope}",
    '{"reasons": ["missing score"]}',
    '{"score": 150, "reasons": []}',
])
@pytest.mark.asyncio
async def test_bad_replies_fall_back(clock, reply):
    tracker = SessionTracker(scorer=RecordingScorer(reply), clock=clock)

    analysis = await tracker.request_analysis()

    assert analysis.model_dump() == FALLBACK
    assert tracker.cached_analysis is None


@pytest.mark.asyncio
async def test_scorer_errors_fall_back(clock):
    async def timing_out(prompt):
        raise asyncio.TimeoutError()

    tracker = SessionTracker(scorer=timing_out, clock=clock)
    assert (await tracker.request_analysis()).model_dump() == FALLBACK


@pytest.mark.asyncio
async def test_missing_scorer_falls_back(clock):
    tracker = SessionTracker(clock=clock)
    assert (await tracker.request_analysis()).model_dump() == FALLBACK


@pytest.mark.asyncio
async def test_missing_api_key_falls_back(clock, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    tracker = SessionTracker(scorer=LLMScorer(api_key=None), clock=clock)

    assert (await tracker.request_analysis()).model_dump() == FALLBACK


@pytest.mark.asyncio
async def test_failure_keeps_previous_cached_analysis(clock):
    scorer = RecordingScorer('{"score": 77, "reasons": ["ok"]}')
    tracker = SessionTracker(scorer=scorer, clock=clock)
    first = await tracker.request_analysis()

    scorer.reply = "garbage"
    second = await tracker.request_analysis()

    assert second.score == 50
    assert tracker.cached_analysis == first


def test_print_summary_without_analysis(tracker, clock):
    clock.set(150_000)
    tracker.record_change("abc", 0)

    report = tracker.print_summary()

    assert "Human Likelihood Score: 50/100" in report
    assert "  1. No analysis available" in report
    assert "  Total Edits: 1" in report
    assert "  Active Time: 0 minutes" in report
    assert "  Inactive Time: 2 minutes" in report


def test_print_summary_uses_given_pair(tracker):
    analysis = HumanLikelihoodAnalysis(score=12, reasons=["Large paste after focus loss"])

    report = tracker.print_summary(tracker.snapshot(), analysis)

    assert "Human Likelihood Score: 12/100" in report
    assert "  1. Large paste after focus loss" in report


@pytest.mark.asyncio
async def test_ask_relays_message_with_session_context(clock):
    scorer = RecordingScorer("Try a two-pointer approach.")
    tracker = SessionTracker(scorer=scorer, clock=clock)
    clock.set(100)
    tracker.record_change("x" * 55, 0)

    reply = await tracker.ask("How do I reverse a list?")

    assert reply == "Try a two-pointer approach."
    assert 'User says: "How do I reverse a list?"' in scorer.prompts[0]
    assert "External pastes: 1" in scorer.prompts[0]


@pytest.mark.asyncio
async def test_ask_failure_returns_error_message(clock):
    async def broken(prompt):
        raise RuntimeError("AI service error")

    tracker = SessionTracker(scorer=broken, clock=clock)
    assert await tracker.ask("hello") == "Error: could not get AI response"
