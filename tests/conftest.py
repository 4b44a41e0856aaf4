import pytest

from keyllama.services.session_engine.tracker import SessionTracker


class ManualClock:
    """Clock the test moves by hand. Starts at t=0 ms."""

    def __init__(self, start: int = 0):
        self.t = start

    def now(self) -> int:
        return self.t

    def set(self, t: int) -> None:
        self.t = t

    def advance(self, ms: int) -> None:
        self.t += ms


class RecordingScorer:
    """Async scorer returning a fixed reply and keeping every prompt it saw."""

    def __init__(self, reply: str):
        self.reply = reply
        self.prompts = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def tracker(clock):
    return SessionTracker(clock=clock, focused=True)
