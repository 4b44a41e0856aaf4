import time
from typing import Protocol


class Clock(Protocol):
    """Time source for the tracker. Must be non-decreasing within a session."""

    def now(self) -> int:
        """Current instant in epoch milliseconds."""
        ...


class SystemClock:
    """Wall-clock milliseconds, as the editor surface reports them."""

    def now(self) -> int:
        return int(time.time() * 1000)
