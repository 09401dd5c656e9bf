"""Per-question countdown driven by an injectable clock."""

from __future__ import annotations

import math
import time
from typing import Callable

Clock = Callable[[], float]


class QuestionTimer:
    def __init__(
        self, duration_seconds: int, clock: Clock = time.monotonic
    ) -> None:
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")
        self.duration_seconds = duration_seconds
        self._clock = clock
        self._started = clock()

    def restart(self) -> None:
        self._started = self._clock()

    def elapsed(self) -> float:
        return max(0.0, self._clock() - self._started)

    def remaining(self) -> int:
        """Whole seconds left, rounded up, never negative."""
        left = self.duration_seconds - self.elapsed()
        if left <= 0:
            return 0
        return math.ceil(left)

    def expired(self) -> bool:
        return self.remaining() == 0
