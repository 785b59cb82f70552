import time
from typing import Callable


class CooldownTracker:
    """Minimum spacing between emitted signals, per pair."""

    def __init__(self, cooldown_seconds: float = 600, clock: Callable[[], float] = time.time):
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self._last_signal: dict[str, float] = {}

    def remaining(self, pair: str) -> float:
        last = self._last_signal.get(pair)
        if last is None:
            return 0.0
        return max(0.0, self.cooldown_seconds - (self.clock() - last))

    def in_cooldown(self, pair: str) -> bool:
        return self.remaining(pair) > 0

    def record(self, pair: str):
        self._last_signal[pair] = self.clock()

    def reset(self, pair: str = None):
        if pair is None:
            self._last_signal.clear()
        else:
            self._last_signal.pop(pair, None)
