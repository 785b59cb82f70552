import time
from typing import Any, Callable, Optional


class CacheStore:
    """In-memory TTL cache for quotes and candles. Last write wins."""

    def __init__(self, ttl: float = 60.0, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.clock() - stored_at >= self.ttl:
            return None
        return value

    def set(self, key: str, value: Any):
        self._entries[key] = (self.clock(), value)

    def __len__(self) -> int:
        return len(self._entries)
