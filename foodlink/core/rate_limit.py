import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class _Window:
    count: int
    started_at: float


class RateLimiter:
    """Fixed-window counter keyed by identity.

    A key may be hit ``limit`` times within ``window_seconds`` of its first
    hit; the window restarts on the next hit after it expires. At most
    ``max_keys`` identities are tracked, the least recently hit key is
    evicted first. ``clock`` returns seconds and is injected so tests can
    move time explicitly.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Optional[Callable[[], float]] = None,
        max_keys: int = 10000,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._clock = clock or time.monotonic
        self._windows: "OrderedDict[str, _Window]" = OrderedDict()

    def hit(self, key: str) -> bool:
        """Record one attempt for ``key``; return False if it is over the limit."""
        now = self._clock()
        window = self._windows.get(key)

        if window is None or now - window.started_at >= self.window_seconds:
            self._windows[key] = _Window(count=1, started_at=now)
            self._windows.move_to_end(key)
            self._evict()
            return True

        self._windows.move_to_end(key)
        if window.count >= self.limit:
            return False
        window.count += 1
        return True

    def retry_after(self, key: str) -> float:
        """Seconds until ``key`` may hit again; 0 if it is not blocked."""
        window = self._windows.get(key)
        if window is None or window.count < self.limit:
            return 0.0
        return max(window.started_at + self.window_seconds - self._clock(), 0.0)

    def reset(self) -> None:
        self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)

    def _evict(self) -> None:
        while len(self._windows) > self.max_keys:
            self._windows.popitem(last=False)
