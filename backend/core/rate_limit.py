"""Per-session rate limiting for the chat proxy.

The chat and transcription routes both forward to a paid upstream model.
Each (session, route) pair gets its own sliding window, so a devotee who
records a lot of voice questions does not lose their typed chat budget.

When a request is refused the decision carries how long until the oldest
call in the window expires; that is what the 429 sends as Retry-After.
"""
import logging
import math
import threading
import time
from collections import OrderedDict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional, Tuple

from backend.config import settings

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"

Key = Tuple[str, str]


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0  # Whole seconds; 0 when allowed


class SlidingWindowLimiter:
    """In-memory sliding-window limiter keyed by (session, route).

    Keys are kept in least-recently-used order; once ``max_keys`` are
    tracked, the stalest key is dropped to make room.
    """

    def __init__(
        self,
        window_seconds: int = settings.RATE_LIMIT_WINDOW,
        max_keys: int = settings.MAX_CONCURRENT_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._window = window_seconds
        self._max_keys = max_keys
        self._clock = clock
        self._calls: "OrderedDict[Key, Deque[float]]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def window_seconds(self) -> int:
        return self._window

    @property
    def max_keys(self) -> int:
        return self._max_keys

    @property
    def tracked_keys(self) -> int:
        return len(self._calls)

    def hit(self, session_id: Optional[str], route: str, limit: int) -> RateDecision:
        """Record one call for ``route`` if the session still has room."""
        key = (session_id or ANONYMOUS, route)
        with self._lock:
            now = self._clock()
            calls = self._calls.get(key)
            if calls is None:
                if len(self._calls) >= self._max_keys:
                    evicted, _ = self._calls.popitem(last=False)
                    logger.debug(f"Rate limiter full, dropped key for route '{evicted[1]}'")
                calls = self._calls[key] = deque()
            else:
                self._calls.move_to_end(key)

            cutoff = now - self._window
            while calls and calls[0] <= cutoff:
                calls.popleft()

            if len(calls) >= limit:
                wait = calls[0] + self._window - now if calls else self._window
                return RateDecision(False, 0, max(1, math.ceil(wait)))

            calls.append(now)
            return RateDecision(True, limit - len(calls))

    def reset(self) -> None:
        with self._lock:
            self._calls.clear()


# Shared by the chat and transcription routes
chat_rate_limiter = SlidingWindowLimiter()
