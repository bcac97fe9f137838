import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    """Sliding window per key; process-local."""

    def __init__(self) -> None:
        self._buckets: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = time.time()
        window_start = now - window_seconds
        with self._lock:
            q = self._buckets[key]
            while q and q[0] <= window_start:
                q.popleft()
            if len(q) >= max_requests:
                return False
            q.append(now)
            return True
