from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque


class RateLimiter:
    """Sliding-window throttle shared by worker threads.

    At most ``rpm`` calls to ``acquire`` return within any 60 second window.
    Waiting happens outside the lock so other workers can claim freed slots.
    """

    WINDOW = 60.0

    def __init__(self, rpm: int) -> None:
        self.rpm = max(0, rpm)
        self._lock = threading.Lock()
        self._starts: Deque[float] = deque()

    def acquire(self) -> None:
        if self.rpm <= 0:
            return
        while True:
            with self._lock:
                now = time.monotonic()
                while self._starts and self._starts[0] <= now - self.WINDOW:
                    self._starts.popleft()
                if len(self._starts) < self.rpm:
                    self._starts.append(now)
                    return
                wait = self._starts[0] + self.WINDOW - now
            time.sleep(wait)
