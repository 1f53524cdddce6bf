from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional

from fastapi import Request

logger = logging.getLogger(__name__)


class RateLimited(Exception):
    """Raised when a client submits again inside its cooldown window."""

    status_code = 429

    def __init__(self, message: str = "Please wait a few seconds before trying again") -> None:
        super().__init__(message)
        self.message = message


class CooldownLimiter:
    """Remembers the last accepted request per client key."""

    def __init__(self, cooldown_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def allow(self, key: str, now: Optional[float] = None) -> bool:
        if now is None:
            now = self._clock()
        with self._lock:
            last = self._last_seen.get(key)
            if last is not None and now - last < self.cooldown_seconds:
                return False
            self._last_seen[key] = now
            return True

    def check(self, key: str) -> None:
        if not self.allow(key):
            logger.debug("Cooldown active for %s", key)
            raise RateLimited()


def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
