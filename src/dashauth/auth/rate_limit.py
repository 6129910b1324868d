# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory throttling of login attempts, keyed by client address.

Every attempt is counted when it starts (``acquire``); a successful login
clears the client's count (``reset``). After ``max_attempts`` attempts inside
``window`` the client has to wait until the oldest one leaves the window.
Stale clients are swept at most once per window. Time is passed in by the
caller.
"""

from __future__ import annotations

import math
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional


class LoginRateLimiter:
    def __init__(self, max_attempts: int = 5, window: timedelta = timedelta(minutes=5)):
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self.max_attempts = max_attempts
        self.window = window
        self._attempts: Dict[str, List[datetime]] = {}
        self._last_cleanup: Optional[datetime] = None
        self._lock = threading.Lock()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._attempts

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)

    def _recent(self, key: str, now: datetime) -> List[datetime]:
        cutoff = now - self.window
        recent = [t for t in self._attempts.get(key, []) if t > cutoff]
        if recent:
            self._attempts[key] = recent
        else:
            self._attempts.pop(key, None)
        return recent

    def _sweep(self, now: datetime) -> int:
        before = len(self._attempts)
        for k in list(self._attempts):
            self._recent(k, now)
        self._last_cleanup = now
        return before - len(self._attempts)

    def acquire(self, key: str, now: datetime) -> Optional[int]:
        """Reserve one attempt for ``key``.

        Returns None when the attempt may proceed, otherwise the seconds to
        wait before retrying. Check and reservation happen under one lock, so
        concurrent requests cannot overshoot ``max_attempts``.
        """
        with self._lock:
            if self._last_cleanup is None or now - self._last_cleanup >= self.window:
                self._sweep(now)
            recent = self._recent(key, now)
            if len(recent) >= self.max_attempts:
                wait = (recent[0] + self.window - now).total_seconds()
                return max(1, math.ceil(wait))
            self._attempts.setdefault(key, []).append(now)
            return None

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

    def cleanup(self, now: datetime) -> int:
        """Drop clients with no attempt inside the window. Returns count removed."""
        with self._lock:
            return self._sweep(now)
