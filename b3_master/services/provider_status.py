"""In-memory provider disable windows for fallback orchestration."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass


@dataclass(frozen=True)
class DisabledWindow:
    until: float
    reason: str


class ProviderStatus:
    """Tracks quote providers that are temporarily benched after rate-limit events."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._windows: dict[str, DisabledWindow] = {}

    def _expire(self, provider: str, now: float) -> DisabledWindow | None:
        window = self._windows.get(provider)
        if window and window.until <= now:
            self._windows.pop(provider, None)
            return None
        return window

    def disable_provider(self, provider: str, ttl_seconds: int, reason: str = "rate_limit") -> float:
        until = time.time() + max(1, ttl_seconds)
        with self._lock:
            current = self._windows.get(provider)
            if current and current.until > until:
                return current.until
            self._windows[provider] = DisabledWindow(until=until, reason=reason)
            return until

    def enable_provider(self, provider: str) -> None:
        with self._lock:
            self._windows.pop(provider, None)

    def is_disabled(self, provider: str) -> bool:
        with self._lock:
            return self._expire(provider, time.time()) is not None

    def get_disabled_until(self, provider: str) -> float | None:
        with self._lock:
            window = self._expire(provider, time.time())
            return window.until if window else None

    def snapshot(self) -> dict[str, dict[str, float | str]]:
        now = time.time()
        with self._lock:
            for provider in list(self._windows):
                self._expire(provider, now)
            return {
                provider: {"disabled_until": window.until, "reason": window.reason}
                for provider, window in self._windows.items()
            }
