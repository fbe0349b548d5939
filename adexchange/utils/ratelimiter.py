"""In-memory request throttling for the HTTP surface.

Fixed-window counters keyed by (caller key, category). Caller key is the API
key for authenticated calls and the visitor identity for widget traffic.
This only protects the service from request floods; it has nothing to do with
the once-per-day click settlement lock, which lives in the database.

For horizontal scaling replace with a shared store keeping the same interface.

Return semantics:
    check_and_increment -> (allowed: bool, meta: dict)
        meta = {
            'limit': int,
            'remaining': int,
            'reset_epoch': int,
            'count': int,
            'category': str,
        }
"""
from __future__ import annotations

import time
import asyncio
from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass
class Window:
    start: int
    window_seconds: int
    count: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemoryRateLimiter:
    def __init__(self):
        self._windows: Dict[Tuple[str, str], Window] = {}
        self._registry_lock = asyncio.Lock()
        self._last_sweep = 0

    def _now(self) -> int:
        return int(time.time())

    async def _sweep_expired(self, now: int, window_seconds: int) -> None:
        # Visitor keys are unbounded; expired windows are dropped at most once per window
        if now - self._last_sweep < window_seconds:
            return
        async with self._registry_lock:
            if now - self._last_sweep < window_seconds:
                return
            self._last_sweep = now
            expired = [k for k, w in self._windows.items() if w.start + w.window_seconds <= now]
            for k in expired:
                del self._windows[k]

    async def _window_for(self, key: str, category: str, window_start: int, window_seconds: int) -> Window:
        window = self._windows.get((key, category))
        if window is None:
            async with self._registry_lock:
                window = self._windows.setdefault(
                    (key, category), Window(start=window_start, window_seconds=window_seconds)
                )
        return window

    async def check_and_increment(self, key: str, category: str, limit: int, window_seconds: int) -> Tuple[bool, dict]:
        now = self._now()
        window_start = now - (now % window_seconds)
        await self._sweep_expired(now, window_seconds)
        window = await self._window_for(key, category, window_start, window_seconds)

        async with window.lock:
            if window.start != window_start:
                window.start = window_start
                window.window_seconds = window_seconds
                window.count = 0
            window.count += 1
            allowed = window.count <= limit
            meta = {
                "limit": limit,
                "remaining": max(0, limit - window.count) if allowed else 0,
                "reset_epoch": window.start + window_seconds,
                "count": window.count,
                "category": category,
            }
            return allowed, meta

    def reset(self) -> None:
        """Drop all counters (test isolation)."""
        self._windows.clear()
        self._last_sweep = 0


rate_limiter = InMemoryRateLimiter()

__all__ = ["rate_limiter", "InMemoryRateLimiter"]
