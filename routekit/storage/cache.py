"""In-memory TTL cache store shared across concurrent calls."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CachedValue:
    value: Any
    expires_at: float | None = None


class InMemoryCacheStore:
    """Dict-backed store; each operation holds the lock, so it is atomic per key."""

    def __init__(self, *, max_entries: int = 1024, default_ttl_seconds: float | None = None) -> None:
        self._max_entries = max(1, int(max_entries))
        self._default_ttl = default_ttl_seconds
        self._entries: dict[str, CachedValue] = {}
        self._lock = threading.Lock()
        self._next_cleanup_at = 0.0

    def get(self, key: str) -> CachedValue | None:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= now:
                self._entries.pop(key, None)
                return None
            return entry

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        now = time.monotonic()
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        expires_at = now + float(ttl) if ttl is not None else None
        with self._lock:
            self._maybe_cleanup(now)
            if key not in self._entries and len(self._entries) >= self._max_entries:
                # evict oldest insertion
                oldest = next(iter(self._entries))
                self._entries.pop(oldest, None)
            self._entries[key] = CachedValue(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ── Internals ────────────────────────────────────────────────────

    def _maybe_cleanup(self, now: float) -> None:
        if now < self._next_cleanup_at:
            return
        expired = [k for k, e in self._entries.items() if e.expires_at is not None and e.expires_at <= now]
        for k in expired:
            self._entries.pop(k, None)
        self._next_cleanup_at = now + 30.0
