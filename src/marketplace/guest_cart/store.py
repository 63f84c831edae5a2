"""Storage for anonymous guest carts.

Guest carts are a convenience cache keyed by session id, never the source of
truth: once the guest signs in, their lines are merged into the persisted
``Cart`` and the guest entry is dropped. Entries expire after a fixed idle
window that restarts on every read or write.

Two interchangeable backends implement ``GuestCartStore``:
``InMemoryGuestCartStore`` for a single process (and tests), and
``RedisGuestCartStore`` when several workers must share guest carts.
"""

import copy
import json
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import redis

from marketplace.config import Settings

GuestItems = list[dict[str, Any]]


class GuestCartStore(Protocol):
    def get(self, session_id: str) -> GuestItems | None:
        """Items for ``session_id``, or None if there is no live entry. Refreshes the expiry."""

    def set(self, session_id: str, items: GuestItems) -> None: ...

    def delete(self, session_id: str) -> None: ...

    def sweep_expired(self) -> int:
        """Drop expired entries; returns how many were removed."""


class InMemoryGuestCartStore:
    def __init__(self, ttl: timedelta, clock: Callable[[], datetime] | None = None):
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(UTC))
        self._entries: dict[str, tuple[GuestItems, datetime]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, session_id: str) -> GuestItems | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            items, expires_at = entry
            if expires_at <= now:
                del self._entries[session_id]
                return None
            self._entries[session_id] = (items, now + self.ttl)
            return copy.deepcopy(items)

    def set(self, session_id: str, items: GuestItems) -> None:
        with self._lock:
            self._entries[session_id] = (copy.deepcopy(items), self._clock() + self.ttl)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)

    def sweep_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [sid for sid, (_, expires_at) in self._entries.items() if expires_at <= now]
            for session_id in expired:
                del self._entries[session_id]
        return len(expired)


class RedisGuestCartStore:
    """Guest carts as JSON strings under ``guest_cart:<session>``, expired by Redis itself."""

    def __init__(self, client: redis.Redis, ttl: timedelta, prefix: str = "guest_cart:"):
        self.client = client
        self.ttl = ttl
        self.prefix = prefix

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    def get(self, session_id: str) -> GuestItems | None:
        key = self._key(session_id)
        raw = self.client.get(key)
        if raw is None:
            return None
        self.client.expire(key, self.ttl)
        return json.loads(raw)

    def set(self, session_id: str, items: GuestItems) -> None:
        self.client.set(self._key(session_id), json.dumps(items), ex=self.ttl)

    def delete(self, session_id: str) -> None:
        self.client.delete(self._key(session_id))

    def sweep_expired(self) -> int:
        # Keys carry their own TTL
        return 0


def build_guest_cart_store(settings: Settings) -> GuestCartStore:
    ttl = timedelta(hours=settings.guest_cart_ttl_hours)
    if settings.guest_cart_backend == "redis":
        return RedisGuestCartStore(redis.Redis.from_url(settings.redis_url, decode_responses=True), ttl)
    if settings.guest_cart_backend == "memory":
        return InMemoryGuestCartStore(ttl)
    raise ValueError(f"Unknown guest cart backend: {settings.guest_cart_backend!r}")
