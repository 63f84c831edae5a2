"""Tests for guest cart storage and expiry."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from marketplace.config import Settings
from marketplace.guest_cart.store import (
    InMemoryGuestCartStore,
    RedisGuestCartStore,
    build_guest_cart_store,
)
from marketplace.guest_cart.sweeper import sweep_guest_carts


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 12, 6, 9, 0, tzinfo=UTC)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return InMemoryGuestCartStore(ttl=timedelta(hours=24), clock=clock)


class TestInMemoryStore:
    def test_set_and_get(self, store):
        store.set("sess-1", [{"product_id": "p1", "quantity": 2}])
        assert store.get("sess-1") == [{"product_id": "p1", "quantity": 2}]

    def test_missing_session(self, store):
        assert store.get("nope") is None

    def test_returned_items_are_copies(self, store):
        store.set("sess-1", [{"product_id": "p1", "quantity": 2}])
        store.get("sess-1")[0]["quantity"] = 99
        assert store.get("sess-1")[0]["quantity"] == 2

    def test_expires_after_idle_ttl(self, store, clock):
        store.set("sess-1", [{"product_id": "p1", "quantity": 1}])
        clock.advance(hours=24)
        assert store.get("sess-1") is None

    def test_reading_refreshes_expiry(self, store, clock):
        store.set("sess-1", [{"product_id": "p1", "quantity": 1}])
        clock.advance(hours=20)
        assert store.get("sess-1") is not None
        clock.advance(hours=20)
        assert store.get("sess-1") is not None

    def test_sweep_removes_only_expired(self, store, clock):
        store.set("old", [])
        clock.advance(hours=12)
        store.set("fresh", [])
        clock.advance(hours=13)

        assert store.sweep_expired() == 1
        assert len(store) == 1
        assert store.get("fresh") == []

    def test_delete(self, store):
        store.set("sess-1", [])
        store.delete("sess-1")
        store.delete("sess-1")
        assert store.get("sess-1") is None


class TestRedisStore:
    def test_set_writes_json_with_ttl(self):
        client = MagicMock()
        store = RedisGuestCartStore(client, ttl=timedelta(hours=24))

        store.set("sess-1", [{"product_id": "p1", "quantity": 1}])

        client.set.assert_called_once_with(
            "guest_cart:sess-1", '[{"product_id": "p1", "quantity": 1}]', ex=timedelta(hours=24)
        )

    def test_get_refreshes_ttl(self):
        client = MagicMock()
        client.get.return_value = '[{"product_id": "p1", "quantity": 3}]'
        store = RedisGuestCartStore(client, ttl=timedelta(hours=1))

        assert store.get("sess-1") == [{"product_id": "p1", "quantity": 3}]
        client.expire.assert_called_once_with("guest_cart:sess-1", timedelta(hours=1))

    def test_get_missing(self):
        client = MagicMock()
        client.get.return_value = None
        store = RedisGuestCartStore(client, ttl=timedelta(hours=1))

        assert store.get("sess-1") is None
        client.expire.assert_not_called()


class TestBuildStore:
    def test_memory_backend(self):
        store = build_guest_cart_store(Settings(guest_cart_ttl_hours=2))
        assert isinstance(store, InMemoryGuestCartStore)
        assert store.ttl == timedelta(hours=2)

    def test_redis_backend(self):
        store = build_guest_cart_store(Settings(guest_cart_backend="redis"))
        assert isinstance(store, RedisGuestCartStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_guest_cart_store(Settings(guest_cart_backend="memcached"))


class TestSweeper:
    def test_sweeps_until_cancelled(self, store, clock):
        store.set("sess-1", [{"product_id": "p1", "quantity": 1}])
        clock.advance(hours=25)

        async def run_briefly():
            task = asyncio.create_task(sweep_guest_carts(store, interval_seconds=0))
            while len(store):
                await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run_briefly())
        assert store.get("sess-1") is None
