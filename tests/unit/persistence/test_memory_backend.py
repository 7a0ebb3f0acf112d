"""Unit tests for MemoryCacheBackend."""

from __future__ import annotations

import threading
import time

import pytest

from tests.fakes import FakeClock, MemoryCacheBackend


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend(clock):
    return MemoryCacheBackend(clock=clock)


class TestExpiry:
    def test_value_visible_before_ttl(self, backend, clock):
        backend.setex("k", 60, "v")
        clock.advance(59)
        assert backend.get("k") == "v"

    def test_value_gone_after_ttl(self, backend, clock):
        backend.setex("k", 60, "v")
        clock.advance(60)
        assert backend.get("k") is None

    def test_delete(self, backend):
        backend.setex("k", 60, "v")
        backend.delete("k")
        assert backend.get("k") is None


class TestIncr:
    def test_counts_from_one(self, backend):
        assert backend.incr("c") == 1
        assert backend.incr("c") == 2

    def test_expire_keeps_count(self, backend, clock):
        backend.incr("c")
        backend.expire("c", 3600)
        assert backend.incr("c") == 2
        assert backend.ttl("c") == pytest.approx(3600)

    def test_counter_restarts_after_expiry(self, backend, clock):
        backend.incr("c")
        backend.expire("c", 10)
        clock.advance(10)
        assert backend.incr("c") == 1

    def test_concurrent_increments_are_not_lost(self):
        backend = MemoryCacheBackend()

        def bump():
            for _ in range(200):
                backend.incr("c")

        threads = [threading.Thread(target=bump) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert backend.get("c") == "1600"


class TestRemember:
    def test_returns_cached_without_calling_factory(self, backend):
        backend.setex("tok", 60, "cached")
        assert backend.remember("tok", 60, lambda: pytest.fail("factory called")) == "cached"

    def test_fills_on_miss(self, backend):
        assert backend.remember("tok", 60, lambda: "fresh") == "fresh"
        assert backend.get("tok") == "fresh"

    def test_factory_error_leaves_cache_empty(self, backend):
        def boom():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            backend.remember("tok", 60, boom)
        assert backend.get("tok") is None

    def test_concurrent_callers_share_one_fill(self):
        backend = MemoryCacheBackend()
        calls = []
        barrier = threading.Barrier(5)
        results = []

        def factory():
            calls.append(1)
            time.sleep(0.05)
            return "token-1"

        def worker():
            barrier.wait()
            results.append(backend.remember("tok", 60, factory))

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert results == ["token-1"] * 5
