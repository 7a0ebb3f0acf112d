"""Integration tests for DynamoDBCacheBackend against LocalStack."""

from __future__ import annotations

import threading
import uuid

import pytest

from kotapay.client.rate_limiter import RateLimiter
from kotapay.persistence.dynamodb_backend import DynamoDBCacheBackend
from tests.integration.conftest import LOCALSTACK_URL, skip_no_localstack


@skip_no_localstack
class TestDynamoDBCacheIntegration:
    @pytest.fixture
    def backend(self, cache_table):
        return DynamoDBCacheBackend(
            table_name=cache_table,
            region="us-east-1",
            endpoint_url=LOCALSTACK_URL,
        )

    @pytest.fixture
    def key(self):
        return f"it-{uuid.uuid4().hex}"

    def test_setex_get(self, backend, key):
        backend.setex(key, 60, "value")
        assert backend.get(key) == "value"
        backend.delete(key)

    def test_parallel_increments_are_counted(self, backend, key):
        def bump():
            for _ in range(10):
                backend.incr(key)

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert backend.get(key) == "40"
        backend.delete(key)

    def test_rate_limiter_on_shared_store(self, backend):
        limiter = RateLimiter(backend, max_per_hour=1_000_000)
        limiter.admit()
        assert int(backend.get(limiter.window_key())) >= 1
