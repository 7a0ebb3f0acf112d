"""Tests for TokenManager against an httpx.MockTransport."""

from __future__ import annotations

import threading
import time
from urllib.parse import parse_qs

import httpx
import pytest

from kotapay.client.token_manager import TokenManager
from kotapay.core.exceptions import AuthError, NetworkError
from kotapay.models.credentials import Credentials
from tests.fakes import MemoryCacheBackend

CREDS = Credentials(
    base_url="https://api.test",
    client_id="cid",
    client_secret="csecret",
    username="user",
    password="pw",
    company_id="CO123",
)


def _token_body(token: str = "tok-1") -> dict:
    return {"status": "success", "data": {"access_token": token, "expires_in": 300}}


def _manager(handler, cache=None) -> TokenManager:
    return TokenManager(
        CREDS,
        cache if cache is not None else MemoryCacheBackend(),
        transport=httpx.MockTransport(handler),
    )


class TestGetToken:
    def test_posts_password_grant_form(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_token_body())

        assert _manager(handler).get_token() == "tok-1"
        req = seen[0]
        assert req.method == "POST"
        assert req.url.path == "/v1/auth/token"
        form = {k: v[0] for k, v in parse_qs(req.content.decode()).items()}
        assert form == {
            "grant_type": "password",
            "client_id": "cid",
            "client_secret": "csecret",
            "username": "user",
            "password": "pw",
        }

    def test_caches_under_fixed_key(self):
        calls = []
        cache = MemoryCacheBackend()

        def handler(request):
            calls.append(1)
            return httpx.Response(200, json=_token_body())

        mgr = _manager(handler, cache)
        mgr.get_token()
        mgr.get_token()
        assert len(calls) == 1
        assert cache.get("kotapay_access_token") == "tok-1"
        assert cache.ttl("kotapay_access_token") == pytest.approx(270, abs=1)

    def test_uses_existing_cached_token(self):
        cache = MemoryCacheBackend()
        cache.setex("kotapay_access_token", 270, "shared")
        mgr = _manager(lambda r: pytest.fail("token endpoint called"), cache)
        assert mgr.get_token() == "shared"

    def test_invalidate_forces_new_exchange(self):
        tokens = iter(["tok-1", "tok-2"])
        mgr = _manager(lambda r: httpx.Response(200, json=_token_body(next(tokens))))
        assert mgr.get_token() == "tok-1"
        mgr.invalidate()
        assert mgr.get_token() == "tok-2"

    def test_concurrent_misses_share_one_exchange(self):
        calls = []
        barrier = threading.Barrier(6)
        results = []

        def handler(request):
            calls.append(1)
            time.sleep(0.05)
            return httpx.Response(200, json=_token_body())

        mgr = _manager(handler)

        def worker():
            barrier.wait()
            results.append(mgr.get_token())

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert results == ["tok-1"] * 6


class TestFailures:
    def test_http_error_raises_auth_error_with_status(self):
        cache = MemoryCacheBackend()
        mgr = _manager(lambda r: httpx.Response(401, json={"message": "bad creds"}), cache)
        with pytest.raises(AuthError) as exc_info:
            mgr.get_token()
        assert exc_info.value.status_code == 401
        assert "Status: 401" in exc_info.value.message
        assert cache.get("kotapay_access_token") is None

    def test_logical_failure_uses_vendor_message(self):
        mgr = _manager(lambda r: httpx.Response(200, json={"status": "fail", "message": "locked"}))
        with pytest.raises(AuthError, match="locked"):
            mgr.get_token()

    def test_missing_access_token(self):
        mgr = _manager(lambda r: httpx.Response(200, json={"status": "success", "data": {}}))
        with pytest.raises(AuthError, match="No access token"):
            mgr.get_token()

    def test_connection_error_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NetworkError):
            _manager(handler).get_token()

    def test_auth_failure_does_not_log_secret(self, caplog):
        mgr = _manager(lambda r: httpx.Response(500, text="csecret echoed"))
        with pytest.raises(AuthError):
            mgr.get_token()
        assert "csecret" not in caplog.text
