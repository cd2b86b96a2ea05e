"""
Tests for the fixed-window rate limiter, its middleware and the periodic task runner.
"""
import threading
import time

from fastapi import FastAPI
from fastapi.testclient import TestClient
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from blogapi import background
from blogapi.background import PeriodicTask, make_rate_limiter_eviction
from blogapi.limiter import FixedWindowRateLimiter
from blogapi.main import app
from blogapi.middleware import RateLimitMiddleware


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def proxied_app(rate_limiter, trusted_hosts):
    """Minimal app with the rate limiter behind the proxy header middleware, as in production."""
    proxied = FastAPI()
    proxied.state.rate_limiter = rate_limiter

    @proxied.get("/ping")
    def ping():
        return {"ok": True}

    proxied.add_middleware(RateLimitMiddleware)
    proxied.add_middleware(ProxyHeadersMiddleware, trusted_hosts=trusted_hosts)
    return proxied


class TestFixedWindowRateLimiter:
    """Test window accounting per client key."""

    def test_allows_up_to_limit(self):
        limiter = FixedWindowRateLimiter(3, 60, clock=FakeClock())
        assert [limiter.allow("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
        assert limiter.allow("a")
        assert not limiter.allow("a")
        assert limiter.allow("b")

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(2, 60, clock=clock)
        limiter.allow("a")
        limiter.allow("a")
        assert not limiter.allow("a")

        clock.advance(59)
        assert not limiter.allow("a")

        clock.advance(2)
        assert limiter.allow("a")
        assert limiter.allow("a")
        assert not limiter.allow("a")

    def test_purge_drops_idle_clients(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(5, 10, clock=clock)
        limiter.allow("idle")
        clock.advance(15)
        limiter.allow("active")

        clock.advance(10)
        assert limiter.purge_stale() == 1
        assert len(limiter) == 1

        # Forgotten clients start a fresh window
        assert limiter.allow("idle")

    def test_eviction_job_uses_purge(self, monkeypatch):
        logged = []
        monkeypatch.setattr(background.worker_logger, "debug", lambda message, **context: logged.append(context))

        clock = FakeClock()
        limiter = FixedWindowRateLimiter(5, 10, clock=clock)
        limiter.allow("idle")
        limiter.allow("busy")
        clock.advance(25)
        limiter.allow("busy")

        make_rate_limiter_eviction(limiter)()
        assert len(limiter) == 1
        assert logged == [{"count": 1, "remaining": 1}]


class TestRateLimitMiddleware:
    """Test the per-IP budget applied to every request."""

    def test_rejects_over_budget(self, client):
        app.state.rate_limiter = FixedWindowRateLimiter(2, 60, clock=FakeClock())

        assert client.get("/health").status_code == 200
        assert client.get("/health").status_code == 200

        response = client.get("/health")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "TOO_MANY_REQUESTS"

    def test_disabled_when_unset(self, client):
        app.state.rate_limiter = None
        for _ in range(5):
            assert client.get("/health").status_code == 200

    def test_budget_is_per_forwarded_client(self):
        client = TestClient(proxied_app(FixedWindowRateLimiter(1, 60, clock=FakeClock()), "*"))

        def ping(ip):
            return client.get("/ping", headers={"X-Forwarded-For": ip}).status_code

        assert ping("203.0.113.5") == 200
        assert ping("203.0.113.5") == 429
        assert ping("203.0.113.6") == 200

    def test_forwarded_header_ignored_from_untrusted_peer(self):
        client = TestClient(proxied_app(FixedWindowRateLimiter(1, 60, clock=FakeClock()), ["10.0.0.1"]))

        assert client.get("/ping", headers={"X-Forwarded-For": "203.0.113.5"}).status_code == 200
        assert client.get("/ping", headers={"X-Forwarded-For": "203.0.113.6"}).status_code == 429


class TestPeriodicTask:
    """Test the background loop lifecycle."""

    def test_runs_until_stopped(self):
        ran = threading.Event()
        task = PeriodicTask("test-task", 0.01, ran.set)

        assert task.start_background()
        assert not task.start_background()
        assert ran.wait(2)

        assert task.stop()
        assert not task.running
        assert not task.stop()

    def test_failures_do_not_stop_loop(self):
        calls = []
        second_call = threading.Event()

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            second_call.set()

        task = PeriodicTask("flaky-task", 0.01, flaky)
        task.start_background()
        try:
            assert second_call.wait(2)
        finally:
            task.stop()

    def test_overrunning_run_is_abandoned(self, monkeypatch):
        warnings = []
        monkeypatch.setattr(
            background.worker_logger, "warning", lambda message, **context: warnings.append((message, context))
        )

        release = threading.Event()
        calls = []
        second_call = threading.Event()

        def slow_then_fast():
            calls.append(1)
            if len(calls) == 1:
                release.wait(5)
            else:
                second_call.set()

        task = PeriodicTask("slow-task", 0.01, slow_then_fast, timeout=0.05)
        task.start_background()
        try:
            for _ in range(200):
                if warnings:
                    break
                time.sleep(0.01)
            assert warnings
            assert warnings[0][0] == "Background task exceeded timeout"
            assert warnings[0][1]["task"] == "slow-task"

            release.set()
            assert second_call.wait(2)
        finally:
            task.stop()

        assert task._executor is None

    def test_stop_does_not_wait_for_stuck_run(self):
        started = threading.Event()
        release = threading.Event()

        def stuck():
            started.set()
            release.wait(5)

        task = PeriodicTask("stuck-task", 0.01, stuck, timeout=0.05)
        task.start_background()
        try:
            assert started.wait(2)
            assert task.stop()
        finally:
            release.set()
        assert not task.running
