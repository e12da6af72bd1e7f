"""Per-IP sliding window limits: limiter unit behaviour and the 429 responses."""

import threading
import unittest

from support import ApiTestCase, FakeClock

from hospital_cms.core.rate_limit import SlidingWindowRateLimiter


class TestSlidingWindowRateLimiter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.limiter = SlidingWindowRateLimiter(3, 60, clock=self.clock)

    def test_allows_up_to_max(self) -> None:
        for _ in range(3):
            self.assertEqual(self.limiter.hit("1.2.3.4"), (True, 0))
        allowed, retry_after = self.limiter.hit("1.2.3.4")
        self.assertFalse(allowed)
        self.assertEqual(retry_after, 60)

    def test_keys_are_independent(self) -> None:
        for _ in range(3):
            self.limiter.hit("a")
        self.assertFalse(self.limiter.hit("a")[0])
        self.assertTrue(self.limiter.hit("b")[0])

    def test_window_slides(self) -> None:
        self.limiter.hit("a")
        self.clock.advance(30)
        self.limiter.hit("a")
        self.limiter.hit("a")
        allowed, retry_after = self.limiter.hit("a")
        self.assertFalse(allowed)
        self.assertEqual(retry_after, 30)
        self.clock.advance(30.5)
        self.assertTrue(self.limiter.hit("a")[0])

    def test_rejected_hits_do_not_extend_window(self) -> None:
        for _ in range(3):
            self.limiter.hit("a")
        for _ in range(10):
            self.limiter.hit("a")
        self.clock.advance(60.1)
        self.assertTrue(self.limiter.hit("a")[0])

    def test_idle_keys_are_evicted(self) -> None:
        for i in range(20):
            self.limiter.hit(f"10.9.{i}.1")
        self.assertEqual(len(self.limiter), 20)
        self.clock.advance(61)
        self.limiter.hit("10.0.0.1")
        self.assertEqual(len(self.limiter), 1)

    def test_active_keys_survive_sweep(self) -> None:
        self.limiter.hit("idle")
        self.clock.advance(30)
        self.limiter.hit("busy")
        self.clock.advance(31)
        self.limiter.hit("other")
        self.assertEqual(len(self.limiter), 2)
        self.limiter.hit("busy")
        self.limiter.hit("busy")
        self.assertFalse(self.limiter.hit("busy")[0])

    def test_reset(self) -> None:
        for _ in range(3):
            self.limiter.hit("a")
            self.limiter.hit("b")
        self.limiter.reset("a")
        self.assertTrue(self.limiter.hit("a")[0])
        self.assertFalse(self.limiter.hit("b")[0])
        self.limiter.reset()
        self.assertTrue(self.limiter.hit("b")[0])

    def test_concurrent_hits_never_exceed_max(self) -> None:
        limiter = SlidingWindowRateLimiter(50, 60, clock=self.clock)
        results: list[bool] = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(20):
                allowed, _ = limiter.hit("shared")
                with lock:
                    results.append(allowed)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(results.count(True), 50)


class TestAuthRateLimitApi(ApiTestCase):
    settings_overrides = {"AUTH_RATE_LIMIT_MAX_ATTEMPTS": 3, "AUTH_RATE_LIMIT_WINDOW_SECONDS": 900}

    def test_login_limited_per_ip(self) -> None:
        for _ in range(3):
            self.assertEqual(self.login("nobody", "x").status_code, 401)
        resp = self.login("nobody", "x")
        self.assertEqual(resp.status_code, 429)
        self.assertIn("Retry-After", resp.headers)
        self.assertGreater(int(resp.headers["Retry-After"]), 0)
        self.assertTrue(resp.json()["error"].startswith("Too many requests"))

    def test_forwarded_for_ignored_by_default(self) -> None:
        for i in range(3):
            self.login("nobody", "x", headers={"X-Forwarded-For": f"10.9.{i}.1"})
        resp = self.login("nobody", "x", headers={"X-Forwarded-For": "10.9.99.1"})
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(len(self.app.state.auth_rate_limiter), 1)

    def test_successful_logins_count_too(self) -> None:
        self.create_user("editor", "correct-horse")
        for _ in range(3):
            self.assertEqual(self.login("editor", "correct-horse").status_code, 200)
        self.assertEqual(self.login("editor", "correct-horse").status_code, 429)


class TestForwardedForTrusted(ApiTestCase):
    settings_overrides = {"AUTH_RATE_LIMIT_MAX_ATTEMPTS": 3, "TRUST_PROXY_HEADERS": True}

    def test_forwarded_for_is_separate_client(self) -> None:
        for _ in range(3):
            self.login("nobody", "x", headers={"X-Forwarded-For": "10.0.0.1"})
        blocked = self.login("nobody", "x", headers={"X-Forwarded-For": "10.0.0.1"})
        self.assertEqual(blocked.status_code, 429)
        other = self.login("nobody", "x", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"})
        self.assertEqual(other.status_code, 401)


class TestProxyHeadersIgnored(ApiTestCase):
    settings_overrides = {"AUTH_RATE_LIMIT_MAX_ATTEMPTS": 2, "TRUST_PROXY_HEADERS": False}

    def test_spoofed_forwarded_for_does_not_bypass(self) -> None:
        self.login("nobody", "x", headers={"X-Forwarded-For": "10.0.0.1"})
        self.login("nobody", "x", headers={"X-Forwarded-For": "10.0.0.2"})
        resp = self.login("nobody", "x", headers={"X-Forwarded-For": "10.0.0.3"})
        self.assertEqual(resp.status_code, 429)


class TestApiRateLimit(ApiTestCase):
    settings_overrides = {"API_RATE_LIMIT_MAX_REQUESTS": 2}

    def test_general_routes_limited(self) -> None:
        self.assertEqual(self.client.get(f"{self.prefix}/news").status_code, 200)
        self.assertEqual(self.client.get(f"{self.prefix}/news").status_code, 200)
        resp = self.client.get(f"{self.prefix}/auth/me")
        self.assertEqual(resp.status_code, 429)
        self.assertIn("Retry-After", resp.headers)

    def test_health_not_limited(self) -> None:
        for _ in range(5):
            self.assertEqual(self.client.get(f"{self.prefix}/health").status_code, 200)


if __name__ == "__main__":
    unittest.main()
