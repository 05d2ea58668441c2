"""Unit tests for the fixed-window admission limiter."""

from __future__ import annotations

import threading

import pytest

from authapi.services.admission import AdmissionLimiters, FixedWindowLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def limiter(clock) -> FixedWindowLimiter:
    return FixedWindowLimiter(max_requests=5, window=60, clock=clock)


class TestFixedWindowLimiter:
    def test_admits_up_to_max_then_rejects(self, limiter):
        results = [limiter.admit("1.2.3.4|/register") for _ in range(6)]
        assert results == [True] * 5 + [False]

    def test_count_never_exceeds_max(self, limiter):
        for _ in range(20):
            limiter.admit("k")
        assert limiter.peek("k").count == 5

    def test_window_end_itself_is_still_inside_the_window(self, limiter, clock):
        for _ in range(5):
            limiter.admit("k")

        clock.advance(60)
        assert limiter.admit("k") is False

    def test_resets_after_window(self, limiter, clock):
        for _ in range(6):
            limiter.admit("k")

        clock.advance(60.001)

        assert limiter.admit("k") is True
        entry = limiter.peek("k")
        assert entry.count == 1
        assert entry.window_end == pytest.approx(clock.now + 60)

    def test_boundary_burst_allows_twice_the_rate(self, limiter, clock):
        assert limiter.admit("k")  # opens the window
        clock.advance(59)
        admitted = 1 + sum(limiter.admit("k") for _ in range(4))
        clock.advance(1.5)
        admitted += sum(limiter.admit("k") for _ in range(5))
        assert admitted == 10

    def test_keys_are_independent(self, limiter):
        for _ in range(5):
            limiter.admit("1.1.1.1|/register")
        assert limiter.admit("1.1.1.1|/register") is False
        assert limiter.admit("2.2.2.2|/register") is True
        assert limiter.admit("1.1.1.1|/login") is True
        assert len(limiter) == 3

    def test_concurrent_admissions_respect_max(self):
        limiter = FixedWindowLimiter(max_requests=50, window=60)
        admitted: list[bool] = []
        lock = threading.Lock()

        def worker() -> None:
            local = [limiter.admit("shared") for _ in range(10)]
            with lock:
                admitted.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(admitted) == 50
        assert limiter.peek("shared").count == 50

    @pytest.mark.parametrize("max_requests, window", [(0, 60), (5, 0), (5, -1)])
    def test_rejects_invalid_parameters(self, max_requests, window):
        with pytest.raises(ValueError):
            FixedWindowLimiter(max_requests=max_requests, window=window)


class TestAdmissionLimiters:
    def test_from_rules_builds_named_limiters(self, clock):
        limiters = AdmissionLimiters.from_rules({"register": (5, 60), "login": (10, 60)}, clock)

        assert set(limiters) == {"register", "login"}
        assert limiters["register"].max_requests == 5
        assert limiters["login"].max_requests == 10
        assert limiters["login"].window == 60.0

    def test_limiters_do_not_share_state(self, clock):
        limiters = AdmissionLimiters.from_rules({"register": (1, 60), "login": (1, 60)}, clock)
        assert limiters["register"].admit("k")
        assert limiters["login"].admit("k")

    def test_unknown_name_raises(self):
        with pytest.raises(KeyError):
            AdmissionLimiters()["nope"]
