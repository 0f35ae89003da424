"""Tests for circuit breaker pattern."""
import pytest

from booking_rules.circuit_breaker import CircuitBreaker, CircuitBreakerOpen


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def failing():
    raise ConnectionError("backend down")


class TestCircuitBreaker:
    """Test circuit breaker state transitions."""

    def setup_method(self):
        self.clock = FakeClock()
        self.breaker = CircuitBreaker(failure_threshold=3, timeout=60, clock=self.clock)

    def _trip(self):
        for _ in range(3):
            with pytest.raises(ConnectionError):
                self.breaker.call(failing)

    def test_starts_closed(self):
        assert self.breaker.state == "closed"
        assert self.breaker.call(lambda: "ok") == "ok"

    def test_opens_after_threshold(self):
        self._trip()
        assert self.breaker.state == "open"

    def test_open_circuit_fails_fast(self):
        """Calls are refused without invoking the function."""
        self._trip()
        called = []

        with pytest.raises(CircuitBreakerOpen) as exc_info:
            self.breaker.call(lambda: called.append(1))

        assert called == []
        assert exc_info.value.retry_after == pytest.approx(60)

    def test_half_open_success_closes(self):
        self._trip()
        self.clock.now += 61

        assert self.breaker.call(lambda: "ok") == "ok"
        assert self.breaker.state == "closed"
        assert self.breaker.failure_count == 0

    def test_half_open_failure_reopens(self):
        self._trip()
        self.clock.now += 61

        with pytest.raises(ConnectionError):
            self.breaker.call(failing)

        assert self.breaker.state == "open"

    def test_success_resets_failure_count(self):
        with pytest.raises(ConnectionError):
            self.breaker.call(failing)
        self.breaker.call(lambda: None)
        assert self.breaker.failure_count == 0

    def test_reset(self):
        self._trip()
        self.breaker.reset()
        assert self.breaker.state == "closed"
