"""Circuit breaker guarding calls to the portal backend.

States:
- CLOSED: calls pass through, failures are counted
- OPEN: the backend is considered down, calls fail immediately
- HALF_OPEN: the timeout elapsed, one trial call decides whether to close

Background cleanup threads share one breaker with the request path, so state
changes are serialized with a lock.
"""
import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(Exception):
    """Raised instead of calling the backend while the circuit is open."""

    def __init__(self, name: str, retry_after: float):
        super().__init__(
            f"Circuit '{name}' is OPEN. Retry after {retry_after:.1f}s"
        )
        self.name = name
        self.retry_after = retry_after


class CircuitBreaker:
    """Fail-fast wrapper around a flaky collaborator."""

    def __init__(
        self,
        name: str = "portal-api",
        failure_threshold: int = 5,
        timeout: float = 60,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            name: Collaborator name used in logs and errors
            failure_threshold: Consecutive failures before opening
            timeout: Seconds to stay open before allowing a trial call
            clock: Time source (monotonic seconds)
        """
        self.name = name
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        """Current state as string."""
        return self._state.value

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Run ``func`` unless the circuit is open.

        Raises:
            CircuitBreakerOpen: If the circuit is open
            Exception: Whatever ``func`` raises (counted as a failure)
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                remaining = self._time_until_retry()
                if remaining > 0:
                    raise CircuitBreakerOpen(self.name, remaining)
                self._state = CircuitState.HALF_OPEN
                logger.info("Circuit %s transitioning to HALF_OPEN", self.name)

        try:
            result = func(*args, **kwargs)
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def reset(self) -> None:
        """Force the circuit closed."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self.failure_count = 0
            self.last_failure_time = None

    def _time_until_retry(self) -> float:
        if self.last_failure_time is None:
            return 0
        elapsed = self._clock() - self.last_failure_time
        return max(0.0, self.timeout - elapsed)

    def _on_success(self):
        with self._lock:
            self.failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.CLOSED
                logger.info("Circuit %s closed after successful trial call", self.name)

    def _on_failure(self):
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                logger.warning("Circuit %s re-opened after failed trial call", self.name)
            elif self.failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.error(
                    "Circuit %s opened after %d failures. Timeout: %ss",
                    self.name, self.failure_count, self.timeout
                )
