"""Circuit breaker for the AI provider request cycle.

After ``fail_max`` failed analysis cycles the breaker opens and the AI path
fails fast, so the merge engine goes straight to rule-based scoring until
``reset_timeout`` has elapsed. One trial cycle is then let through; other
cycles are rejected until that trial records its outcome.
"""

import logging
import time
from datetime import datetime, timezone
from enum import Enum
from functools import wraps
from threading import Lock
from typing import Callable, List, Optional, Type

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Requests pass through, failures are counted
    OPEN = "open"          # Requests are rejected immediately
    HALF_OPEN = "half_open"  # One trial request decides the next state


class CircuitBreakerError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, name: str, retry_in: float):
        super().__init__(f"Circuit breaker '{name}' is open. Retry in {retry_in:.0f}s.")
        self.name = name
        self.retry_in = retry_in


class CircuitBreaker:
    """
    Thread-safe circuit breaker.

    Usage:
        breaker = CircuitBreaker(name="gemini_ats", fail_max=10, reset_timeout=180)

        @breaker
        def run_cycle():
            ...
    """

    def __init__(
        self,
        name: str,
        fail_max: int = 10,
        reset_timeout: float = 180,
        exclude: Optional[List[Type[Exception]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            name: Identifier used in logs and status
            fail_max: Consecutive failures before the circuit opens
            reset_timeout: Seconds the circuit stays open
            exclude: Exception types that never count as failures
            clock: Monotonic time source
        """
        self.name = name
        self.fail_max = fail_max
        self.reset_timeout = reset_timeout
        self.exclude = tuple(exclude or ())
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._last_failure_wall: Optional[float] = None
        self._trial_in_flight = False
        self._lock = Lock()

    @property
    def state(self) -> CircuitState:
        """Current state; an expired OPEN circuit moves to HALF_OPEN."""
        with self._lock:
            return self._current_state()

    def _current_state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self._opened_at is not None:
            elapsed = self._clock() - self._opened_at
            if elapsed >= self.reset_timeout:
                logger.info(f"[CircuitBreaker:{self.name}] Transitioning to HALF_OPEN after {elapsed:.0f}s")
                self._state = CircuitState.HALF_OPEN
        return self._state

    def before_call(self):
        """Reject the call if the circuit is open or a half-open trial is running."""
        with self._lock:
            state = self._current_state()
            if state == CircuitState.OPEN:
                remaining = max(0.0, self.reset_timeout - (self._clock() - self._opened_at))
                logger.warning(f"[CircuitBreaker:{self.name}] Circuit OPEN, blocking call. Reset in {remaining:.0f}s")
                raise CircuitBreakerError(self.name, remaining)
            if state == CircuitState.HALF_OPEN:
                if self._trial_in_flight:
                    logger.warning(f"[CircuitBreaker:{self.name}] Trial call in progress, blocking call")
                    raise CircuitBreakerError(self.name, 0)
                self._trial_in_flight = True

    def record_success(self):
        with self._lock:
            self._trial_in_flight = False
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                logger.info(f"[CircuitBreaker:{self.name}] Success in HALF_OPEN, closing circuit")
                self._state = CircuitState.CLOSED
                self._opened_at = None

    def record_failure(self, exception: Exception):
        if isinstance(exception, self.exclude):
            logger.debug(f"[CircuitBreaker:{self.name}] Excluding {type(exception).__name__} from failure count")
            with self._lock:
                self._trial_in_flight = False
            return

        with self._lock:
            self._trial_in_flight = False
            self._failure_count += 1
            self._last_failure_wall = time.time()

            if self._state == CircuitState.HALF_OPEN:
                logger.warning(f"[CircuitBreaker:{self.name}] Failed in HALF_OPEN, reopening circuit")
                self._open()
            elif self._state == CircuitState.CLOSED and self._failure_count >= self.fail_max:
                logger.warning(f"[CircuitBreaker:{self.name}] Opening circuit after {self._failure_count} failures")
                self._open()

    def _open(self):
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()

    def __call__(self, func: Callable) -> Callable:
        """Decorator to wrap a function with circuit breaker protection."""
        @wraps(func)
        def wrapper(*args, **kwargs):
            self.before_call()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                self.record_failure(e)
                raise
            self.record_success()
            return result

        return wrapper

    def get_status(self) -> dict:
        """Circuit breaker status for health reporting."""
        state = self.state
        return {
            "name": self.name,
            "state": state.value,
            "failure_count": self._failure_count,
            "fail_max": self.fail_max,
            "last_failure": (
                datetime.fromtimestamp(self._last_failure_wall, tz=timezone.utc).isoformat()
                if self._last_failure_wall else None
            ),
            "reset_timeout": self.reset_timeout,
        }
