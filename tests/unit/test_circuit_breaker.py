"""
Unit tests for CircuitBreaker
Tests state transitions, exclusions and the decorator interface
"""
import pytest

from resume_ats.utils.circuit_breaker import CircuitBreaker, CircuitBreakerError, CircuitState


class ProviderDown(Exception):
    pass


class BadInput(Exception):
    pass


@pytest.fixture
def breaker(fake_clock):
    return CircuitBreaker(name="test", fail_max=3, reset_timeout=60, exclude=[BadInput], clock=fake_clock)


@pytest.mark.unit
class TestCircuitBreaker:
    """Tests for circuit state handling"""

    def test_starts_closed(self, breaker):
        assert breaker.state is CircuitState.CLOSED
        breaker.before_call()

    def test_opens_after_fail_max(self, breaker):
        for _ in range(3):
            breaker.record_failure(ProviderDown())
        assert breaker.state is CircuitState.OPEN
        with pytest.raises(CircuitBreakerError) as exc_info:
            breaker.before_call()
        assert exc_info.value.retry_in == 60

    def test_success_resets_count(self, breaker):
        breaker.record_failure(ProviderDown())
        breaker.record_failure(ProviderDown())
        breaker.record_success()
        breaker.record_failure(ProviderDown())
        assert breaker.state is CircuitState.CLOSED

    def test_excluded_exceptions_not_counted(self, breaker):
        for _ in range(5):
            breaker.record_failure(BadInput())
        assert breaker.state is CircuitState.CLOSED
        assert breaker.get_status()['failure_count'] == 0

    def test_half_open_after_timeout(self, breaker, fake_clock):
        for _ in range(3):
            breaker.record_failure(ProviderDown())
        fake_clock.advance(60)
        assert breaker.state is CircuitState.HALF_OPEN

    def test_half_open_failure_reopens(self, breaker, fake_clock):
        for _ in range(3):
            breaker.record_failure(ProviderDown())
        fake_clock.advance(60)
        breaker.before_call()
        breaker.record_failure(ProviderDown())
        assert breaker.state is CircuitState.OPEN

    def test_half_open_success_closes(self, breaker, fake_clock):
        for _ in range(3):
            breaker.record_failure(ProviderDown())
        fake_clock.advance(60)
        breaker.before_call()
        breaker.record_success()
        assert breaker.state is CircuitState.CLOSED

    def test_half_open_admits_single_trial(self, breaker, fake_clock):
        for _ in range(3):
            breaker.record_failure(ProviderDown())
        fake_clock.advance(60)
        breaker.before_call()
        with pytest.raises(CircuitBreakerError):
            breaker.before_call()
        breaker.record_success()
        breaker.before_call()

    def test_excluded_error_ends_trial(self, breaker, fake_clock):
        for _ in range(3):
            breaker.record_failure(ProviderDown())
        fake_clock.advance(60)
        breaker.before_call()
        breaker.record_failure(BadInput())
        assert breaker.state is CircuitState.HALF_OPEN
        breaker.before_call()

    def test_get_status(self, breaker):
        breaker.record_failure(ProviderDown())
        status = breaker.get_status()
        assert status['name'] == "test"
        assert status['state'] == "closed"
        assert status['failure_count'] == 1
        assert status['last_failure'] is not None


@pytest.mark.unit
class TestCircuitBreakerDecorator:
    """Tests for wrapping callables"""

    def test_decorator(self, breaker):
        calls = []

        @breaker
        def flaky():
            calls.append(1)
            raise ProviderDown()

        for _ in range(3):
            with pytest.raises(ProviderDown):
                flaky()
        with pytest.raises(CircuitBreakerError):
            flaky()
        assert len(calls) == 3