"""
Tests for Waiter.

Time is driven by FakeClock: sleep() advances the clock, nothing blocks.
"""

import pytest
import requests

from cloud_client.core.config import WaitSpec
from cloud_client.core.exceptions import (
    ConflictError,
    ErrorKind,
    NotFoundError,
    ResourceFailedError,
    ServiceUnavailableError,
    WaitTimeoutError,
)
from cloud_client.core.waiter import Failed, Ready, TimedOut, Waiter, wait


class Script:
    """poll_fn returning (or raising) scripted results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        if isinstance(result, BaseException):
            raise result
        return result


def is_active(state):
    return state["status"] == "ACTIVE"


def error_fault(state):
    if state["status"] == "ERROR":
        return state.get("fault", "ERROR")
    return None


def make_waiter(poll, clock, spec=None, is_failed=error_fault):
    return Waiter(
        poll,
        is_active,
        is_failed,
        spec or WaitSpec(poll_interval=1, timeout=30, max_transient_retries=3),
        description="server web-1",
        sleep=clock.sleep,
        clock=clock,
    )


class TestReady:

    def test_ready_on_first_poll_does_not_sleep(self, clock):
        poll = Script({"status": "ACTIVE"})
        waiter = make_waiter(poll, clock)

        outcome = waiter.wait()

        assert outcome == Ready({"status": "ACTIVE"})
        assert outcome.ok
        assert poll.calls == 1
        assert clock.sleeps == []

    def test_pending_then_ready(self, clock):
        poll = Script({"status": "BUILD"}, {"status": "BUILD"}, {"status": "ACTIVE"})
        waiter = make_waiter(poll, clock)

        outcome = waiter.wait()

        assert isinstance(outcome, Ready)
        assert waiter.polls == 3
        assert waiter.sleeps == 2
        assert clock.sleeps == [1, 1]

    def test_ready_wins_over_failed(self, clock):
        poll = Script({"status": "ACTIVE"})
        waiter = make_waiter(poll, clock, is_failed=lambda state: "always failing")

        assert isinstance(waiter.wait(), Ready)

    def test_unwrap_returns_value(self, clock):
        poll = Script({"status": "ACTIVE", "id": "abc"})
        assert make_waiter(poll, clock).wait().unwrap()["id"] == "abc"

    def test_no_failed_predicate(self, clock):
        poll = Script({"status": "ERROR"}, {"status": "ACTIVE"})
        waiter = make_waiter(poll, clock, is_failed=None)

        assert isinstance(waiter.wait(), Ready)
        assert poll.calls == 2


class TestFailedState:

    def test_error_state_is_terminal_without_retry(self, clock):
        poll = Script({"status": "BUILD"}, {"status": "ERROR", "fault": "No valid host"})
        waiter = make_waiter(poll, clock)

        outcome = waiter.wait()

        assert outcome == Failed(ErrorKind.FATAL, "No valid host")
        assert poll.calls == 2

    def test_unwrap_raises_resource_failed(self, clock):
        poll = Script({"status": "ERROR", "fault": "No valid host"})
        outcome = make_waiter(poll, clock).wait()

        with pytest.raises(ResourceFailedError) as exc_info:
            outcome.unwrap()
        assert exc_info.value.kind is ErrorKind.FATAL
        assert "No valid host" in str(exc_info.value)

    def test_unexpected_state_shape_is_fatal(self, clock):
        poll = Script({"state": "ACTIVE"})
        outcome = make_waiter(poll, clock).wait()

        assert isinstance(outcome, Failed)
        assert outcome.kind is ErrorKind.FATAL
        assert isinstance(outcome.error, KeyError)


class TestPollErrors:

    def test_transient_errors_are_absorbed(self, clock):
        poll = Script(
            ServiceUnavailableError(503, "https://nova"),
            requests.exceptions.ReadTimeout(),
            {"status": "ACTIVE"},
        )
        waiter = make_waiter(poll, clock)

        outcome = waiter.wait()

        assert isinstance(outcome, Ready)
        assert waiter.transient_count == 2
        assert waiter.sleeps == 2

    def test_transient_retries_are_counted_globally(self, clock):
        """Successful polls in between do not reset the count."""
        glitch = ServiceUnavailableError(503, "https://nova")
        poll = Script(
            glitch, {"status": "BUILD"},
            glitch, {"status": "BUILD"},
            glitch, {"status": "BUILD"},
        )
        spec = WaitSpec(poll_interval=1, timeout=100, max_transient_retries=2)
        waiter = make_waiter(poll, clock, spec=spec)

        outcome = waiter.wait()

        assert isinstance(outcome, Failed)
        assert outcome.kind is ErrorKind.TRANSIENT
        assert outcome.error is glitch
        assert poll.calls == 5

    def test_exhausted_transient_retries(self, clock):
        glitch = requests.exceptions.ConnectionError("reset")
        poll = Script(glitch)
        spec = WaitSpec(poll_interval=1, timeout=100, max_transient_retries=3)
        waiter = make_waiter(poll, clock, spec=spec)

        outcome = waiter.wait()

        assert isinstance(outcome, Failed)
        assert outcome.kind is ErrorKind.TRANSIENT
        assert poll.calls == 4
        assert waiter.transient_count == 3

    def test_zero_transient_retries(self, clock):
        poll = Script(requests.exceptions.ReadTimeout())
        spec = WaitSpec(poll_interval=1, timeout=100, max_transient_retries=0)

        outcome = make_waiter(poll, clock, spec=spec).wait()

        assert isinstance(outcome, Failed)
        assert poll.calls == 1

    @pytest.mark.parametrize("error, kind", [
        (NotFoundError("https://nova/servers/abc"), ErrorKind.NOT_FOUND),
        (ConflictError("https://nova/servers/abc"), ErrorKind.CONFLICT),
        (ValueError("Expecting value"), ErrorKind.FATAL),
        (RuntimeError("bug"), ErrorKind.FATAL),
    ])
    def test_non_transient_errors_are_terminal(self, clock, error, kind):
        poll = Script(error)
        outcome = make_waiter(poll, clock).wait()

        assert outcome.kind is kind
        assert outcome.error is error
        assert poll.calls == 1
        assert clock.sleeps == []

    def test_unwrap_reraises_own_error(self, clock):
        error = NotFoundError("https://nova/servers/abc")
        outcome = make_waiter(Script(error), clock).wait()

        with pytest.raises(NotFoundError) as exc_info:
            outcome.unwrap()
        assert exc_info.value is error

    def test_unwrap_wraps_foreign_error(self, clock):
        error = RuntimeError("bug")
        outcome = make_waiter(Script(error), clock).wait()

        with pytest.raises(ResourceFailedError) as exc_info:
            outcome.unwrap()
        assert exc_info.value.__cause__ is error


class TestDeadline:

    def test_times_out_while_pending(self, clock):
        poll = Script({"status": "BUILD"})
        spec = WaitSpec(poll_interval=2, timeout=5)
        waiter = make_waiter(poll, clock, spec=spec)

        outcome = waiter.wait()

        assert isinstance(outcome, TimedOut)
        assert outcome.polls == waiter.polls
        assert outcome.elapsed >= 5
        assert not outcome.ok

    def test_sleep_never_crosses_deadline(self, clock):
        poll = Script({"status": "BUILD"})
        spec = WaitSpec(poll_interval=2, timeout=5)
        make_waiter(poll, clock, spec=spec).wait()

        # 2 + 2 + 1: the last sleep is shortened to the remaining budget
        assert clock.sleeps == [2, 2, 1]
        assert sum(clock.sleeps) <= 5

    def test_no_poll_starts_after_deadline(self, clock):
        start = clock.now
        poll_times = []

        def poll():
            poll_times.append(clock.now - start)
            return {"status": "BUILD"}

        spec = WaitSpec(poll_interval=3, timeout=10)
        make_waiter(poll, clock, spec=spec).wait()

        assert all(t <= 10 for t in poll_times)

    def test_slow_poll_consumes_budget(self, clock):
        def poll():
            clock.advance(7)
            return {"status": "BUILD"}

        spec = WaitSpec(poll_interval=1, timeout=10)
        waiter = make_waiter(poll, clock, spec=spec)

        outcome = waiter.wait()

        assert isinstance(outcome, TimedOut)
        assert waiter.polls == 2

    def test_transient_errors_also_respect_deadline(self, clock):
        poll = Script(requests.exceptions.ReadTimeout())
        spec = WaitSpec(poll_interval=2, timeout=3, max_transient_retries=100)

        outcome = make_waiter(poll, clock, spec=spec).wait()

        assert isinstance(outcome, TimedOut)

    def test_unwrap_raises_wait_timeout(self, clock):
        spec = WaitSpec(poll_interval=1, timeout=2)
        outcome = make_waiter(Script({"status": "BUILD"}), clock, spec=spec).wait()

        with pytest.raises(WaitTimeoutError) as exc_info:
            outcome.unwrap()
        assert exc_info.value.retryable

    def test_backoff_delays(self, clock):
        poll = Script({"status": "BUILD"}, {"status": "BUILD"}, {"status": "BUILD"}, {"status": "ACTIVE"})
        spec = WaitSpec(poll_interval=1, timeout=100, backoff_factor=2)

        make_waiter(poll, clock, spec=spec).wait()

        assert clock.sleeps == [1, 2, 4]

    def test_long_wait_without_deadline_keeps_backoff_capped(self, clock):
        poll = Script(*([{"status": "BUILD"}] * 1100), {"status": "ACTIVE"})
        spec = WaitSpec(poll_interval=1.0, backoff_factor=2.0, backoff_max=60)

        outcome = make_waiter(poll, clock, spec=spec).wait()

        assert isinstance(outcome, Ready)
        assert poll.calls == 1101
        assert clock.sleeps[-1] == 60
        assert max(clock.sleeps) == 60


class TestReuse:

    def test_counters_reset_between_calls(self, clock):
        poll = Script(requests.exceptions.ReadTimeout(), {"status": "ACTIVE"})
        waiter = make_waiter(poll, clock)

        waiter.wait()
        assert waiter.transient_count == 1

        waiter.wait()
        assert waiter.transient_count == 0
        assert waiter.polls == 1


def test_wait_shortcut(clock):
    outcome = wait(
        Script({"status": "available"}),
        lambda v: v["status"] == "available",
        spec=WaitSpec(poll_interval=1, timeout=10),
        sleep=clock.sleep,
        clock=clock,
    )
    assert isinstance(outcome, Ready)
