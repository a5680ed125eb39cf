"""
Unit tests for the single-slot concurrency gate.
"""

import threading
import time

import pytest

from oauth_client import ConcurrencyGate, GateState


def wait_until(predicate, timeout=2.0):
    """Poll predicate until it is true or timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def waiting_count(gate):
    with gate._cond:
        return len(gate._waiters)


class TestConcurrencyGate:
    """Test gate state transitions."""

    @pytest.fixture
    def gate(self):
        gate = ConcurrencyGate(name="test")
        yield gate
        gate.release()

    def test_initially_open(self, gate):
        assert gate.state is GateState.OPEN
        assert gate.locked() is False
        assert gate.deadline is None
        assert gate.holder is None

    def test_acquire_and_release(self, gate):
        assert gate.acquire(message="request 1") is True
        assert gate.state is GateState.BLOCKED
        assert gate.holder == "request 1"
        assert gate.deadline is None

        assert gate.release() is True
        assert gate.state is GateState.OPEN
        assert gate.holder is None

    def test_release_open_gate_is_noop(self, gate):
        assert gate.release() is False
        assert gate.release() is False

        assert gate.acquire(timeout=0.5) is True
        assert gate.state is GateState.BLOCKED

    def test_double_release_does_not_over_release(self, gate):
        gate.acquire()
        gate.release()
        gate.release()

        gate.acquire()
        assert gate.acquire(timeout=0.1) is False

    def test_mutual_exclusion(self, gate):
        admitted = threading.Event()

        def second():
            gate.acquire()
            admitted.set()

        assert gate.acquire() is True
        thread = threading.Thread(target=second, daemon=True)
        thread.start()

        assert admitted.wait(0.2) is False
        gate.release()
        assert admitted.wait(2) is True
        thread.join(2)
        assert gate.state is GateState.BLOCKED

    def test_auto_release(self, gate):
        admitted = threading.Event()

        assert gate.acquire(hold_seconds=0.3) is True
        assert gate.deadline is not None
        assert gate.deadline > time.monotonic()

        thread = threading.Thread(target=lambda: gate.acquire() and admitted.set(), daemon=True)
        thread.start()

        assert admitted.wait(0.1) is False
        assert admitted.wait(2) is True
        thread.join(2)

    def test_auto_release_without_waiters(self, gate):
        gate.acquire(hold_seconds=0.1)
        assert wait_until(lambda: gate.state is GateState.OPEN)
        assert gate.deadline is None

    def test_explicit_release_stops_timer(self, gate):
        gate.acquire(hold_seconds=0.2)
        assert gate.release() is True

        # A new hold without timer must survive the old timer's deadline
        gate.acquire()
        time.sleep(0.4)
        assert gate.state is GateState.BLOCKED

    def test_stale_timer_is_noop(self, gate):
        gate.acquire(hold_seconds=0.2)
        stale_generation = gate._generation
        gate.release()
        gate.acquire()

        gate._expire(stale_generation, "late timer")
        assert gate.state is GateState.BLOCKED

    def test_acquire_timeout(self, gate):
        gate.acquire()
        started = time.monotonic()

        assert gate.acquire(timeout=0.1) is False
        assert time.monotonic() - started >= 0.1
        assert waiting_count(gate) == 0

    def test_timed_out_waiter_does_not_hold(self, gate):
        gate.acquire()
        assert gate.acquire(timeout=0.05) is False
        gate.release()

        assert gate.state is GateState.OPEN
        assert gate.acquire(timeout=0.5) is True

    def test_fifo_order(self, gate):
        order = []

        def worker(name):
            gate.acquire(message=name)
            order.append(name)
            gate.release(message=name)

        gate.acquire()
        first = threading.Thread(target=worker, args=("first",), daemon=True)
        first.start()
        assert wait_until(lambda: waiting_count(gate) == 1)
        second = threading.Thread(target=worker, args=("second",), daemon=True)
        second.start()
        assert wait_until(lambda: waiting_count(gate) == 2)

        gate.release()
        first.join(2)
        second.join(2)
        assert order == ["first", "second"]

    def test_context_manager(self, gate):
        with gate:
            assert gate.state is GateState.BLOCKED
        assert gate.state is GateState.OPEN

    def test_hold_releases_on_error(self, gate):
        with pytest.raises(RuntimeError):
            with gate.hold(hold_seconds=5, message="failing request"):
                assert gate.holder == "failing request"
                raise RuntimeError("boom")
        assert gate.state is GateState.OPEN
        assert gate.deadline is None

    def test_gates_are_independent(self, gate):
        other = ConcurrencyGate(name="other")
        gate.acquire()

        assert other.acquire(timeout=0.5) is True
        other.release()

    def test_concurrent_release_and_expiry(self, gate):
        for _ in range(20):
            gate.acquire(hold_seconds=0.01)
            time.sleep(0.01)
            gate.release()
        assert wait_until(lambda: gate.state is GateState.OPEN)
        assert gate.acquire(timeout=0.5) is True
