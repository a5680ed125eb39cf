"""
Single-slot concurrency gate.

Serializes request building/sending through one client instance. A
holder may ask for an automatic release after a number of seconds so a
stalled caller cannot keep the gate closed forever.
"""

import collections
import contextlib
import enum
import logging
import threading
import time
from typing import Optional

logger = logging.getLogger(__name__)


class GateState(enum.Enum):
    OPEN = "open"
    BLOCKED = "blocked"


class ConcurrencyGate:
    """
    Gate admitting one holder at a time, in arrival order.

    Explicit release and the auto-release timer go through the same
    locked transition; releasing an open gate is a no-op.
    """

    def __init__(self, name: Optional[str] = None):
        """
        Initialize gate.

        Args:
            name: Label used in log messages (usually the client id)
        """
        self.name = name or hex(id(self))
        self._cond = threading.Condition()
        self._waiters = collections.deque()
        self._state = GateState.OPEN
        self._deadline = None
        self._holder = None
        self._timer = None
        # Bumped on every acquire so a late timer cannot release a newer hold
        self._generation = 0

    @property
    def state(self) -> GateState:
        with self._cond:
            return self._state

    @property
    def deadline(self) -> Optional[float]:
        """time.monotonic() value at which the current hold expires."""
        with self._cond:
            return self._deadline

    @property
    def holder(self) -> Optional[str]:
        with self._cond:
            return self._holder

    def locked(self) -> bool:
        return self.state is GateState.BLOCKED

    def acquire(self, hold_seconds: float = 0, message: Optional[str] = None,
                timeout: Optional[float] = None) -> bool:
        """
        Wait for the gate and block it.

        Args:
            hold_seconds: Release automatically after this many seconds
                (0 or less holds until release() is called)
            message: Free text describing the holder, for diagnostics
            timeout: Give up waiting after this many seconds

        Returns:
            True if the gate was acquired, False if the wait timed out
        """
        ticket = object()
        acquired = False
        with self._cond:
            self._log("Waiting", message)
            self._waiters.append(ticket)
            try:
                acquired = self._cond.wait_for(
                    lambda: self._state is GateState.OPEN and self._waiters[0] is ticket,
                    timeout
                )
            finally:
                self._waiters.remove(ticket)
                if not acquired:
                    # Let the next waiter re-check in case this one was at the head
                    self._cond.notify_all()

            if not acquired:
                self._log("Gave up waiting", message)
                return False

            self._generation += 1
            self._state = GateState.BLOCKED
            self._holder = message
            self._log("Blocked", message)
            if hold_seconds and hold_seconds > 0:
                self._start_timer(hold_seconds, message)
            return True

    def release(self, message: Optional[str] = None) -> bool:
        """
        Open the gate.

        Returns:
            True if the gate was blocked, False if it was already open
        """
        with self._cond:
            return self._release_locked(message)

    @contextlib.contextmanager
    def hold(self, hold_seconds: float = 0, message: Optional[str] = None):
        """Hold the gate for the duration of a with block."""
        self.acquire(hold_seconds, message)
        try:
            yield self
        finally:
            self.release(message)

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def _start_timer(self, hold_seconds: float, message: Optional[str]):
        self._deadline = time.monotonic() + hold_seconds
        self._timer = threading.Timer(
            hold_seconds, self._expire, args=(self._generation, message)
        )
        self._timer.daemon = True
        self._timer.start()
        logger.debug("Gate %s: timer started for %.3f seconds", self.name, hold_seconds)

    def _expire(self, generation: int, message: Optional[str]):
        with self._cond:
            if generation != self._generation:
                return
            logger.debug("Gate %s: timer elapsed", self.name)
            self._release_locked(message)

    def _release_locked(self, message: Optional[str]) -> bool:
        if self._state is GateState.OPEN:
            return False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Gate %s: timer stopped", self.name)
        self._state = GateState.OPEN
        self._deadline = None
        self._holder = None
        self._log("Released", message)
        self._cond.notify_all()
        return True

    def _log(self, title: str, message: Optional[str]):
        if message:
            logger.debug("Gate %s: %s (%d waiting) ===> %s",
                         self.name, title, len(self._waiters), message)
        else:
            logger.debug("Gate %s: %s (%d waiting)", self.name, title, len(self._waiters))
