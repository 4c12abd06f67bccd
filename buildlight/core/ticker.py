"""Tick abstraction for the poll loop — an interruptible wait.

The orchestrator never calls ``time.sleep`` directly.  It waits on a
``Ticker``, which a signal handler (or a test) can cancel at any point,
including in the middle of a wait.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable


@runtime_checkable
class Ticker(Protocol):
    """Protocol for the loop's wait-between-cycles primitive."""

    @property
    def cancelled(self) -> bool:
        """``True`` once ``cancel()`` has been called."""
        ...

    def wait(self, seconds: float) -> bool:
        """Block for up to *seconds*.

        Returns ``True`` if the ticker was cancelled before or during the
        wait, ``False`` if the full interval elapsed.
        """
        ...

    def cancel(self) -> None:
        """Request cancellation; wakes any wait in progress."""
        ...


class EventTicker:
    """``Ticker`` backed by ``threading.Event``.

    Safe to cancel from a signal handler: ``Event.set`` wakes a pending
    ``Event.wait`` on the main thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        return self._event.wait(timeout=max(seconds, 0.0))

    def cancel(self) -> None:
        self._event.set()
