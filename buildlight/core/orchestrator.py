"""Poll-loop orchestrator — the watchdog's run-until-interrupted lifecycle.

The Orchestrator wires the PipelineFetcher, the status classifier, the
transition tracker and the indicator driver into one sequential loop::

    STARTING --> RUNNING --> STOPPING
        \\______________________/

Each RUNNING cycle runs fetch, classify, observe, apply indicator, log,
and then waits for the interval on a cancellable ``Ticker``.  Indicator
writes always follow the fetch of the same cycle; cycles never overlap.

A ``TransportError`` from the fetcher does not touch ``MonitorState``: it
lights the degraded pattern (yellow + red) and the loop carries on at the
normal interval.  SIGINT cancels the ticker; the hardware handle is
released on every exit path.
"""

from __future__ import annotations

import logging
import signal
import time
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from buildlight.bridge.fetcher import TransportError
from buildlight.bridge.indicators import IndicatorDriver, apply_action, apply_degraded
from buildlight.config import DEFAULT_INTERVAL_SECONDS
from buildlight.core.classifier import classify
from buildlight.core.ticker import EventTicker, Ticker
from buildlight.core.tracker import observe
from buildlight.models.pipeline import PipelineRecord
from buildlight.models.status import (
    BuildStatus,
    IndicatorAction,
    MonitorState,
    TransitionKind,
)
from buildlight.monitor.renderer import StatusRenderer

logger = logging.getLogger(__name__)


class LoopPhase(str, Enum):
    """Lifecycle phase of the orchestrator."""

    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


# STOPPING is terminal.
VALID_PHASE_TRANSITIONS: dict[LoopPhase, set[LoopPhase]] = {
    LoopPhase.STARTING: {LoopPhase.RUNNING, LoopPhase.STOPPING},
    LoopPhase.RUNNING: {LoopPhase.STOPPING},
    LoopPhase.STOPPING: set(),
}


class InvalidPhaseTransitionError(RuntimeError):
    """Raised when the orchestrator is driven out of lifecycle order."""


class PipelineSource(Protocol):
    """Anything that can return the newest pipeline on a branch."""

    def fetch(self, branch: str) -> PipelineRecord | None:
        ...


class CycleOutcome(BaseModel):
    """What happened during one poll cycle."""

    model_config = ConfigDict(frozen=True)

    record: PipelineRecord | None = None
    status: BuildStatus | None = None
    action: IndicatorAction | None = None
    error: str | None = None

    @property
    def degraded(self) -> bool:
        """``True`` when the fetch failed and the degraded pattern is lit."""
        return self.error is not None


class Orchestrator:
    """Runs the watchdog loop.

    Parameters
    ----------
    fetcher:
        Source of pipeline records; raises ``TransportError`` on failure.
    open_driver:
        Zero-argument factory that acquires the indicator hardware.  Called
        once, in ``start()``; any exception it raises is fatal.
    branch:
        The tracked branch.
    interval:
        Seconds to wait between cycles.
    state:
        Initial status memory.  Defaults to an optimistic SUCCESS.
    ticker:
        Cancellable wait primitive.  Defaults to an ``EventTicker``.
    renderer:
        Formats decision lines and the farewell.
    sleep:
        Blocking sleep used for the gaps in the rapid buzz pattern.
    install_signal_handler:
        Register a SIGINT handler that requests shutdown.  Only valid on
        the main thread.
    """

    def __init__(
        self,
        fetcher: PipelineSource,
        open_driver: Callable[[], IndicatorDriver],
        *,
        branch: str = "develop",
        interval: float = DEFAULT_INTERVAL_SECONDS,
        state: MonitorState | None = None,
        ticker: Ticker | None = None,
        renderer: StatusRenderer | None = None,
        sleep: Callable[[float], None] = time.sleep,
        install_signal_handler: bool = True,
    ) -> None:
        self._fetcher = fetcher
        self._open_driver = open_driver
        self.branch = branch
        self.interval = interval
        self.state = state or MonitorState()
        self.ticker: Ticker = ticker or EventTicker()
        self.renderer = renderer or StatusRenderer()
        self._sleep = sleep
        self._install_signal_handler = install_signal_handler

        self.phase = LoopPhase.STARTING
        self.driver: IndicatorDriver | None = None
        self._previous_sigint: Any = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Acquire the hardware and enter RUNNING.

        Raises whatever ``open_driver`` raises; there is no retry.
        """
        if self.phase != LoopPhase.STARTING:
            raise InvalidPhaseTransitionError(
                f"start() requires {LoopPhase.STARTING.value}, "
                f"orchestrator is {self.phase.value}"
            )
        self.driver = self._open_driver()

        if self._install_signal_handler:
            try:
                self._previous_sigint = signal.signal(
                    signal.SIGINT, self._handle_sigint
                )
            except ValueError:
                # signal.signal() only works on the main thread
                self.driver.close()
                raise

        self._enter(LoopPhase.RUNNING)
        logger.info("Watching %s every %s secs", self.branch, self.interval)

    def run(self) -> int:
        """Start, loop until cancelled, then stop.  Returns cycles run."""
        self.start()
        cycles = 0
        try:
            while not self.ticker.cancelled:
                self.run_cycle()
                cycles += 1
                logger.info("Next check in %s secs", self.interval)
                if self.ticker.wait(self.interval):
                    break
        finally:
            self.stop()
        return cycles

    def request_stop(self) -> None:
        """Ask the loop to stop; wakes a wait in progress."""
        self.ticker.cancel()

    def stop(self) -> None:
        """Enter STOPPING, release the hardware and say goodbye.  Idempotent."""
        if self.phase == LoopPhase.STOPPING:
            return
        self._enter(LoopPhase.STOPPING)
        self.ticker.cancel()
        try:
            if self.driver is not None:
                self.driver.close()
        finally:
            if self._install_signal_handler and self._previous_sigint is not None:
                signal.signal(signal.SIGINT, self._previous_sigint)
                self._previous_sigint = None
            self.renderer.print_farewell()

    # ------------------------------------------------------------------
    # One cycle
    # ------------------------------------------------------------------

    def run_cycle(self) -> CycleOutcome:
        """Fetch, classify, observe and drive the indicators once."""
        if self.phase != LoopPhase.RUNNING or self.driver is None:
            raise InvalidPhaseTransitionError(
                f"run_cycle() requires {LoopPhase.RUNNING.value}, "
                f"orchestrator is {self.phase.value}"
            )

        try:
            record = self._fetcher.fetch(self.branch)
        except TransportError as exc:
            logger.error("%s", exc)
            apply_degraded(self.driver)
            return CycleOutcome(error=str(exc))

        status = classify(record)
        self.state, action = observe(self.state, status)

        logger.info("%s", self.renderer.status_line(record, status))
        apply_action(self.driver, action, sleep=self._sleep)

        if record is not None:
            if status == BuildStatus.FAILED:
                logger.info("%s", self.renderer.blame_line(record))
            elif action.transition == TransitionKind.RECOVERY:
                logger.info("%s", self.renderer.praise_line(record))

        return CycleOutcome(record=record, status=status, action=action)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _enter(self, target: LoopPhase) -> None:
        allowed = VALID_PHASE_TRANSITIONS[self.phase]
        if target not in allowed:
            raise InvalidPhaseTransitionError(
                f"Cannot move from {self.phase.value} to {target.value}. "
                f"Allowed: {[p.value for p in allowed]}"
            )
        logger.debug("Orchestrator %s -> %s", self.phase.value, target.value)
        self.phase = target

    def _handle_sigint(self, signum: int, frame: Any) -> None:
        logger.debug("Interrupt received, stopping")
        self.request_stop()
