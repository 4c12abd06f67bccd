"""Shared test fixtures and fakes for buildlight."""

from __future__ import annotations

import io
from collections import defaultdict
from collections.abc import Callable
from typing import Any

import pytest
from rich.console import Console

from buildlight.core.orchestrator import Orchestrator
from buildlight.models.pipeline import PipelineRecord
from buildlight.models.status import IndicatorColor
from buildlight.monitor.renderer import StatusRenderer


# ---------------------------------------------------------------------------
# Hardware fakes
# ---------------------------------------------------------------------------


class FakePin:
    """Records every value written to one digital pin."""

    def __init__(self) -> None:
        self.writes: list[int] = []

    def write(self, value: int) -> None:
        self.writes.append(value)

    @property
    def level(self) -> int:
        return self.writes[-1] if self.writes else 0


class FakeBoard:
    """Stands in for a pyfirmata2 ``Arduino``."""

    def __init__(self, version: tuple[int, int] = (2, 5)) -> None:
        self.digital: defaultdict[int, FakePin] = defaultdict(FakePin)
        self.version = version
        self.exit_calls = 0

    def get_firmata_version(self) -> tuple[int, int]:
        return self.version

    def exit(self) -> None:
        self.exit_calls += 1

    def level(self, pin: int) -> int:
        return self.digital[pin].level


class RecordingDriver:
    """An ``IndicatorDriver`` that keeps line state in memory."""

    def __init__(self) -> None:
        self.lines: dict[IndicatorColor, bool] = {c: False for c in IndicatorColor}
        self.calls: list[tuple[Any, ...]] = []
        self.pulses: list[float] = []
        self.close_calls = 0

    def set_line(self, name: IndicatorColor, on: bool) -> None:
        self.calls.append(("set_line", name, on))
        self.lines[name] = on

    def all_off(self) -> None:
        self.calls.append(("all_off",))
        for color in self.lines:
            self.lines[color] = False

    def pulse(self, duration: float) -> None:
        self.calls.append(("pulse", duration))
        self.pulses.append(duration)

    def close(self) -> None:
        self.close_calls += 1

    @property
    def lit(self) -> set[IndicatorColor]:
        return {color for color, on in self.lines.items() if on}


# ---------------------------------------------------------------------------
# Loop fakes
# ---------------------------------------------------------------------------


class StepTicker:
    """A ``Ticker`` that never sleeps and cancels itself after N waits."""

    def __init__(self, cancel_after: int | None = None) -> None:
        self.waits: list[float] = []
        self._cancel_after = cancel_after
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def wait(self, seconds: float) -> bool:
        self.waits.append(seconds)
        if self._cancel_after is not None and len(self.waits) >= self._cancel_after:
            self._cancelled = True
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class StubFetcher:
    """Returns (or raises) pre-seeded outcomes, one per ``fetch`` call."""

    def __init__(self, outcomes: list[PipelineRecord | None | BaseException]) -> None:
        self._outcomes = list(outcomes)
        self.branches: list[str] = []

    def fetch(self, branch: str) -> PipelineRecord | None:
        self.branches.append(branch)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _no_sleep(seconds: float) -> None:
    return None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_record() -> Callable[..., PipelineRecord]:
    """Factory fixture: build a PipelineRecord with sensible defaults."""

    def _factory(status: str = "success", **overrides: Any) -> PipelineRecord:
        defaults: dict[str, Any] = {
            "ref": "develop",
            "status": status,
            "sha": "0123456789abcdef0123",
            "author": "Ada Lovelace",
        }
        defaults.update(overrides)
        return PipelineRecord(**defaults)

    return _factory


@pytest.fixture
def board() -> FakeBoard:
    return FakeBoard()


@pytest.fixture
def driver() -> RecordingDriver:
    return RecordingDriver()


@pytest.fixture
def no_sleep() -> Callable[[float], None]:
    return _no_sleep


@pytest.fixture
def renderer() -> StatusRenderer:
    """A renderer whose console writes to an in-memory buffer."""
    return StatusRenderer(console=Console(file=io.StringIO(), force_terminal=False))


@pytest.fixture
def make_orchestrator(
    driver: RecordingDriver, renderer: StatusRenderer
) -> Callable[..., Orchestrator]:
    """Factory fixture: an Orchestrator over fakes, without signal handling."""

    def _factory(
        outcomes: list[PipelineRecord | None | Exception],
        *,
        ticker: StepTicker | None = None,
        **overrides: Any,
    ) -> Orchestrator:
        kwargs: dict[str, Any] = {
            "branch": "develop",
            "interval": 120,
            "ticker": ticker or StepTicker(),
            "renderer": renderer,
            "sleep": _no_sleep,
            "install_signal_handler": False,
        }
        kwargs.update(overrides)
        return Orchestrator(StubFetcher(outcomes), lambda: driver, **kwargs)

    return _factory


@pytest.fixture
def make_ticker() -> Callable[..., StepTicker]:
    """Factory fixture: a StepTicker that cancels after *cancel_after* waits."""

    def _factory(cancel_after: int | None = None) -> StepTicker:
        return StepTicker(cancel_after)

    return _factory
