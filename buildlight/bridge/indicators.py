"""Indicator driver — LEDs and a buzzer on a Firmata-speaking board.

Pin map
-------
=======  ===
line     pin
=======  ===
red      9
green    10
yellow   11
buzzer   5
=======  ===

Writes are binary only (no PWM, no reads).  ``FirmataIndicators`` is the
only component allowed to touch the pins; the orchestrator owns the
instance for the process lifetime and releases it with ``close()``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from buildlight.models.status import BuzzPattern, IndicatorAction, IndicatorColor

logger = logging.getLogger(__name__)

LED_PINS: dict[IndicatorColor, int] = {
    IndicatorColor.RED: 9,
    IndicatorColor.GREEN: 10,
    IndicatorColor.YELLOW: 11,
}
BUZZER_PIN = 5

LONG_BUZZ_SECONDS = 0.5
RAPID_BUZZ_SECONDS = 0.05
RAPID_BUZZ_COUNT = 2

# Lit together when the build status cannot be determined.
DEGRADED_COLORS: tuple[IndicatorColor, ...] = (
    IndicatorColor.YELLOW,
    IndicatorColor.RED,
)


class HardwareUnavailableError(RuntimeError):
    """Raised when the signalling board cannot be opened or is closed.

    Fatal at startup: without indicators the watchdog has no purpose.
    """


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class IndicatorDriver(Protocol):
    """Protocol for the output side of the watchdog."""

    def set_line(self, name: IndicatorColor, on: bool) -> None:
        """Switch one coloured line on or off."""
        ...

    def all_off(self) -> None:
        """Switch all three coloured lines off."""
        ...

    def pulse(self, duration: float) -> None:
        """Assert the buzzer for *duration* seconds, then de-assert it."""
        ...

    def close(self) -> None:
        """Release the underlying transport.  Idempotent."""
        ...


# ---------------------------------------------------------------------------
# Firmata implementation
# ---------------------------------------------------------------------------


def open_firmata_board(port: str | None = None) -> Any:
    """Open a pyfirmata2 ``Arduino`` on *port*, autodetecting when ``None``."""
    from pyfirmata2 import Arduino

    return Arduino(port if port else Arduino.AUTODETECT)


class FirmataIndicators:
    """Drives the LED and buzzer pins of a Firmata board.

    Parameters
    ----------
    board:
        An open pyfirmata2 board (anything exposing ``digital[pin].write``
        and ``exit()``).
    sleep:
        Blocking sleep used inside ``pulse``.
    self_test:
        Flash all three LEDs on as soon as the board is wrapped.  Callers
        must not read this as a status signal.
    """

    def __init__(
        self,
        board: Any,
        *,
        sleep: Callable[[float], None] = time.sleep,
        self_test: bool = True,
    ) -> None:
        self._board = board
        self._sleep = sleep
        self._closed = False
        if self_test:
            for color in LED_PINS:
                self.set_line(color, True)

    @classmethod
    def connect(
        cls,
        port: str | None = None,
        *,
        board_opener: Callable[[str | None], Any] = open_firmata_board,
        sleep: Callable[[float], None] = time.sleep,
    ) -> FirmataIndicators:
        """Open the board and wrap it.  No retry.

        Raises
        ------
        HardwareUnavailableError
            If the board cannot be opened or does not report its firmware.
        """
        logger.debug("Connecting ...")
        try:
            board = board_opener(port)
        except Exception as exc:
            raise HardwareUnavailableError(
                f"Cannot open Firmata board on {port or 'autodetected port'}: {exc}"
            ) from exc

        try:
            version = board.get_firmata_version()
        except Exception as exc:
            board.exit()
            raise HardwareUnavailableError(
                f"Firmata board on {port or 'autodetected port'} did not answer: {exc}"
            ) from exc
        logger.info("Connected with Firmata version %s", version)
        return cls(board, sleep=sleep)

    @property
    def closed(self) -> bool:
        return self._closed

    def set_line(self, name: IndicatorColor, on: bool) -> None:
        logger.debug("Turning %s %s led", "on" if on else "off", name.value)
        self._write(LED_PINS[name], on)

    def all_off(self) -> None:
        logger.debug("Turning off all leds")
        for pin in LED_PINS.values():
            self._write(pin, False)

    def pulse(self, duration: float) -> None:
        logger.debug("Buzzing for %s sec", duration)
        self._write(BUZZER_PIN, True)
        try:
            self._sleep(duration)
        finally:
            self._write(BUZZER_PIN, False)

    def close(self) -> None:
        if self._closed:
            return
        logger.debug("Closing Firmata connection")
        self._closed = True
        self._board.exit()

    def _write(self, pin: int, on: bool) -> None:
        if self._closed:
            raise HardwareUnavailableError("Firmata connection is closed")
        self._board.digital[pin].write(1 if on else 0)


# ---------------------------------------------------------------------------
# Decision -> hardware
# ---------------------------------------------------------------------------


def show_color(driver: IndicatorDriver, color: IndicatorColor) -> None:
    """Clear all coloured lines, then assert exactly *color*."""
    driver.all_off()
    driver.set_line(color, True)


def apply_action(
    driver: IndicatorDriver,
    action: IndicatorAction,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Set the steady indicator for *action*, then play its buzz pattern."""
    show_color(driver, action.color)

    if action.buzz == BuzzPattern.LONG:
        driver.pulse(LONG_BUZZ_SECONDS)
    elif action.buzz == BuzzPattern.RAPID:
        logger.debug("Buzzing %d times", RAPID_BUZZ_COUNT)
        for _ in range(RAPID_BUZZ_COUNT):
            driver.pulse(RAPID_BUZZ_SECONDS)
            sleep(RAPID_BUZZ_SECONDS)


def apply_degraded(driver: IndicatorDriver) -> None:
    """Light the "cannot determine status" pattern (yellow + red)."""
    driver.all_off()
    for color in DEGRADED_COLORS:
        driver.set_line(color, True)
