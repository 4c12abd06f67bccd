"""Bridges to the outside world: the CI provider's HTTP API and the board.

Modules
-------
fetcher
    ``PipelineFetcher`` reads the newest pipeline for a branch over httpx
    and reports every failure uniformly as ``TransportError``.
indicators
    ``FirmataIndicators`` drives the LED and buzzer pins of a Firmata
    board; ``apply_action`` / ``apply_degraded`` map decisions onto it.
"""

from buildlight.bridge.fetcher import PipelineFetcher, TransportError
from buildlight.bridge.indicators import (
    FirmataIndicators,
    HardwareUnavailableError,
    IndicatorDriver,
    apply_action,
    apply_degraded,
)

__all__ = [
    "PipelineFetcher",
    "TransportError",
    "FirmataIndicators",
    "HardwareUnavailableError",
    "IndicatorDriver",
    "apply_action",
    "apply_degraded",
]
