"""buildlight: a build-status watchdog for physical indicators.

Polls the CI provider for the newest pipeline on a tracked branch and
shows its health on three LEDs and a buzzer:

  - green  : last pipeline succeeded (two short chirps on recovery)
  - red    : last pipeline failed (one long buzz on a fresh regression)
  - yellow : pipeline running, queued, canceled, ... or none found
  - yellow + red : the provider could not be reached
"""

__version__ = "0.1.0"
__description__ = "Build-status watchdog driving LEDs and a buzzer over Firmata"

from buildlight.core.orchestrator import Orchestrator
from buildlight.cli.app import app as cli_app

__all__ = ["Orchestrator", "cli_app", "__version__"]
