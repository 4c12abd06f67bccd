"""Human-facing output for the watchdog.

Modules
-------
renderer
    ``StatusRenderer`` turns decisions into Rich-markup log lines
    (coloured status, blame, praise) and prints the farewell notice.
"""

from buildlight.monitor.renderer import StatusRenderer

__all__ = ["StatusRenderer"]
