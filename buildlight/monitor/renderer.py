"""Rich markup for the watchdog's decision lines.

Color scheme
------------
- green  : SUCCESS
- red    : FAILED
- yellow : PENDING (running, created, canceled, ... or no pipeline)

Log lines carry markup; the CLI installs a ``RichHandler`` with
``markup=True`` to render it.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from buildlight.models.pipeline import PipelineRecord
from buildlight.models.status import BuildStatus

_STATUS_STYLES: dict[BuildStatus, str] = {
    BuildStatus.SUCCESS: "green",
    BuildStatus.FAILED: "red",
    BuildStatus.PENDING: "yellow",
}

FAREWELL = "Bye!"
UNKNOWN_STATUS = "unknown"


class StatusRenderer:
    """Formats decision lines and prints the farewell notice.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    @staticmethod
    def status_line(record: PipelineRecord | None, status: BuildStatus) -> str:
        """``Build status is <raw status>``, coloured by classification."""
        style = _STATUS_STYLES[status]
        if record is None:
            raw = "no pipeline"
        else:
            raw = escape(record.status if record.status is not None else UNKNOWN_STATUS)
        return f"Build status is [{style}]{raw}[/{style}]"

    @staticmethod
    def blame_line(record: PipelineRecord) -> str:
        return (
            f"Blame: [yellow]{escape(record.short_sha)}[/yellow] "
            f"by [blue]{escape(record.author)}[/blue]"
        )

    @staticmethod
    def praise_line(record: PipelineRecord) -> str:
        return (
            f"Praise: [yellow]{escape(record.short_sha)}[/yellow] "
            f"by [blue]{escape(record.author)}[/blue]"
        )

    def print_farewell(self) -> None:
        self.console.print(FAREWELL)
