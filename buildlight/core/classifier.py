"""Status classifier — maps a raw pipeline record onto ``BuildStatus``."""

from __future__ import annotations

from buildlight.models.pipeline import PipelineRecord
from buildlight.models.status import BuildStatus

# Only exact provider values settle a build; everything else (running,
# created, canceled, skipped, manual, ...) is PENDING.
_SETTLED_RAW: dict[str, BuildStatus] = {
    "success": BuildStatus.SUCCESS,
    "failed": BuildStatus.FAILED,
}


def classify(record: PipelineRecord | None) -> BuildStatus:
    """Return the status for *record*.

    Total: a missing record or any unrecognised raw value yields PENDING.
    """
    if record is None:
        return BuildStatus.PENDING
    return classify_raw(record.status)


def classify_raw(raw_status: str | None) -> BuildStatus:
    """Classify a bare provider status string."""
    if not isinstance(raw_status, str):
        return BuildStatus.PENDING
    return _SETTLED_RAW.get(raw_status, BuildStatus.PENDING)
