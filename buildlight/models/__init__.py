"""buildlight data models — all Pydantic v2, all frozen (immutable)."""

from buildlight.models.pipeline import PipelineRecord
from buildlight.models.status import (
    BuildStatus,
    BuzzPattern,
    IndicatorAction,
    IndicatorColor,
    MonitorState,
    TransitionKind,
)

__all__ = [
    # pipeline
    "PipelineRecord",
    # status
    "BuildStatus",
    "BuzzPattern",
    "IndicatorAction",
    "IndicatorColor",
    "MonitorState",
    "TransitionKind",
]
