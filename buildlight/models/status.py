"""Build status models — classification, settled-state memory, actions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class BuildStatus(str, Enum):
    """Closed classification of a pipeline's raw provider status."""

    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


# Statuses that update the settled-state memory.  PENDING never does.
SETTLED_STATUSES: frozenset[BuildStatus] = frozenset(
    {BuildStatus.SUCCESS, BuildStatus.FAILED}
)


class IndicatorColor(str, Enum):
    """The three coloured signal lines."""

    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"


class BuzzPattern(str, Enum):
    """Audible pattern played after the indicator is set."""

    NONE = "none"
    LONG = "long"  # one sustained pulse, fresh regression
    RAPID = "rapid"  # two short pulses, recovery


class TransitionKind(str, Enum):
    """How an observation relates to the last settled status."""

    LEVEL = "level"
    PENDING = "pending"
    REGRESSION = "regression"
    RECOVERY = "recovery"


class MonitorState(BaseModel):
    """In-memory status memory owned by the orchestrator.

    ``last_settled`` starts optimistic (SUCCESS): with no history at boot,
    a first FAILED observation counts as a regression and a first SUCCESS
    does not chime.
    """

    model_config = ConfigDict(frozen=True)

    current: BuildStatus = BuildStatus.SUCCESS
    last_settled: BuildStatus = BuildStatus.SUCCESS

    @field_validator("last_settled")
    @classmethod
    def _must_be_settled(cls, value: BuildStatus) -> BuildStatus:
        if value not in SETTLED_STATUSES:
            raise ValueError(
                f"last_settled must be one of "
                f"{sorted(s.value for s in SETTLED_STATUSES)}, got {value.value!r}"
            )
        return value


class IndicatorAction(BaseModel):
    """What the indicator driver must do for one observation."""

    model_config = ConfigDict(frozen=True)

    color: IndicatorColor
    buzz: BuzzPattern = BuzzPattern.NONE
    transition: TransitionKind = TransitionKind.LEVEL
