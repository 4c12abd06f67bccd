"""Transition tracker — decides the indicator action for each observation.

Transitions are detected against ``last_settled``, never against the
previous raw observation.  A ``FAILED, PENDING, PENDING, SUCCESS`` run
therefore chimes once, on the SUCCESS, and any number of PENDING
observations stay silent.

Decision table
--------------
=========  ============  ======  ======  ============
new        last_settled  colour  buzz    last_settled'
=========  ============  ======  ======  ============
PENDING    any           yellow  none    unchanged
SUCCESS    FAILED        green   rapid   SUCCESS
SUCCESS    SUCCESS       green   none    SUCCESS
FAILED     SUCCESS       red     long    FAILED
FAILED     FAILED        red     none    FAILED
=========  ============  ======  ======  ============
"""

from __future__ import annotations

from buildlight.models.status import (
    BuildStatus,
    BuzzPattern,
    IndicatorAction,
    IndicatorColor,
    MonitorState,
    TransitionKind,
)


def observe(
    state: MonitorState, status: BuildStatus
) -> tuple[MonitorState, IndicatorAction]:
    """Fold one classified observation into *state*.

    Returns the updated state and the action to apply.  Pure: *state* is
    frozen and a new instance is returned.
    """
    if status == BuildStatus.PENDING:
        return (
            state.model_copy(update={"current": BuildStatus.PENDING}),
            IndicatorAction(
                color=IndicatorColor.YELLOW,
                transition=TransitionKind.PENDING,
            ),
        )

    if status == BuildStatus.SUCCESS:
        if state.last_settled == BuildStatus.FAILED:
            action = IndicatorAction(
                color=IndicatorColor.GREEN,
                buzz=BuzzPattern.RAPID,
                transition=TransitionKind.RECOVERY,
            )
        else:
            action = IndicatorAction(color=IndicatorColor.GREEN)
    else:
        if state.last_settled == BuildStatus.SUCCESS:
            action = IndicatorAction(
                color=IndicatorColor.RED,
                buzz=BuzzPattern.LONG,
                transition=TransitionKind.REGRESSION,
            )
        else:
            action = IndicatorAction(color=IndicatorColor.RED)

    return MonitorState(current=status, last_settled=status), action
