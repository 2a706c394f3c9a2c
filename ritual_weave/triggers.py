"""
Next-trigger projection.

Derives the upcoming lifecycle triggers of a Run from its status. Nothing is
stored; the projection is recomputed on every read.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict

from .domain import Run, RunStatus, TriggerStatus, TriggerType


class NextTrigger(BaseModel):
    """A projected trigger shown on the run timeline."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    event: TriggerType
    status: TriggerStatus
    label: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(mode="json")


_LABELS: Dict[Tuple[TriggerType, TriggerStatus], Tuple[str, str]] = {
    (TriggerType.ON_RUN_PLANNED, TriggerStatus.ACTIVE): (
        "Run planned",
        "The run is staged and waiting for someone to pick it up.",
    ),
    (TriggerType.BEFORE_RUN_START, TriggerStatus.PENDING): (
        "Pre-start checks",
        "Reminders and preparation fire before the run starts.",
    ),
    (TriggerType.ON_RUN_START, TriggerStatus.QUEUED): (
        "Run starts",
        "Start automations fire once the run is underway.",
    ),
    (TriggerType.ON_RUN_START, TriggerStatus.ACTIVE): (
        "Run in progress",
        "Start automations have fired and the run is underway.",
    ),
    (TriggerType.ON_RUN_COMPLETE, TriggerStatus.QUEUED): (
        "Run completes",
        "Completion automations fire when the run wraps up.",
    ),
    (TriggerType.ON_RUN_COMPLETE, TriggerStatus.COMPLETE): (
        "Run complete",
        "The run is finished and completion automations have fired.",
    ),
}

# Every RunStatus must have a plan; a new status without one fails at import.
_PLANS: Dict[RunStatus, Tuple[Tuple[TriggerType, TriggerStatus], ...]] = {
    RunStatus.PLANNED: (
        (TriggerType.ON_RUN_PLANNED, TriggerStatus.ACTIVE),
        (TriggerType.BEFORE_RUN_START, TriggerStatus.PENDING),
        (TriggerType.ON_RUN_START, TriggerStatus.QUEUED),
    ),
    RunStatus.IN_PROGRESS: (
        (TriggerType.ON_RUN_START, TriggerStatus.ACTIVE),
        (TriggerType.ON_RUN_COMPLETE, TriggerStatus.QUEUED),
    ),
    RunStatus.COMPLETE: ((TriggerType.ON_RUN_COMPLETE, TriggerStatus.COMPLETE),),
}


def _check_plans(plans: Dict[RunStatus, Tuple]) -> None:
    missing = set(RunStatus) - set(plans)
    if missing:
        names = ", ".join(sorted(s.value for s in missing))
        raise RuntimeError(f"No trigger plan for run status: {names}")


_check_plans(_PLANS)


def triggers_for_status(status: RunStatus) -> List[NextTrigger]:
    triggers = []
    for event, trigger_status in _PLANS[status]:
        label, description = _LABELS[(event, trigger_status)]
        triggers.append(
            NextTrigger(
                event=event, status=trigger_status, label=label, description=description
            )
        )
    return triggers


def build_next_triggers(run: Run) -> List[NextTrigger]:
    """Project the next triggers for ``run``.

    planned     -> on_run_planned (active), before_run_start (pending),
                   on_run_start (queued)
    in_progress -> on_run_start (active), on_run_complete (queued)
    complete    -> on_run_complete (complete)
    """
    return triggers_for_status(run.status)
