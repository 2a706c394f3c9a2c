"""
Ritual Weave Run Schema.

Represents one concrete execution of a Ritual.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, constr

from .enums import RunStatus, TriggerType
from .primitives import ExternalLinkInput, Timestamp, isoformat, utc_now

RUN_KEY_PREFIX = "weave-run"


class ActivityLogEntry(BaseModel):
    """A single event recorded against a Run. Entries are never edited."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    timestamp: Timestamp = Field(..., description="When the event happened (UTC)")
    event: TriggerType = Field(..., description="Lifecycle event name")
    message: str = Field(..., description="Human-readable summary")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Run(BaseModel):
    """One execution of a Ritual.

    Invariants:
    - inputs are a snapshot of the Ritual's inputs at creation time.
    - activity_log is append-only.
    - updated_at never moves backwards.
    """

    model_config = ConfigDict(extra="forbid")

    run_key: constr(min_length=1) = Field(..., description="Unique run identifier")
    ritual_key: constr(min_length=1) = Field(
        ..., description="Key of the Ritual this run belongs to"
    )
    status: RunStatus = Field(RunStatus.PLANNED, description="Current run status")
    inputs: List[ExternalLinkInput] = Field(default_factory=list)
    activity_log: List[ActivityLogEntry] = Field(default_factory=list)

    created_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)

    def touch(self, at: datetime) -> None:
        """Advance updated_at to ``at`` unless it is already later."""
        if at > self.updated_at:
            self.updated_at = at

    def append_activity(self, entry: ActivityLogEntry) -> None:
        self.activity_log.append(entry)
        self.touch(entry.timestamp)

    def clone(self) -> "Run":
        return self.model_copy(deep=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_key": self.run_key,
            "ritual_key": self.ritual_key,
            "status": self.status.value,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "inputs": [i.to_dict() for i in self.inputs],
            "activity_log": [e.model_dump(mode="json") for e in self.activity_log],
        }


def derive_run_key(ritual_key: str, created_at: str) -> str:
    """Build the branded run key ``weave-run-<ritual_key>-<iso timestamp>``."""
    return f"{RUN_KEY_PREFIX}-{ritual_key}-{created_at}"
