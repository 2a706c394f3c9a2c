"""
Ritual Weave AttentionItem Schema.

An AttentionItem flags a condition on a Run that a household member has to
resolve before the Run can be considered unblocked.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from .enums import AttentionType
from .primitives import Timestamp, generate_id, utc_now


class AttentionItem(BaseModel):
    """A blocking issue raised against a Run.

    Invariants:
    - resolved only ever goes from False to True.
    - resolved_at is set exactly once, together with resolved.
    """

    model_config = ConfigDict(extra="forbid")

    attention_id: constr(min_length=1) = Field(default_factory=generate_id)
    run_key: constr(min_length=1) = Field(..., description="Run this item blocks")
    type: AttentionType = Field(..., description="Kind of issue")
    message: constr(min_length=1) = Field(..., description="What needs doing")
    resolved: bool = False
    created_at: Timestamp = Field(default_factory=utc_now)
    resolved_at: Optional[Timestamp] = None

    def mark_resolved(self, at: datetime) -> None:
        self.resolved = True
        self.resolved_at = at

    def clone(self) -> "AttentionItem":
        return self.model_copy(deep=True)

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        if data["resolved_at"] is None:
            data.pop("resolved_at")
        return data


class AttentionCreate(BaseModel):
    """Schema for raising a new AttentionItem."""

    model_config = ConfigDict(extra="ignore")

    run_key: constr(min_length=1)
    type: AttentionType
    message: constr(min_length=1)
