"""
Ritual Weave Ritual Schema.

A Ritual is a named household task template. It owns the Runs created
from it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from .primitives import ExternalLinkInput, Timestamp, isoformat, utc_now
from .run import Run


class Ritual(BaseModel):
    """A recurring household task.

    Invariants:
    - ritual_key is unique and never changes.
    - runs are kept in creation order.
    - updated_at follows the most recent update of any owned Run.
    """

    model_config = ConfigDict(extra="forbid")

    ritual_key: constr(min_length=1) = Field(..., description="Unique ritual key")
    name: constr(min_length=1) = Field(..., description="Display name")
    instant_runs: bool = Field(
        False, description="Runs complete immediately when created"
    )
    cadence: Optional[str] = Field(
        None, description="Free-text schedule, e.g. 'Fridays 7am'"
    )
    inputs: List[ExternalLinkInput] = Field(default_factory=list)
    runs: List[Run] = Field(default_factory=list)

    created_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)

    def clone(self) -> "Ritual":
        return self.model_copy(deep=True)

    def summary(self) -> Dict[str, Any]:
        """Ritual fields without the nested runs."""
        return {
            "ritual_key": self.ritual_key,
            "name": self.name,
            "instant_runs": self.instant_runs,
            "cadence": self.cadence,
            "inputs": [i.to_dict() for i in self.inputs],
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary()
        data["runs"] = [r.to_dict() for r in self.runs]
        return data


class RitualCreate(BaseModel):
    """Schema for creating a new Ritual."""

    model_config = ConfigDict(extra="ignore")

    ritual_key: constr(min_length=1)
    name: constr(min_length=1)
    instant_runs: bool = False
    cadence: Optional[str] = None
    inputs: List[ExternalLinkInput] = Field(default_factory=list)
