"""
Ritual Weave Automation Schema.

An Automation binds a lifecycle trigger to an external capability call
template. Automations are registered only; nothing here executes them.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from .enums import TriggerType
from .primitives import Timestamp, generate_id, utc_now


class CapabilityCall(BaseModel):
    """Template for invoking an external capability."""

    model_config = ConfigDict(extra="forbid")

    capability_id: constr(min_length=1) = Field(
        ..., description="Capability to invoke, e.g. 'notify.send'"
    )
    payload_template: Dict[str, Any] = Field(
        ..., description="Payload sent with the invocation"
    )
    connection_id: Optional[str] = Field(None, description="Account connection")
    target_id: Optional[str] = Field(None, description="Device or target")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "capability_id": self.capability_id,
            "payload_template": copy.deepcopy(self.payload_template),
        }
        if self.connection_id is not None:
            data["connection_id"] = self.connection_id
        if self.target_id is not None:
            data["target_id"] = self.target_id
        return data


class Automation(BaseModel):
    """A trigger -> capability binding.

    When ritual_key is None the automation applies to every ritual.
    """

    model_config = ConfigDict(extra="forbid")

    automation_id: constr(min_length=1) = Field(default_factory=generate_id)
    ritual_key: Optional[str] = Field(None, description="Scoped ritual, if any")
    trigger: TriggerType
    call: CapabilityCall
    created_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)

    @property
    def is_global(self) -> bool:
        return self.ritual_key is None

    def clone(self) -> "Automation":
        return self.model_copy(deep=True)

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"call"})
        if data["ritual_key"] is None:
            data.pop("ritual_key")
        data["call"] = self.call.to_dict()
        return data


class AutomationCreate(BaseModel):
    """Schema for registering a new Automation."""

    model_config = ConfigDict(extra="ignore")

    ritual_key: Optional[constr(min_length=1)] = None
    trigger: TriggerType
    call: CapabilityCall
