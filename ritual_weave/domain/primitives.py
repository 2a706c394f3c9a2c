"""
Ritual Weave Common Primitives.

Building blocks shared by every entity: identifiers, timestamps and the
typed input references a Ritual carries.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, constr

from .enums import InputType


def generate_id() -> str:
    """Generate an opaque unique identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def isoformat(value: datetime) -> str:
    """Render a datetime as UTC ISO-8601 with millisecond precision.

    Examples:
        2024-06-01 12:00:00+00:00 -> "2024-06-01T12:00:00.000Z"
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    rendered = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


Timestamp = Annotated[
    datetime, PlainSerializer(isoformat, return_type=str, when_used="json")
]


class ExternalLinkInput(BaseModel):
    """A link to something outside the household system (schedule, portal)."""

    model_config = ConfigDict(extra="forbid")

    type: InputType = Field(
        default=InputType.EXTERNAL_LINK, description="Input type discriminator"
    )
    value: constr(min_length=1) = Field(..., description="Target URL or reference")
    label: Optional[str] = Field(None, description="Human-readable label")

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        if data["label"] is None:
            data.pop("label")
        return data
