"""
Ritual Weave Canonical Enums.

These enums define the allowed values for status, trigger and role fields.
Request payloads MUST be mapped into these canonical sets before they reach
a store.
"""

from enum import Enum


class RunStatus(str, Enum):
    """Lifecycle states of a Run."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class TriggerType(str, Enum):
    """Lifecycle events an Automation can bind to."""

    ON_RUN_PLANNED = "on_run_planned"
    BEFORE_RUN_START = "before_run_start"
    ON_RUN_START = "on_run_start"
    ON_RUN_COMPLETE = "on_run_complete"
    ON_ATTENTION_CREATED = "on_attention_created"
    ON_ATTENTION_RESOLVED = "on_attention_resolved"


class TriggerStatus(str, Enum):
    """Presentation state of a projected next trigger."""

    ACTIVE = "active"
    PENDING = "pending"
    QUEUED = "queued"
    COMPLETE = "complete"


class AttentionType(str, Enum):
    """Kinds of blocking issues raised against a Run."""

    AUTH_NEEDED = "auth_needed"
    MISSING_DRAFT = "missing_draft"
    DECISION_REQUIRED = "decision_required"
    OTHER = "other"


class HouseholdRole(str, Enum):
    """Authorization principals within a household."""

    OWNER = "Owner"
    ADULT = "Adult"
    TEEN = "Teen"
    GUEST = "Guest"
    AGENT = "Agent"


class InputType(str, Enum):
    """Supported typed references on a Ritual."""

    EXTERNAL_LINK = "external_link"
