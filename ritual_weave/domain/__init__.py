"""
Ritual Weave domain model.

Objects:

- Ritual: Named household task template (owns its Runs)
- Run: One execution of a Ritual, with an append-only activity log
- AttentionItem: Blocking issue on a Run awaiting a household member
- Automation: Trigger -> external capability binding (registered, never fired)

Lifecycle:
    Ritual -> Run (planned -> in_progress -> complete) -> AttentionItem resolved
"""

# Enums
from .enums import (
    AttentionType,
    HouseholdRole,
    InputType,
    RunStatus,
    TriggerStatus,
    TriggerType,
)

# Primitives
from .primitives import (
    ExternalLinkInput,
    Timestamp,
    generate_id,
    isoformat,
    utc_now,
)

# Objects
from .attention import AttentionCreate, AttentionItem
from .automation import Automation, AutomationCreate, CapabilityCall
from .ritual import Ritual, RitualCreate
from .run import ActivityLogEntry, Run, derive_run_key

__all__ = [
    # Enums
    "AttentionType",
    "HouseholdRole",
    "InputType",
    "RunStatus",
    "TriggerStatus",
    "TriggerType",
    # Primitives
    "ExternalLinkInput",
    "Timestamp",
    "generate_id",
    "isoformat",
    "utc_now",
    # Objects
    "ActivityLogEntry",
    "AttentionCreate",
    "AttentionItem",
    "Automation",
    "AutomationCreate",
    "CapabilityCall",
    "Ritual",
    "RitualCreate",
    "Run",
    "derive_run_key",
]
