"""
Intake gate for request bodies.

This module turns raw JSON objects into typed create-requests. It is pure:
no store access, no FastAPI request objects. Every rejection raises
ValidationFailed with a stable snake_case code, checked in the order the
fields are listed below.

Rituals:
- ritual_key must be a non-empty string         -> ritual_key_required
- ritual_key must be a single path segment      -> invalid_ritual_key
- name must be a non-empty string               -> name_required
- instant_runs, when present, must be a boolean -> instant_runs_must_be_boolean
- cadence, when present, must be a string/null  -> cadence_must_be_string
- inputs, when present, must be a list          -> inputs_must_be_array
- each input must be an object                  -> invalid_input_entry
- each input type must be external_link         -> unsupported_input_type
- each input value must be a non-empty string   -> input_value_required
- each input label, when present, is a string   -> invalid_input_entry

Normalization:
- ritual_key, name and input values are trimmed of surrounding whitespace
- a blank cadence is stored as None
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from ..domain import (
    AttentionCreate,
    AttentionType,
    AutomationCreate,
    CapabilityCall,
    ExternalLinkInput,
    InputType,
    RitualCreate,
    RunStatus,
    TriggerType,
)
from ..errors import ValidationFailed

ATTENTION_TYPES = {t.value for t in AttentionType}
TRIGGER_TYPES = {t.value for t in TriggerType}
RUN_STATUSES = {s.value for s in RunStatus}


def parse_json_object(raw: bytes) -> Dict[str, Any]:
    """Decode a request body as a JSON object. An empty body reads as ``{}``."""
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise ValidationFailed("invalid_json", "Request body is not valid JSON")
    if not isinstance(body, dict):
        raise ValidationFailed("body_must_be_object", "Request body must be an object")
    return body


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_object(value: Any) -> bool:
    return isinstance(value, dict)


def _require_string(body: Mapping[str, Any], field: str, code: str) -> str:
    value = body.get(field)
    if not _is_non_empty_string(value):
        raise ValidationFailed(code, f"'{field}' must be a non-empty string")
    return value.strip()


def _require_path_segment(value: str, field: str, code: str) -> None:
    # Keys are addressed as one URL path segment.
    if "/" in value:
        raise ValidationFailed(code, f"'{field}' must not contain '/'")


def _optional_string(body: Mapping[str, Any], field: str, code: str) -> Optional[str]:
    value = body.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailed(code, f"'{field}' must be a string")
    return value


def _validate_input_entry(entry: Any) -> ExternalLinkInput:
    if not _is_object(entry):
        raise ValidationFailed("invalid_input_entry", "Input entries must be objects")
    if entry.get("type") != InputType.EXTERNAL_LINK.value:
        raise ValidationFailed(
            "unsupported_input_type",
            f"Input type '{entry.get('type')}' is not supported",
        )
    if not _is_non_empty_string(entry.get("value")):
        raise ValidationFailed("input_value_required", "Input value is required")
    label = entry.get("label")
    if label is not None and not isinstance(label, str):
        raise ValidationFailed("invalid_input_entry", "Input label must be a string")
    return ExternalLinkInput(
        type=InputType.EXTERNAL_LINK, value=entry["value"].strip(), label=label
    )


def validate_inputs(raw: Any) -> List[ExternalLinkInput]:
    """Validate a list of ritual inputs."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationFailed("inputs_must_be_array", "'inputs' must be an array")
    return [_validate_input_entry(entry) for entry in raw]


def evaluate_ritual(body: Mapping[str, Any]) -> RitualCreate:
    """Validate a ritual creation body and return the normalized request."""
    ritual_key = _require_string(body, "ritual_key", "ritual_key_required")
    _require_path_segment(ritual_key, "ritual_key", "invalid_ritual_key")
    name = _require_string(body, "name", "name_required")

    instant_runs = body.get("instant_runs", False)
    if instant_runs is None:
        instant_runs = False
    if not isinstance(instant_runs, bool):
        raise ValidationFailed(
            "instant_runs_must_be_boolean", "'instant_runs' must be a boolean"
        )

    cadence = _optional_string(body, "cadence", "cadence_must_be_string")
    if cadence is not None and not cadence.strip():
        cadence = None

    inputs = validate_inputs(body.get("inputs"))

    return RitualCreate(
        ritual_key=ritual_key,
        name=name,
        instant_runs=instant_runs,
        cadence=cadence.strip() if cadence else None,
        inputs=inputs,
    )


def evaluate_run_key(body: Mapping[str, Any]) -> Optional[str]:
    """Return the explicit run key from a run creation body, if any."""
    if "run_key" not in body or body["run_key"] is None:
        return None
    if not _is_non_empty_string(body["run_key"]):
        raise ValidationFailed(
            "run_key_must_be_string", "'run_key' must be a non-empty string"
        )
    run_key = body["run_key"].strip()
    _require_path_segment(run_key, "run_key", "invalid_run_key")
    return run_key


def evaluate_run_status(body: Mapping[str, Any]) -> RunStatus:
    """Validate the target status of a run transition."""
    status = body.get("status")
    if not isinstance(status, str) or status not in RUN_STATUSES:
        raise ValidationFailed(
            "invalid_run_status",
            f"Status must be one of: {', '.join(sorted(RUN_STATUSES))}",
        )
    return RunStatus(status)


def evaluate_attention(body: Mapping[str, Any]) -> AttentionCreate:
    """Validate an attention item creation body."""
    run_key = _require_string(body, "run_key", "run_key_required")

    attention_type = body.get("type")
    if not isinstance(attention_type, str) or attention_type not in ATTENTION_TYPES:
        raise ValidationFailed(
            "invalid_attention_type",
            f"Attention type must be one of: {', '.join(sorted(ATTENTION_TYPES))}",
        )

    message = _require_string(body, "message", "message_required")

    return AttentionCreate(
        run_key=run_key, type=AttentionType(attention_type), message=message
    )


def evaluate_call(raw: Any) -> CapabilityCall:
    """Validate the capability call of an automation."""
    if not _is_object(raw):
        raise ValidationFailed("call_required", "'call' must be an object")

    capability_id = _require_string(raw, "capability_id", "capability_id_required")

    payload_template = raw.get("payload_template")
    if not _is_object(payload_template):
        raise ValidationFailed(
            "payload_template_must_be_object", "'payload_template' must be an object"
        )

    connection_id = _optional_string(
        raw, "connection_id", "connection_id_must_be_string"
    )
    target_id = _optional_string(raw, "target_id", "target_id_must_be_string")

    return CapabilityCall(
        capability_id=capability_id,
        payload_template=payload_template,
        connection_id=connection_id,
        target_id=target_id,
    )


def evaluate_automation(body: Mapping[str, Any]) -> AutomationCreate:
    """Validate an automation registration body.

    Ritual existence is checked by the store, not here.
    """
    ritual_key = body.get("ritual_key")
    if ritual_key is not None and not _is_non_empty_string(ritual_key):
        raise ValidationFailed(
            "ritual_key_required", "'ritual_key' must be a non-empty string"
        )

    trigger = body.get("trigger")
    if not isinstance(trigger, str) or trigger not in TRIGGER_TYPES:
        raise ValidationFailed(
            "invalid_trigger_type",
            f"Trigger must be one of: {', '.join(sorted(TRIGGER_TYPES))}",
        )

    call = evaluate_call(body.get("call"))

    return AutomationCreate(
        ritual_key=ritual_key.strip() if ritual_key else None,
        trigger=TriggerType(trigger),
        call=call,
    )


def evaluate_invocation(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a mock invocation request body."""
    capability_id = _require_string(body, "capability_id", "capability_id_required")
    payload = body.get("payload")
    if not _is_object(payload):
        raise ValidationFailed("payload_must_be_object", "'payload' must be an object")
    idempotency_key = body.get("idempotency_key")
    if not _is_non_empty_string(idempotency_key):
        idempotency_key = None
    return {
        "capability_id": capability_id,
        "payload": payload,
        "idempotency_key": idempotency_key,
    }
