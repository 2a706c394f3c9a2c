"""
Request policy: body intake validation and household role checks.
"""

from .intake import (
    evaluate_attention,
    evaluate_automation,
    evaluate_invocation,
    evaluate_ritual,
    evaluate_run_key,
    evaluate_run_status,
    parse_json_object,
)
from .roles import authorize_resolution, can_resolve, parse_role

__all__ = [
    "authorize_resolution",
    "can_resolve",
    "evaluate_attention",
    "evaluate_automation",
    "evaluate_invocation",
    "evaluate_ritual",
    "evaluate_run_key",
    "evaluate_run_status",
    "parse_json_object",
    "parse_role",
]
