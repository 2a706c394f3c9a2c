"""
Domain errors with stable error codes.

Every error carries a snake_case ``code`` that is returned to clients
verbatim as ``{"error": code}`` and the HTTP status it maps to.
"""

from typing import Any, Dict


class WeaveError(Exception):
    """Base class for all domain errors.

    Attributes:
        code: Stable error code for programmatic handling
        status_code: HTTP status the API responds with
    """

    status_code: int = 500

    def __init__(self, code: str, message: str = ""):
        self.code = code
        self.message = message or code.replace("_", " ")
        super().__init__(f"{code}: {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {"error": self.code}


class ValidationFailed(WeaveError):
    """Malformed or missing request fields."""

    status_code = 400


class Forbidden(WeaveError):
    """The requester's role may not perform the operation."""

    status_code = 403


class NotFound(WeaveError):
    """A referenced ritual, run or attention item does not exist."""

    status_code = 404


class Conflict(WeaveError):
    """Duplicate key or an illegal state change."""

    status_code = 409


class NotImplementedYet(WeaveError):
    """A reserved endpoint that is deliberately not built."""

    status_code = 501

    def __init__(self, message: str = ""):
        super().__init__("not_implemented", message)


# Frequently raised errors, named after the condition they describe.


class RitualNotFound(NotFound):
    def __init__(self, ritual_key: str):
        self.ritual_key = ritual_key
        super().__init__("ritual_not_found", f"Ritual '{ritual_key}' not found")


class RitualAlreadyExists(Conflict):
    def __init__(self, ritual_key: str):
        self.ritual_key = ritual_key
        super().__init__(
            "ritual_already_exists", f"Ritual '{ritual_key}' already exists"
        )


class RunNotFound(NotFound):
    def __init__(self, run_key: str):
        self.run_key = run_key
        super().__init__("run_not_found", f"Run '{run_key}' not found")


class RunAlreadyExists(Conflict):
    def __init__(self, run_key: str):
        self.run_key = run_key
        super().__init__("run_already_exists", f"Run '{run_key}' already exists")


class InvalidStatusTransition(Conflict):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            "invalid_status_transition",
            f"Cannot move a run from '{current}' to '{requested}'",
        )


class AttentionItemNotFound(NotFound):
    def __init__(self, attention_id: str):
        self.attention_id = attention_id
        super().__init__(
            "attention_item_not_found", f"Attention item '{attention_id}' not found"
        )


class AttentionAlreadyResolved(Conflict):
    def __init__(self, attention_id: str):
        self.attention_id = attention_id
        super().__init__(
            "attention_already_resolved",
            f"Attention item '{attention_id}' is already resolved",
        )


class ForbiddenForRole(Forbidden):
    def __init__(self, role: str, attention_type: str):
        self.role = role
        self.attention_type = attention_type
        super().__init__(
            "forbidden_for_role",
            f"Role '{role}' may not resolve '{attention_type}' attention items",
        )
