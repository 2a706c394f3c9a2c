"""
Household role policy.

Resolution of an attention item is gated by the requester's household role,
read from the ``X-Household-Role`` header.

Policy Rules:
- the header is required                               -> household_role_required
- it must name one of the five roles (any letter case) -> invalid_household_role
- auth_needed items may only be resolved by Owner      -> forbidden_for_role
- every other attention type may be resolved by any valid role
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

from ..domain import AttentionType, HouseholdRole
from ..errors import ForbiddenForRole, ValidationFailed

_ROLES_BY_NAME: Dict[str, HouseholdRole] = {
    role.value.lower(): role for role in HouseholdRole
}

# Attention types whose resolution is restricted, and who may resolve them.
RESTRICTED_RESOLVERS: Dict[AttentionType, FrozenSet[HouseholdRole]] = {
    AttentionType.AUTH_NEEDED: frozenset({HouseholdRole.OWNER}),
}


def parse_role(raw: Optional[str]) -> HouseholdRole:
    """Map a raw header value onto a HouseholdRole."""
    if raw is None or not raw.strip():
        raise ValidationFailed(
            "household_role_required", "X-Household-Role header is required"
        )
    role = _ROLES_BY_NAME.get(raw.strip().lower())
    if role is None:
        raise ValidationFailed(
            "invalid_household_role",
            f"Unknown household role '{raw}'. "
            f"Allowed roles: {', '.join(r.value for r in HouseholdRole)}",
        )
    return role


def can_resolve(role: HouseholdRole, attention_type: AttentionType) -> bool:
    allowed = RESTRICTED_RESOLVERS.get(attention_type)
    return allowed is None or role in allowed


def authorize_resolution(role: HouseholdRole, attention_type: AttentionType) -> None:
    """Raise ForbiddenForRole if ``role`` may not resolve ``attention_type``."""
    if not can_resolve(role, attention_type):
        raise ForbiddenForRole(role.value, attention_type.value)
