"""
Mock external-capability invocation broker.

Hands out an invocation URL for a capability call. Nothing is actually
invoked; every invocation stays ``pending``.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import structlog

from .domain import generate_id
from .policy import evaluate_invocation

_logger = structlog.get_logger("ritual_weave.invocations")


class InvocationBroker:
    """Builds mock invocation handles under a configurable base URL."""

    def __init__(self, base_url: str, logger: Any = None):
        self.base_url = base_url.rstrip("/")
        self.logger = logger or _logger

    def request(
        self, body: Mapping[str, Any], idempotency_key: Optional[str] = None
    ) -> Dict[str, Any]:
        """Validate an invocation request and return its pending handle.

        The idempotency key comes from the header, then the body, and is
        generated when neither supplies one.
        """
        request = evaluate_invocation(body)
        invocation_id = generate_id()
        key = idempotency_key or request["idempotency_key"] or generate_id()

        self.logger.info(
            "invocation.requested",
            meta={
                "invocation_id": invocation_id,
                "capability_id": request["capability_id"],
            },
        )
        return {
            "invocation_id": invocation_id,
            "invocation_url": f"{self.base_url}/{invocation_id}",
            "idempotency_key": key,
            "capability_id": request["capability_id"],
            "status": "pending",
        }
