"""
Idempotency ledger.

Stores the first successful response produced for an operation-scoped
idempotency key so that retries replay it verbatim instead of repeating the
mutation. Records live for the lifetime of the process; there is no eviction.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class IdempotencyRecord:
    """Frozen snapshot of a response."""

    status_code: int
    payload: Dict[str, Any]

    def replay(self) -> Dict[str, Any]:
        return copy.deepcopy(self.payload)


def scoped_key(operation: str, *parts: str) -> str:
    """Build a composite key, e.g. ``attention_resolve:<attention_id>:<client_key>``."""
    return ":".join((operation,) + parts)


class IdempotencyLedger:
    """Side-table of ``scoped key -> IdempotencyRecord``."""

    def __init__(self) -> None:
        self._records: Dict[str, IdempotencyRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records

    def lookup(self, key: str) -> Optional[IdempotencyRecord]:
        return self._records.get(key)

    def record(
        self, key: str, status_code: int, payload: Dict[str, Any]
    ) -> IdempotencyRecord:
        """Store a response under ``key``. The first record for a key wins."""
        existing = self._records.get(key)
        if existing is not None:
            return existing
        entry = IdempotencyRecord(status_code=status_code, payload=copy.deepcopy(payload))
        self._records[key] = entry
        return entry
