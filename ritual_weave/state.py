"""Application state shared by the request handlers."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

import structlog

from .domain import AttentionItem, Automation, Ritual, Run, utc_now
from .idempotency import IdempotencyLedger, IdempotencyRecord
from .stores import AttentionStore, AutomationStore, RitualStore, RunStore

Clock = Callable[[], datetime]


class AppState:
    """Every map the service keeps, plus the stores that operate on them.

    One instance is created per application; handlers receive it through
    dependency injection so tests can build isolated instances.
    """

    def __init__(self, clock: Optional[Clock] = None, logger: Any = None):
        self.clock: Clock = clock or utc_now
        self.logger = logger or structlog.get_logger("ritual_weave")
        # Guards read-modify-write sequences when driven from several threads.
        self.lock = threading.RLock()

        self.rituals: Dict[str, Ritual] = {}
        self.runs: Dict[str, Run] = {}
        self.attention_items: Dict[str, AttentionItem] = {}
        self.automations: Dict[str, Automation] = {}
        self.idempotency = IdempotencyLedger()

        self.ritual_store = RitualStore(self)
        self.run_store = RunStore(self)
        self.attention_store = AttentionStore(self)
        self.automation_store = AutomationStore(self)

    def execute_idempotent(
        self,
        key: Optional[str],
        action: Callable[[], Tuple[int, Dict[str, Any]]],
    ) -> IdempotencyRecord:
        """Run ``action`` once per ``key`` and replay its response afterwards.

        Without a key the action always runs. Failed actions raise and leave
        no record behind, so a retry with the same key runs again.
        """
        with self.lock:
            if key is not None:
                existing = self.idempotency.lookup(key)
                if existing is not None:
                    self.logger.info("idempotency.replayed", idempotency_key=key)
                    return IdempotencyRecord(existing.status_code, existing.replay())

            status_code, payload = action()
            if key is None:
                return IdempotencyRecord(status_code, payload)
            stored = self.idempotency.record(key, status_code, payload)
            return IdempotencyRecord(stored.status_code, stored.replay())
