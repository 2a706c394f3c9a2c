"""
Ritual Weave Store Layer.

In-memory stores for rituals, runs, attention items and automations. Each
store operates on a shared AppState; every state-changing operation runs
under the state's lock and emits a structured log event.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple, Union

from .domain import (
    ActivityLogEntry,
    AttentionCreate,
    AttentionItem,
    Automation,
    AutomationCreate,
    HouseholdRole,
    Ritual,
    RitualCreate,
    Run,
    RunStatus,
    TriggerType,
    derive_run_key,
    isoformat,
)
from .errors import (
    AttentionAlreadyResolved,
    AttentionItemNotFound,
    InvalidStatusTransition,
    RitualAlreadyExists,
    RitualNotFound,
    RunAlreadyExists,
    RunNotFound,
)
from .idempotency import IdempotencyRecord, scoped_key
from .policy import (
    authorize_resolution,
    evaluate_automation,
    parse_json_object,
    parse_role,
)

if TYPE_CHECKING:
    from .state import AppState


class RitualStore:
    """Store for Ritual objects, keyed by ritual_key."""

    def __init__(self, state: "AppState"):
        self.state = state

    @property
    def _rituals(self) -> Dict[str, Ritual]:
        return self.state.rituals

    def create(self, ritual: RitualCreate) -> Ritual:
        """Create a new Ritual with no runs."""
        with self.state.lock:
            if ritual.ritual_key in self._rituals:
                raise RitualAlreadyExists(ritual.ritual_key)

            now = self.state.clock()
            db_ritual = Ritual(
                ritual_key=ritual.ritual_key,
                name=ritual.name,
                instant_runs=ritual.instant_runs,
                cadence=ritual.cadence,
                inputs=[i.model_copy(deep=True) for i in ritual.inputs],
                runs=[],
                created_at=now,
                updated_at=now,
            )
            self._rituals[db_ritual.ritual_key] = db_ritual

        self.state.logger.info(
            "ritual.created",
            ritual_id=db_ritual.ritual_key,
            meta={
                "instant_runs": db_ritual.instant_runs,
                "input_count": len(db_ritual.inputs),
            },
        )
        return db_ritual

    def get(self, ritual_key: str) -> Ritual:
        """Get a Ritual by key."""
        ritual = self._rituals.get(ritual_key)
        if ritual is None:
            raise RitualNotFound(ritual_key)
        return ritual

    def list(self) -> List[Ritual]:
        """Snapshots of every Ritual, in creation order."""
        with self.state.lock:
            return [r.clone() for r in self._rituals.values()]


# Allowed run status transitions, current -> reachable.
RUN_TRANSITIONS: Dict[RunStatus, Tuple[RunStatus, ...]] = {
    RunStatus.PLANNED: (RunStatus.IN_PROGRESS, RunStatus.COMPLETE),
    RunStatus.IN_PROGRESS: (RunStatus.COMPLETE,),
    RunStatus.COMPLETE: (),
}

_TRANSITION_EVENTS: Dict[RunStatus, TriggerType] = {
    RunStatus.IN_PROGRESS: TriggerType.ON_RUN_START,
    RunStatus.COMPLETE: TriggerType.ON_RUN_COMPLETE,
}


class RunStore:
    """Store for Run objects and the run lifecycle state machine."""

    def __init__(self, state: "AppState"):
        self.state = state

    @property
    def _runs(self) -> Dict[str, Run]:
        return self.state.runs

    def create(self, ritual_key: str, run_key: Optional[str] = None) -> Run:
        """Create a Run for a Ritual.

        Instant rituals produce runs that are already complete; all others
        start out planned.
        """
        with self.state.lock:
            ritual = self.state.ritual_store.get(ritual_key)

            now = self.state.clock()
            key = run_key or derive_run_key(ritual.ritual_key, isoformat(now))
            if key in self._runs:
                raise RunAlreadyExists(key)

            run = Run(
                run_key=key,
                ritual_key=ritual.ritual_key,
                status=RunStatus.PLANNED,
                inputs=[i.model_copy(deep=True) for i in ritual.inputs],
                activity_log=[],
                created_at=now,
                updated_at=now,
            )

            meta: Dict[str, Any] = {"instant_run": ritual.instant_runs}
            if ritual.instant_runs:
                run.status = RunStatus.COMPLETE
                run.touch(self.state.clock())
                meta["completed_immediately"] = True

            ritual.runs.append(run)
            self._touch_ritual(ritual, run.updated_at)
            self._runs[key] = run

        self.state.logger.info(
            "run.created",
            run_id=run.run_key,
            ritual_id=ritual.ritual_key,
            status=run.status.value,
            meta=meta,
        )
        return run

    def get(self, run_key: str) -> Run:
        """Get a Run by key."""
        run = self._runs.get(run_key)
        if run is None:
            raise RunNotFound(run_key)
        return run

    def transition(self, run_key: str, status: RunStatus) -> Run:
        """Move a Run to ``status`` and record the matching activity."""
        with self.state.lock:
            run = self.get(run_key)
            previous = run.status
            if status not in RUN_TRANSITIONS[previous]:
                raise InvalidStatusTransition(previous.value, status.value)

            now = self.state.clock()
            run.status = status
            self.append_activity(
                run,
                ActivityLogEntry(
                    timestamp=now,
                    event=_TRANSITION_EVENTS[status],
                    message=f"Run status changed: {previous.value} -> {status.value}",
                    metadata={"from_status": previous.value, "to_status": status.value},
                ),
            )

        self.state.logger.info(
            "run.status_changed",
            run_id=run.run_key,
            ritual_id=run.ritual_key,
            status=run.status.value,
            meta={"previous_status": previous.value},
        )
        return run

    def append_activity(self, run: Run, entry: ActivityLogEntry) -> None:
        """Append an activity log entry and advance the run and ritual clocks."""
        run.append_activity(entry)
        ritual = self.state.rituals.get(run.ritual_key)
        if ritual is not None:
            self._touch_ritual(ritual, run.updated_at)

    @staticmethod
    def _touch_ritual(ritual: Ritual, at: datetime) -> None:
        if at > ritual.updated_at:
            ritual.updated_at = at


class AttentionStore:
    """Store for AttentionItem objects and their resolution policy."""

    def __init__(self, state: "AppState"):
        self.state = state

    @property
    def _items(self) -> Dict[str, AttentionItem]:
        return self.state.attention_items

    def create(self, attention: AttentionCreate) -> AttentionItem:
        """Raise a new AttentionItem against an existing Run."""
        with self.state.lock:
            run = self.state.run_store.get(attention.run_key)
            item = AttentionItem(
                run_key=run.run_key,
                type=attention.type,
                message=attention.message,
                resolved=False,
                created_at=self.state.clock(),
            )
            self._items[item.attention_id] = item

        self.state.logger.info(
            "attention.created",
            run_id=run.run_key,
            ritual_id=run.ritual_key,
            status=run.status.value,
            meta={"attention_id": item.attention_id, "attention_type": item.type.value},
        )
        return item

    def get(self, attention_id: str) -> AttentionItem:
        item = self._items.get(attention_id)
        if item is None:
            raise AttentionItemNotFound(attention_id)
        return item

    def list_for_run(self, run_key: str) -> List[AttentionItem]:
        """Attention items for a Run, most recent first."""
        with self.state.lock:
            self.state.run_store.get(run_key)
            items = [i for i in self._items.values() if i.run_key == run_key]
            # Newest insertion first so equal timestamps also read newest first.
            items.reverse()
            items.sort(key=lambda i: i.created_at, reverse=True)
            return [i.clone() for i in items]

    def resolve_item(self, attention_id: str, role: HouseholdRole) -> AttentionItem:
        """Resolve an item on behalf of ``role``.

        Raises:
            AttentionItemNotFound: unknown attention_id
            AttentionAlreadyResolved: the item was resolved before
            RunNotFound: the item's run no longer exists
            ForbiddenForRole: ``role`` may not resolve this type of item
        """
        with self.state.lock:
            item = self.get(attention_id)
            if item.resolved:
                raise AttentionAlreadyResolved(attention_id)
            run = self.state.run_store.get(item.run_key)
            authorize_resolution(role, item.type)

            now = self.state.clock()
            item.mark_resolved(now)
            self.state.run_store.append_activity(
                run,
                ActivityLogEntry(
                    timestamp=now,
                    event=TriggerType.ON_ATTENTION_RESOLVED,
                    message=f"Attention item resolved: {item.type.value}",
                    metadata={
                        "attention_id": item.attention_id,
                        "attention_type": item.type.value,
                        "original_message": item.message,
                    },
                ),
            )

        self.state.logger.info(
            "attention.resolved",
            run_id=run.run_key,
            ritual_id=run.ritual_key,
            status=run.status.value,
            meta={
                "attention_id": item.attention_id,
                "attention_type": item.type.value,
                "resolved_at": isoformat(now),
            },
        )
        return item

    def resolve(
        self,
        attention_id: str,
        requester_role: Optional[str],
        idempotency_key: Optional[str] = None,
    ) -> IdempotencyRecord:
        """Resolve an item from a request, replaying earlier results for a key.

        The role is checked before anything else; a known idempotency key
        then short-circuits to the stored response.
        """
        role = parse_role(requester_role)
        key = (
            scoped_key("attention_resolve", attention_id, idempotency_key)
            if idempotency_key
            else None
        )

        def _resolve() -> Tuple[int, Dict[str, Any]]:
            item = self.resolve_item(attention_id, role)
            return 200, {"attention": item.to_dict()}

        return self.state.execute_idempotent(key, _resolve)


class AutomationStore:
    """Store for Automation registrations."""

    def __init__(self, state: "AppState"):
        self.state = state

    @property
    def _automations(self) -> Dict[str, Automation]:
        return self.state.automations

    def create(self, automation: AutomationCreate) -> Automation:
        """Register an Automation, optionally scoped to a Ritual."""
        with self.state.lock:
            if automation.ritual_key is not None:
                self.state.ritual_store.get(automation.ritual_key)

            now = self.state.clock()
            db_automation = Automation(
                ritual_key=automation.ritual_key,
                trigger=automation.trigger,
                call=automation.call.model_copy(deep=True),
                created_at=now,
                updated_at=now,
            )
            self._automations[db_automation.automation_id] = db_automation

        self.state.logger.info(
            "automation.created",
            ritual_id=db_automation.ritual_key,
            meta={
                "automation_id": db_automation.automation_id,
                "trigger": db_automation.trigger.value,
                "capability_id": db_automation.call.capability_id,
            },
        )
        return db_automation

    def register(
        self,
        body: Union[bytes, Mapping[str, Any]],
        idempotency_key: Optional[str] = None,
    ) -> IdempotencyRecord:
        """Validate and create an Automation from a request body.

        ``body`` is either raw request bytes or an already decoded object.
        A known idempotency key replays the stored response before the body
        is even parsed.
        """
        key = scoped_key("automation_create", idempotency_key) if idempotency_key else None

        def _register() -> Tuple[int, Dict[str, Any]]:
            payload = parse_json_object(body) if isinstance(body, bytes) else body
            automation = self.create(evaluate_automation(payload))
            return 201, {"automation": automation.to_dict()}

        return self.state.execute_idempotent(key, _register)

    def list(self, ritual_key: Optional[str] = None) -> List[Automation]:
        """Registered automations; a ritual filter also includes global ones."""
        with self.state.lock:
            automations = list(self._automations.values())
            if ritual_key is not None:
                automations = [
                    a for a in automations if a.is_global or a.ritual_key == ritual_key
                ]
            return [a.clone() for a in automations]
