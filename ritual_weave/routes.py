"""
Ritual Weave API Routes.

JSON endpoints for rituals, runs, attention items, automations and mock
capability invocations. Handlers validate the body through the intake gate,
call into a store on the injected AppState and wrap the entity under a named
key. Domain errors propagate to the handlers installed in ``api.py``.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from .errors import NotImplementedYet
from .idempotency import IdempotencyRecord
from .invocations import InvocationBroker
from .policy import (
    evaluate_attention,
    evaluate_ritual,
    evaluate_run_key,
    evaluate_run_status,
    parse_json_object,
)
from .state import AppState
from .triggers import build_next_triggers

router = APIRouter()


def get_state(request: Request) -> AppState:
    """Dependency returning the AppState of the running application."""
    return request.app.state.weave


def get_broker(request: Request) -> InvocationBroker:
    return request.app.state.invocations


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Read the request body as a JSON object. An empty body reads as ``{}``."""
    return parse_json_object(await request.body())


def _replay(record: IdempotencyRecord) -> JSONResponse:
    return JSONResponse(content=record.payload, status_code=record.status_code)


# =============================================================================
# System
# =============================================================================


@router.get("/health", tags=["system"])
async def health() -> Dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}


# =============================================================================
# Ritual Endpoints
# =============================================================================


@router.post("/rituals", status_code=201, tags=["rituals"])
async def create_ritual(
    request: Request, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    """Create a new Ritual."""
    ritual = evaluate_ritual(await read_json_object(request))
    db_ritual = state.ritual_store.create(ritual)
    return {"ritual": db_ritual.to_dict()}


@router.get("/rituals", tags=["rituals"])
async def list_rituals(state: AppState = Depends(get_state)) -> Dict[str, Any]:
    """List every Ritual with its runs."""
    return {"rituals": [r.to_dict() for r in state.ritual_store.list()]}


@router.get("/rituals/{ritual_key}", tags=["rituals"])
async def get_ritual(
    ritual_key: str, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    """Get a Ritual by key."""
    return {"ritual": state.ritual_store.get(ritual_key).to_dict()}


@router.post("/rituals/{ritual_key}/runs", status_code=201, tags=["runs"])
async def create_run(
    ritual_key: str, request: Request, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    """Create a Run for a Ritual.

    The body may carry an explicit ``run_key``; otherwise one is derived
    from the ritual key and the creation time.
    """
    run_key = evaluate_run_key(await read_json_object(request))
    run = state.run_store.create(ritual_key, run_key=run_key)
    return {"run": run.to_dict()}


# =============================================================================
# Run Endpoints
# =============================================================================


@router.get("/runs/{run_key}", tags=["runs"])
async def get_run(run_key: str, state: AppState = Depends(get_state)) -> Dict[str, Any]:
    """Get a Run with its ritual summary, attention items and next triggers."""
    with state.lock:
        run = state.run_store.get(run_key)
        ritual = state.ritual_store.get(run.ritual_key)
        return {
            "run": run.to_dict(),
            "ritual": ritual.summary(),
            "attention_items": [
                i.to_dict() for i in state.attention_store.list_for_run(run_key)
            ],
            "next_triggers": [t.to_dict() for t in build_next_triggers(run)],
        }


@router.post("/runs/{run_key}/status", tags=["runs"])
async def update_run_status(
    run_key: str, request: Request, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    """Move a Run along its lifecycle (planned -> in_progress -> complete)."""
    status = evaluate_run_status(await read_json_object(request))
    run = state.run_store.transition(run_key, status)
    return {
        "run": run.to_dict(),
        "next_triggers": [t.to_dict() for t in build_next_triggers(run)],
    }


@router.get("/runs/{run_key}/attention", tags=["attention"])
async def list_run_attention(
    run_key: str, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    """List attention items for a Run, most recent first."""
    items = state.attention_store.list_for_run(run_key)
    return {"attention_items": [i.to_dict() for i in items]}


@router.get("/runs/{run_key}/artifacts", tags=["artifacts"])
async def list_run_artifacts(run_key: str) -> Dict[str, Any]:
    """Reserved: run artifacts are not built yet."""
    raise NotImplementedYet("Run artifacts are not implemented")


# =============================================================================
# Attention Endpoints
# =============================================================================


@router.post("/attention", status_code=201, tags=["attention"])
async def create_attention(
    request: Request, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    """Raise an AttentionItem against a Run."""
    attention = evaluate_attention(await read_json_object(request))
    item = state.attention_store.create(attention)
    return {"attention": item.to_dict()}


@router.post("/attention/{attention_id}/resolve", tags=["attention"])
async def resolve_attention(
    attention_id: str,
    state: AppState = Depends(get_state),
    x_household_role: Optional[str] = Header(None),
    idempotency_key: Optional[str] = Header(None),
) -> JSONResponse:
    """Resolve an AttentionItem.

    Requires the X-Household-Role header. auth_needed items can only be
    resolved by an Owner. Retries carrying the same Idempotency-Key get the
    original response back.
    """
    record = state.attention_store.resolve(
        attention_id, x_household_role, idempotency_key=idempotency_key
    )
    return _replay(record)


# =============================================================================
# Automation Endpoints
# =============================================================================


@router.post("/automations", status_code=201, tags=["automations"])
async def create_automation(
    request: Request,
    state: AppState = Depends(get_state),
    idempotency_key: Optional[str] = Header(None),
) -> JSONResponse:
    """Register an Automation (stored only, never executed).

    The raw body goes to the store so a retry with a known Idempotency-Key
    replays even when the body no longer parses.
    """
    raw = await request.body()
    record = state.automation_store.register(raw, idempotency_key=idempotency_key)
    return _replay(record)


@router.get("/automations", tags=["automations"])
async def list_automations(
    ritual_key: Optional[str] = None, state: AppState = Depends(get_state)
) -> Dict[str, Any]:
    """List Automations, optionally for one ritual (global ones included)."""
    automations = state.automation_store.list(ritual_key=ritual_key)
    return {"automations": [a.to_dict() for a in automations]}


# =============================================================================
# Invocation & Artifact Endpoints
# =============================================================================


@router.post("/invocations/request", tags=["invocations"])
async def request_invocation(
    request: Request,
    broker: InvocationBroker = Depends(get_broker),
    idempotency_key: Optional[str] = Header(None),
) -> Dict[str, Any]:
    """Request a mock invocation URL for a capability."""
    body = await read_json_object(request)
    return broker.request(body, idempotency_key=idempotency_key)


@router.post("/artifacts", tags=["artifacts"])
async def create_artifact() -> Dict[str, Any]:
    """Reserved: artifacts are not built yet."""
    raise NotImplementedYet("Artifacts are not implemented")
