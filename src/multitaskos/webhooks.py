"""HTTP surface for the UI runtime: load, save, sync and import state."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException
from pydantic import BaseModel

from .app_context import AppContext
from .migrator import migrate
from .remote_store import DocumentStore
from .schemas import versions
from .settings import load_settings
from .state_store import LocalStateStore, StateDecodeError

logger = logging.getLogger(__name__)

app = FastAPI(title="MultitaskOS state sync")

_context: AppContext | None = None


class RemoteNotification(BaseModel):
    state: Optional[Dict[str, Any]] = None


class SessionRequest(BaseModel):
    user_id: str


def build_context(settings: dict[str, Any] | None = None) -> AppContext:
    """Create a context from settings, load local state and sign in if configured."""
    settings = settings or load_settings()
    ctx = AppContext(
        LocalStateStore(settings["local_db_path"], key=settings["storage_key"]),
        DocumentStore(settings["remote_db_path"]),
        tie_policy=settings["tie_policy"],
    )
    try:
        ctx.load()
    except StateDecodeError:
        logger.exception("Ignoring unreadable local state")
    if settings["user_id"]:
        ctx.sign_in(settings["user_id"])
    return ctx


def set_context(ctx: AppContext | None) -> None:
    global _context
    _context = ctx


def get_context() -> AppContext:
    global _context
    if _context is None:
        _context = build_context()
    return _context


@app.get("/health")
def health(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {
        "status": "ok",
        "schema_version": versions.STATE_VERSION,
        "has_state": ctx.state is not None,
        "signed_in": ctx.signed_in,
    }


@app.get("/state")
def get_state(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    return {"state": ctx.state}


@app.post("/state")
def save_state(
    payload: Dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)
) -> dict[str, Any]:
    return {"state": ctx.save(payload)}


@app.post("/state/import")
def import_state(
    payload: Dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)
) -> dict[str, Any]:
    return {"state": ctx.import_state(payload)}


@app.post("/sync/remote")
def remote_changed(
    notification: RemoteNotification, ctx: AppContext = Depends(get_context)
) -> dict[str, Any]:
    decision = ctx.on_remote_change(notification.state)
    return {"decision": decision.kind.value, "state": ctx.state}


@app.post("/migrate")
def migrate_state(payload: Dict[str, Any] = Body(...)) -> dict[str, Any]:
    return {"state": migrate(payload)}


@app.post("/session")
def sign_in(request: SessionRequest, ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    try:
        ctx.sign_in(request.user_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return {"signed_in": ctx.signed_in, "user_id": ctx.user_id, "state": ctx.state}


@app.delete("/session")
def sign_out(ctx: AppContext = Depends(get_context)) -> dict[str, Any]:
    ctx.sign_out()
    return {"signed_in": ctx.signed_in}
