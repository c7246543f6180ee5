"""
FastAPI web server: the calling layer around the layout engine.

The presentation layer converts pointer gestures to grid cells and calls
one endpoint per gesture sample.  Each mutation loads the session's
committed layout, runs exactly one engine operation, commits the result
and re-validates it.  A per-session lock serializes mutations so no two
operations ever start from the same committed layout.
"""

from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from dashgrid.config import DEFAULT_SIZES, GRID_RULES
from dashgrid.layout import (
    GridItem, LayoutFormatError,
    add_component, remove_component, reposition_component,
    resize_width, resize_left_edge, resize_height,
    validate_layout, layout_to_dict, parse_layout, violations_to_dict,
    is_legacy_format, migrate_legacy_rows,
)
from dashgrid.session import Session, create_session, load_session, list_sessions


log = logging.getLogger("dashgrid.server")

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="dashgrid")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Session locks (held only while a request is in flight) ─────────

# session id -> (lock, number of requests holding or waiting on it)
_locks: dict[str, tuple[threading.Lock, int]] = {}
_locks_guard = threading.Lock()
_id_counter = itertools.count(101)


@contextmanager
def _session_lock(session_id: str):
    """Serialize mutations of one session.  The entry is dropped once the
    last request using it finishes, so the map never outlives its users."""
    with _locks_guard:
        lock, users = _locks.get(session_id, (threading.Lock(), 0))
        _locks[session_id] = (lock, users + 1)
    try:
        with lock:
            yield
    finally:
        with _locks_guard:
            lock, users = _locks[session_id]
            if users == 1:
                del _locks[session_id]
            else:
                _locks[session_id] = (lock, users - 1)


# ── Models ─────────────────────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    name: str = ""
    layout: list[dict[str, Any]] | None = None


class AddComponentRequest(BaseModel):
    component_type: str
    x: int
    y: int
    width: int | None = None
    height: int | None = None
    component_id: str | None = None


class MoveRequest(BaseModel):
    x: int
    y: int


class ResizeRequest(BaseModel):
    edge: Literal["right", "left", "bottom"]
    value: int


class LayoutRequest(BaseModel):
    items: list[dict[str, Any]]


class MigrateRequest(BaseModel):
    rows: list[dict[str, Any]]


# ── Helpers ────────────────────────────────────────────────────────

def _get_session(session_id: str) -> Session:
    session = load_session(session_id)
    if session is None:
        raise HTTPException(404, f"Unknown session '{session_id}'")
    return session


def _parse_items(data: list[dict[str, Any]]) -> list[GridItem]:
    try:
        if is_legacy_format(data):
            return migrate_legacy_rows(data)
        return parse_layout(data)
    except LayoutFormatError as e:
        raise HTTPException(422, str(e)) from e


def _require_component(items: list[GridItem], component_id: str) -> None:
    if not any(i.component_id == component_id for i in items):
        raise HTTPException(404, f"Unknown component '{component_id}'")


def _next_component_id(items: list[GridItem]) -> str:
    taken = {i.component_id for i in items}
    while True:
        cid = f"comp-{next(_id_counter)}"
        if cid not in taken:
            return cid


def _commit(session: Session, items: list[GridItem], applied: bool = True) -> dict:
    """Persist *items* and report them with a fresh validation pass."""
    if applied:
        session.write_layout(items)
    violations = validate_layout(items)
    if violations:
        log.error("[LAYOUT BUG] %d invariant violation(s) in session %s: %s",
                  len(violations), session.id,
                  "; ".join(v.message for v in violations))
    return {
        "applied": applied,
        "items": layout_to_dict(items),
        "violations": violations_to_dict(violations),
    }


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/api/component_types")
def get_component_types():
    """Grid bounds and the default size of each built-in component type."""
    return {
        "grid_columns": GRID_RULES.grid_columns,
        "max_component_height": GRID_RULES.max_component_height,
        "cell_height_px": GRID_RULES.cell_height_px,
        "types": {
            name: {"width": w, "height": h}
            for name, (w, h) in DEFAULT_SIZES.items()
        },
    }


@app.post("/api/sessions")
def post_session(req: CreateSessionRequest):
    """Create a session, optionally seeded with a layout (new or legacy format)."""
    items = _parse_items(req.layout) if req.layout else []
    violations = validate_layout(items)
    if violations:
        raise HTTPException(422, {
            "message": "Seed layout is not valid",
            "violations": violations_to_dict(violations),
        })
    session = create_session(name=req.name, items=items)
    log.info("Created session %s with %d item(s)", session.id, len(items))
    return {"id": session.id, "name": session.name, "items": layout_to_dict(items)}


@app.get("/api/sessions")
def get_sessions():
    return {"sessions": list_sessions()}


@app.get("/api/sessions/{session_id}")
def get_session(session_id: str):
    session = _get_session(session_id)
    items = session.read_layout()
    return {
        "id": session.id,
        "name": session.name,
        "items": layout_to_dict(items),
        "violations": violations_to_dict(validate_layout(items)),
    }


@app.post("/api/sessions/{session_id}/components")
def post_component(session_id: str, req: AddComponentRequest):
    """Add a component at the first free row of the requested column."""
    session = _get_session(session_id)
    width, height = req.width, req.height
    if width is None or height is None:
        if req.component_type not in DEFAULT_SIZES:
            raise HTTPException(
                422, f"No default size for component type '{req.component_type}'")
        default_w, default_h = DEFAULT_SIZES[req.component_type]
        width = default_w if width is None else width
        height = default_h if height is None else height
    if width < 1 or height < 1:
        raise HTTPException(422, "width and height must be >= 1")

    with _session_lock(session.id):
        items = session.read_layout()
        cid = req.component_id or _next_component_id(items)
        if any(i.component_id == cid for i in items):
            raise HTTPException(409, f"Component '{cid}' already exists")

        new_item = GridItem(cid, req.component_type, req.x, req.y, width, height)
        result = add_component(items, new_item)
        if result is None:
            raise HTTPException(409, f"No room for {width}x{height} at column {req.x}")
        return {"component_id": cid, **_commit(session, result)}


@app.delete("/api/sessions/{session_id}/components/{component_id}")
def delete_component(session_id: str, component_id: str):
    """Remove a component.  Removing an unknown id is a no-op."""
    session = _get_session(session_id)
    with _session_lock(session.id):
        items = session.read_layout()
        return _commit(session, remove_component(items, component_id))


@app.post("/api/sessions/{session_id}/components/{component_id}/move")
def move_component(session_id: str, component_id: str, req: MoveRequest):
    """Reposition a component, sliding down to the first clear row."""
    session = _get_session(session_id)
    with _session_lock(session.id):
        items = session.read_layout()
        _require_component(items, component_id)
        result = reposition_component(items, component_id, req.x, req.y)
        if result is None:
            raise HTTPException(409, f"No room for '{component_id}' at column {req.x}")
        return _commit(session, result)


@app.post("/api/sessions/{session_id}/components/{component_id}/resize")
def resize_component(session_id: str, component_id: str, req: ResizeRequest):
    """Resize one edge.  ``applied`` is false when the push was rejected."""
    session = _get_session(session_id)
    resize = {
        "right": resize_width,
        "left": resize_left_edge,
        "bottom": resize_height,
    }[req.edge]
    with _session_lock(session.id):
        items = session.read_layout()
        _require_component(items, component_id)
        result = resize(items, component_id, req.value)
        return _commit(session, result, applied=result is not items)


@app.post("/api/validate")
def post_validate(req: LayoutRequest):
    """Validate a layout without storing it."""
    items = _parse_items(req.items)
    return {"violations": violations_to_dict(validate_layout(items))}


@app.post("/api/migrate")
def post_migrate(req: MigrateRequest):
    """Convert legacy rows into the current item format."""
    try:
        items = migrate_legacy_rows(req.rows)
    except LayoutFormatError as e:
        raise HTTPException(422, str(e)) from e
    return {"items": layout_to_dict(items)}


def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("dashgrid.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
