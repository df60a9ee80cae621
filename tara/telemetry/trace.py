from __future__ import annotations
from contextvars import ContextVar
from time import perf_counter, time
from typing import Any, Dict, Optional

# One trace per /api/ask call: every stage of the tutoring pipeline appends an event.
_trace: ContextVar[Optional[Dict[str, Any]]] = ContextVar("tara_trace_ctx", default=None)

def start(trace_id: str, **attrs) -> None:
    _trace.set({"trace_id": trace_id, "started": time(), "_t0": perf_counter(), "attrs": dict(attrs), "events": []})

def bind(**attrs) -> None:
    """Attach attributes (session id, resolved language...) to the running trace."""
    ctx = _trace.get()
    if ctx is not None:
        ctx["attrs"].update(attrs)

def log(kind: str, **data) -> None:
    ctx = _trace.get()
    if ctx is None:
        return
    elapsed = round((perf_counter() - ctx["_t0"]) * 1000, 1)
    ctx["events"].append({"kind": kind, "elapsed_ms": elapsed, **data})

def current_id() -> Optional[str]:
    ctx = _trace.get()
    return ctx["trace_id"] if ctx else None

def get() -> Dict[str, Any]:
    ctx = _trace.get()
    if ctx is None:
        return {"trace_id": None, "attrs": {}, "events": []}
    return {k: v for k, v in ctx.items() if not k.startswith("_")}
