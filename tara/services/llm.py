# tara/services/llm.py
from __future__ import annotations
import json, logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, Optional
from aiolimiter import AsyncLimiter
from openai import AsyncOpenAI
from ..config import settings
from ..telemetry import trace

log = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None
# chat completions and Whisper calls are throttled separately
_chat_limiter = AsyncLimiter(settings.llm_rps, time_period=1)
_speech_limiter = AsyncLimiter(settings.speech_rps, time_period=1)

MAX_LOG_CHARS = 1800

def _snip(s: str | None, n: int = MAX_LOG_CHARS) -> str:
    if not s:
        return ""
    s = str(s)
    return s if len(s) <= n else (s[:n] + " …[truncated]")

def _emit(meta: Dict[str, Any], level: int = logging.INFO, exc: bool = False) -> None:
    if settings.trace_prompts:
        trace.log(**meta)
    log.log(level, json.dumps(meta, ensure_ascii=False), exc_info=exc)

def client() -> AsyncOpenAI:
    """Lazy-initialize the OpenAI async client."""
    global _client
    if _client is None:
        _client = AsyncOpenAI()
    return _client

def get_speech_limiter() -> AsyncLimiter:
    return _speech_limiter

@dataclass
class ChatResult:
    text: str
    tokens_used: Optional[int]
    latency_ms: float
    request_id: Optional[str] = None

async def llm_chat(system: str, user: str, model: str, *, temperature: float = 0.0,
                   max_tokens: Optional[int] = None, presence_penalty: float = 0.0,
                   frequency_penalty: float = 0.0) -> ChatResult:
    """
    One system + user chat completion. Rate limited; request, response and
    failure are each logged as a JSON line (and traced when prompt tracing is on).
    Errors from the API propagate to the caller.
    """
    base = {"op": "chat.completions.create", "model": model}
    _emit({
        "kind": "llm.request", **base,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "system_len": len(system or ""),
        "user_len": len(user or ""),
        "user_snip": _snip(user),
    })

    t0 = perf_counter()
    try:
        async with _chat_limiter:
            r = await client().chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                presence_penalty=presence_penalty,
                frequency_penalty=frequency_penalty,
            )
    except Exception as e:
        _emit({"kind": "llm.error", **base, "error": repr(e)}, level=logging.ERROR, exc=True)
        raise

    latency_ms = round((perf_counter() - t0) * 1000, 1)
    choice = r.choices[0] if r.choices else None
    text = ((choice.message.content if choice else None) or "").strip()
    usage = getattr(r, "usage", None)
    result = ChatResult(
        text=text,
        tokens_used=getattr(usage, "total_tokens", None),
        latency_ms=latency_ms,
        request_id=getattr(r, "id", None),
    )
    _emit({
        "kind": "llm.response", **base,
        "request_id": result.request_id,
        "latency_ms": latency_ms,
        "finish_reason": getattr(choice, "finish_reason", None),
        "in_tokens": getattr(usage, "prompt_tokens", None),
        "out_tokens": getattr(usage, "completion_tokens", None),
        "response_len": len(text),
        "response_snip": _snip(text),
    })
    return result
