from __future__ import annotations

import contextvars
import json
import os
import sys
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

_CURRENT_CTX: contextvars.ContextVar[Optional[Dict[str, Any]]] = contextvars.ContextVar(
    "dbot_log_ctx",
    default=None,
)

_LEVELS = {"debug": 10, "info": 20, "warn": 30, "warning": 30, "error": 40}

# substrings of keys whose values never reach a log line
_SECRET_KEYS = ("secret", "password", "token", "private", "mnemonic", "api_key", "apikey", "seed")
# keys whose values are shown only as a prefix
_WALLET_KEYS = ("walletid", "wallet_id", "walletidlist", "wallet_id_list")


def get_current_context() -> Optional[Dict[str, Any]]:
    return _CURRENT_CTX.get()


@contextmanager
def tool_context(tool: str, *, request_id: str | None = None) -> Iterator[Dict[str, Any]]:
    """
    Bind a fresh log context for one tool call.

    Code running inside (the API client, worker threads started with a copied
    context) picks it up via `get_current_context()`.
    """
    ctx = build_log_context(tool=tool, request_id=request_id)
    token = _CURRENT_CTX.set(ctx)
    try:
        yield ctx
    finally:
        _CURRENT_CTX.reset(token)


def _level_value(level: str) -> int:
    return _LEVELS.get(str(level or "").strip().lower(), 20)


def _min_level_value() -> int:
    raw = (os.getenv("DBOT_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "info").strip().lower()
    return _level_value(raw)


def _mask(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_mask(v) for v in value]
    return f"{str(value)[:8]}***" if value else value


def redact(value: Any) -> Any:
    """
    Scrub structured log data: secrets are replaced, wallet ids are cut to
    their first 8 characters.
    """
    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for k, v in value.items():
            ks = str(k).lower()
            if ks in _WALLET_KEYS:
                out[k] = _mask(v)
            elif any(x in ks for x in _SECRET_KEYS):
                out[k] = "***REDACTED***"
            else:
                out[k] = redact(v)
        return out
    if isinstance(value, (list, tuple)):
        return [redact(x) for x in value]
    return value


def build_log_context(*, tool: str, request_id: str | None = None) -> Dict[str, Any]:
    return {
        "tool": tool,
        "request_id": str(request_id or uuid.uuid4()),
        "ts_ms": int(time.time() * 1000),
        "service": os.getenv("DBOT_SERVICE_NAME", "dbot-mcp"),
    }


def log_event(event: str, *, ctx: Dict[str, Any], data: Optional[Dict[str, Any]] = None, level: str = "info") -> None:
    """
    Write one JSON line to stderr. stdout belongs to the MCP stdio transport.
    """
    if _level_value(level) < _min_level_value():
        return
    payload = dict(ctx)
    payload["level"] = str(level).upper()
    payload["event"] = event
    if data:
        payload["data"] = redact(data)
    print(json.dumps(payload, sort_keys=True, default=str), file=sys.stderr)
