from __future__ import annotations

import inspect
import time
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, Union, get_args, get_origin

import requests
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import BaseModel, Strict

from app.core.config import Settings
from app.tools.formatting import format_api_error, format_network_error
from common.errors import AppError, UnknownToolError, classify_exception
from common.wallets import resolve_wallet_id
from execution.dbot_service import DbotClient
from execution.models import ApiEnvelope
from execution.schemas import DbotRequest, validate_request
from observability import Metrics
from observability.logging import build_log_context, get_current_context, log_event, tool_context

ToolResult = Tuple[str, str]  # (text, outcome)


@dataclass(frozen=True)
class ToolSpec:
    """
    One row of an adapter's operation table.

    Simple tools set `call` (one API request) and `render` (success text);
    failures are rendered generically. Tools that need more than one request
    set `run` instead and return their own (text, outcome).
    """

    name: str
    description: str
    schema: Type[DbotRequest]
    operation: str
    call: Optional[Callable[[DbotClient, Any], ApiEnvelope]] = None
    render: Optional[Callable[[Any, ApiEnvelope], str]] = None
    run: Optional[Callable[["Dispatcher", Any], ToolResult]] = None
    wallet_field: Optional[str] = None


class Dispatcher:
    def __init__(self, *, adapter: str, specs: Iterable[ToolSpec], client: DbotClient, settings: Settings, metrics: Metrics):
        self.adapter = adapter
        self.client = client
        self.settings = settings
        self.metrics = metrics
        self._specs: Dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            self._specs[spec.name] = spec

    @property
    def specs(self) -> List[ToolSpec]:
        return list(self._specs.values())

    def tool_names(self) -> List[str]:
        return list(self._specs)

    def handle(self, name: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one tool call and return `{"content": [{"type": "text", "text": ...}]}`.

        Configuration and validation problems raise AppError subclasses.
        Logical API errors and transport errors come back as text.
        """
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownToolError(name)

        started = time.time()
        outcome = "error"
        with tool_context(name) as ctx:
            log_event("tool_start", ctx=ctx, data={"adapter": self.adapter}, level="info")
            try:
                text, outcome = self._run(spec, dict(args or {}))
                return {"content": [{"type": "text", "text": text}]}
            except Exception as e:
                err = classify_exception(e)
                log_event("tool_error", ctx=ctx, data={"code": err.code, "error": err.message}, level="error")
                raise
            finally:
                elapsed_ms = (time.time() - started) * 1000.0
                self.metrics.record_tool_call(name, outcome=outcome, elapsed_ms=elapsed_ms)
                log_event("tool_end", ctx=ctx, data={"elapsed_ms": round(elapsed_ms, 3), "outcome": outcome}, level="info")

    def _run(self, spec: ToolSpec, args: Dict[str, Any]) -> ToolResult:
        if spec.wallet_field:
            self._fill_wallet(spec, args)
        req = validate_request(spec.schema, args, defaults=self.settings.defaults)

        if spec.run is not None:
            try:
                return spec.run(self, req)
            except requests.RequestException as e:
                return self.transport_failure(e, spec.operation, args)

        try:
            env = spec.call(self.client, req)
        except requests.RequestException as e:
            return self.transport_failure(e, spec.operation, args)
        if env.err:
            return self.api_failure(env, spec.operation, req.to_payload())
        return spec.render(req, env), "ok"

    def api_failure(self, env: ApiEnvelope, operation: str, request: Optional[Dict[str, Any]]) -> ToolResult:
        log_event(
            "api_logical_error",
            ctx=get_current_context() or build_log_context(tool=operation),
            data={"operation": operation, "docs": env.docs},
            level="warn",
        )
        return format_api_error(env, operation, request), "api_error"

    def transport_failure(self, error: Exception, operation: str, request: Optional[Dict[str, Any]]) -> ToolResult:
        err = classify_exception(error)
        log_event(
            "tool_error",
            ctx=get_current_context() or build_log_context(tool=operation),
            data={"code": err.code, "error": err.message, "operation": operation},
            level="error",
        )
        return format_network_error(error, operation, request), "transport_error"

    def _default_chain(self, schema: Type[DbotRequest]) -> str:
        if "chain" in schema.env_defaults:
            return self.settings.defaults.chain
        field = schema.model_fields.get("chain")
        return str(field.default) if field is not None and field.default else "solana"

    def _fill_wallet(self, spec: ToolSpec, args: Dict[str, Any]) -> None:
        if spec.wallet_field == "walletIdList":
            if args.get("walletIdList") or args.get("wallet_id_list"):
                return
            chain = args.get("chain") or self._default_chain(spec.schema)
            args["walletIdList"] = [resolve_wallet_id(chain, self.settings.wallet_ids)]
            return
        if args.get("walletId") or args.get("wallet_id"):
            return
        chain = args.get("chain") or self._default_chain(spec.schema)
        args["walletId"] = resolve_wallet_id(chain, self.settings.wallet_ids)


# --- FastMCP registration ---


_SCALARS = (bool, int, float, str)


def _loosen(annotation: Any) -> Any:
    """
    Tool-surface type for a model field: nested models become plain dicts and
    field constraints are dropped, so the dispatcher reports every failure.
    Scalars stay strict so the surface never converts "0.5" or "yes" on the
    way in.
    """
    if annotation in _SCALARS:
        return Annotated[annotation, Strict()]
    origin = get_origin(annotation)
    if origin is Annotated:
        return _loosen(get_args(annotation)[0])
    if origin is Union:
        inner = [a for a in get_args(annotation) if a is not type(None)]
        return _loosen(inner[0]) if len(inner) == 1 else Any
    if origin in (list, List):
        args = get_args(annotation)
        return List[_loosen(args[0]) if args else Any]
    if inspect.isclass(annotation) and issubclass(annotation, BaseModel):
        return Dict[str, Any]
    return annotation


def tool_signature(schema: Type[DbotRequest]) -> inspect.Signature:
    params = []
    for name, field in schema.model_fields.items():
        alias = field.alias or name
        params.append(
            inspect.Parameter(
                alias,
                inspect.Parameter.KEYWORD_ONLY,
                default=None,
                annotation=Optional[_loosen(field.annotation)],
            )
        )
    return inspect.Signature(params, return_annotation=str)


def _make_tool_fn(dispatcher: Dispatcher, spec: ToolSpec) -> Callable[..., str]:
    def tool_fn(**kwargs: Any) -> str:
        args = {k: v for k, v in kwargs.items() if v is not None}
        try:
            result = dispatcher.handle(spec.name, args)
        except AppError as e:
            raise ToolError(f"[{e.code}] {e.message}") from e
        return result["content"][0]["text"]

    sig = tool_signature(spec.schema)
    tool_fn.__name__ = spec.name
    tool_fn.__qualname__ = spec.name
    tool_fn.__doc__ = spec.description
    tool_fn.__signature__ = sig
    tool_fn.__annotations__ = {p.name: p.annotation for p in sig.parameters.values()}
    tool_fn.__annotations__["return"] = str
    return tool_fn


def register_tools(mcp: FastMCP, dispatcher: Dispatcher) -> None:
    for spec in dispatcher.specs:
        mcp.tool(name=spec.name, description=spec.description)(_make_tool_fn(dispatcher, spec))
