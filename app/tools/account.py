"""
Tools every adapter exposes: wallet listing and token security lookup.
"""

from __future__ import annotations

import contextvars
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Union

import requests

from app.tools.formatting import format_all_wallets, format_token_security, format_wallets
from app.tools.registry import Dispatcher, ToolResult, ToolSpec
from execution.models import ApiEnvelope
from execution.schemas import TokenSecurityQuery, WalletQuery
from observability.logging import build_log_context, get_current_context, log_event


WALLET_TYPES = ("solana", "evm")

_WalletOutcome = Union[ApiEnvelope, Exception]


def _failed(outcome: _WalletOutcome) -> bool:
    return isinstance(outcome, Exception) or outcome.err


def _wallets_of(outcome: _WalletOutcome) -> List[Dict[str, Any]]:
    if _failed(outcome) or not isinstance(outcome.res, list):
        return []
    return outcome.res


def _query_all_wallet_types(dispatcher: Dispatcher, q: WalletQuery) -> Dict[str, _WalletOutcome]:
    # One copied context per task: a Context cannot be entered by two threads at once.
    outcomes: Dict[str, _WalletOutcome] = {}
    with ThreadPoolExecutor(max_workers=len(WALLET_TYPES), thread_name_prefix="dbot-wallets") as pool:
        futures = {
            t: pool.submit(contextvars.copy_context().run, dispatcher.client.get_wallets, t, q.page, q.size)
            for t in WALLET_TYPES
        }
        for t, fut in futures.items():
            try:
                outcomes[t] = fut.result()
            except requests.RequestException as e:
                outcomes[t] = e
    return outcomes


def get_user_wallets(dispatcher: Dispatcher, q: WalletQuery) -> ToolResult:
    operation = "Query user wallets"
    if q.type:
        env = dispatcher.client.get_wallets(q.type, q.page, q.size)
        if env.err:
            return dispatcher.api_failure(env, operation, q.to_payload())
        return format_wallets(_wallets_of(env), q.type, env.docs), "ok"

    outcomes = _query_all_wallet_types(dispatcher, q)
    solana, evm = outcomes["solana"], outcomes["evm"]
    echo = {"type": "all", "page": q.page, "size": q.size}

    if _failed(solana) and _failed(evm):
        for outcome in (solana, evm):
            if isinstance(outcome, ApiEnvelope):
                return dispatcher.api_failure(outcome, operation, echo)
        return dispatcher.transport_failure(solana, operation, echo)

    for t, outcome in outcomes.items():
        if _failed(outcome):
            reason = str(outcome) if isinstance(outcome, Exception) else "api_error"
            log_event(
                "wallet_query_partial_failure",
                ctx=get_current_context() or build_log_context(tool="get_user_wallets"),
                data={"failed_type": t, "reason": reason},
                level="warn",
            )

    docs = next(o.docs for o in (solana, evm) if not _failed(o))
    return format_all_wallets(_wallets_of(solana), _wallets_of(evm), docs), "ok"


def _render_token_security(q: TokenSecurityQuery, env: ApiEnvelope) -> str:
    return format_token_security(env.res, q.chain)


WALLET_TOOL = ToolSpec(
    name="get_user_wallets",
    description=(
        "Query user's wallets for a specific chain type. If no type is specified, it will query all types "
        "(solana and evm). The tool returns formatted data in English, but you should present the results "
        "to the user in their preferred language. Please print details."
    ),
    schema=WalletQuery,
    operation="Query user wallets",
    run=get_user_wallets,
)

TOKEN_SECURITY_TOOL = ToolSpec(
    name="get_token_security_info",
    description=(
        "Get token security information and pool safety details. Call this before making any trade to check "
        "token security factors; if unsafe factors are detected, warn the user instead of proceeding with "
        "other trading tools. Very small prices are shown in subscript notation (e.g. $0.0₅132)."
    ),
    schema=TokenSecurityQuery,
    operation="Query token security info",
    call=lambda client, q: client.get_token_security_info(q),
    render=_render_token_security,
)

ACCOUNT_TOOLS = (WALLET_TOOL, TOKEN_SECURITY_TOOL)
