from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional

import requests

from app.core.config import Settings
from common.errors import ConfigurationError
from execution.models import ApiEnvelope, normalize_swap_orders
from execution.schemas import (
    ConditionalOrdersQuery,
    CopyTradingTasksQuery,
    CreateCopyTrading,
    CreateDevOrder,
    CreateFastSwap,
    CreateFastSwaps,
    CreateLimitOrders,
    CreateMigrateOrder,
    DeleteAllLimitOrders,
    DeleteCopyTrading,
    DeleteLimitOrders,
    EditCopyTrading,
    EditLimitOrder,
    LimitOrdersQuery,
    SwapRecordsQuery,
    SwapTpslTasksQuery,
    SwitchCopyTrading,
    SwitchLimitOrder,
    ToggleOrder,
    TokenSecurityQuery,
    UpdateDevOrder,
    UpdateMigrateOrder,
)
from observability.logging import build_log_context, get_current_context, log_event


def _query(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if params is None:
        return None
    out: Dict[str, Any] = {}
    for k, v in params.items():
        if v is None:
            continue
        # The API expects JSON-style booleans in query strings.
        out[k] = ("true" if v else "false") if isinstance(v, bool) else v
    return out


class DbotClient:
    """
    Thin client for the DBot automation API.

    One authenticated `requests.Session` per adapter. Every method maps to one
    endpoint and returns the parsed `ApiEnvelope`; non-2xx responses and
    network failures raise `requests.RequestException`. No retries.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        if not settings.api_key:
            raise ConfigurationError(
                "Please set the DBOT_API_KEY environment variable",
                {"env": "DBOT_API_KEY"},
            )
        self.base_url = settings.api_base_url.rstrip("/")
        self.security_url = settings.security_api_url
        self.timeout = settings.request_timeout_sec
        self._session = session or requests.Session()
        self._session.headers.update({"X-API-KEY": settings.api_key, "Content-Type": "application/json"})

    def _request(
        self,
        method: str,
        path: str,
        *,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        url: Optional[str] = None,
    ) -> ApiEnvelope:
        target = url or f"{self.base_url}{path}"
        ctx = get_current_context() or build_log_context(tool="dbot_client")
        log_event("api_request", ctx=ctx, data={"method": method, "url": target}, level="debug")
        resp = self._session.request(method, target, json=body, params=_query(params), timeout=self.timeout)
        resp.raise_for_status()
        return ApiEnvelope.from_json(resp.json())

    # --- conditional orders ---

    def create_migrate_order(self, req: CreateMigrateOrder) -> ApiEnvelope:
        return self._request("POST", "/automation/migrate_order", body=req.to_payload())

    def update_migrate_order(self, req: UpdateMigrateOrder) -> ApiEnvelope:
        return self._request("PATCH", "/automation/migrate_order", body=req.to_payload())

    def toggle_migrate_order(self, req: ToggleOrder) -> ApiEnvelope:
        return self._request("PATCH", "/automation/migrate_order", body=req.to_payload())

    def delete_migrate_order(self, order_id: str) -> ApiEnvelope:
        return self._request("DELETE", f"/automation/migrate_order/{order_id}")

    def get_migrate_orders(self, query: ConditionalOrdersQuery) -> ApiEnvelope:
        return self._request("GET", "/automation/migrate_orders", params=query.to_payload())

    def create_dev_order(self, req: CreateDevOrder) -> ApiEnvelope:
        return self._request("POST", "/automation/dev_order", body=req.to_payload())

    def update_dev_order(self, req: UpdateDevOrder) -> ApiEnvelope:
        return self._request("PATCH", "/automation/dev_order", body=req.to_payload())

    def toggle_dev_order(self, req: ToggleOrder) -> ApiEnvelope:
        return self._request("PATCH", "/automation/dev_order", body=req.to_payload())

    def delete_dev_order(self, order_id: str) -> ApiEnvelope:
        return self._request("DELETE", f"/automation/dev_order/{order_id}")

    def get_dev_orders(self, query: ConditionalOrdersQuery) -> ApiEnvelope:
        return self._request("GET", "/automation/dev_orders", params=query.to_payload())

    # --- copy trading ---

    def create_copy_trading(self, req: CreateCopyTrading) -> ApiEnvelope:
        return self._request("POST", "/automation/follow_order", body=req.to_payload())

    def edit_copy_trading(self, req: EditCopyTrading) -> ApiEnvelope:
        return self._request("PATCH", "/automation/follow_order", body=req.to_payload())

    def switch_copy_trading(self, req: SwitchCopyTrading) -> ApiEnvelope:
        return self._request("PATCH", "/automation/follow_order", body=req.to_payload())

    def delete_copy_trading(self, req: DeleteCopyTrading) -> ApiEnvelope:
        return self._request(
            "DELETE",
            f"/automation/follow_order/{req.id}",
            params={"deletePnlOrder": req.delete_pnl_order},
        )

    def get_copy_trading_tasks(self, query: CopyTradingTasksQuery) -> ApiEnvelope:
        return self._request("GET", "/automation/follow_orders", params=query.to_payload())

    # --- fast swap ---

    def create_fast_swap(self, req: CreateFastSwap) -> ApiEnvelope:
        return self._request("POST", "/automation/swap_order", body=req.to_payload())

    def create_fast_swaps(self, req: CreateFastSwaps) -> ApiEnvelope:
        return self._request("POST", "/automation/swap_orders", body=req.to_payload())

    def get_swap_order_info(self, order_ids: List[str]) -> ApiEnvelope:
        env = self._request("GET", "/automation/swap_orders", params={"ids": ",".join(order_ids)})
        if isinstance(env.res, list):
            return replace(env, res=normalize_swap_orders(env.res))
        return env

    def get_swap_tpsl_tasks(self, query: SwapTpslTasksQuery) -> ApiEnvelope:
        return self._request("GET", "/automation/pnl_orders_from_swap_order", params=query.to_payload())

    def get_swap_records(self, query: SwapRecordsQuery) -> ApiEnvelope:
        return self._request("GET", "/account/swap_trades", params=query.to_payload())

    # --- limit orders ---

    def create_limit_orders(self, req: CreateLimitOrders) -> ApiEnvelope:
        return self._request("POST", "/automation/limit_orders", body=req.to_payload())

    def edit_limit_order(self, req: EditLimitOrder) -> ApiEnvelope:
        return self._request("PATCH", "/automation/limit_order", body=req.to_payload())

    def switch_limit_order(self, req: SwitchLimitOrder) -> ApiEnvelope:
        return self._request("PATCH", "/automation/limit_order", body=req.to_payload())

    def delete_limit_order(self, order_id: str) -> ApiEnvelope:
        return self._request("DELETE", f"/automation/limit_order/{order_id}")

    def delete_limit_orders(self, req: DeleteLimitOrders) -> ApiEnvelope:
        return self._request("POST", "/automation/limit_order/delete_many", body=req.to_payload())

    def delete_all_limit_orders(self, req: DeleteAllLimitOrders) -> ApiEnvelope:
        return self._request("DELETE", "/automation/limit_order/delete_all", params={"source": req.source})

    def get_limit_orders(self, query: LimitOrdersQuery) -> ApiEnvelope:
        # The list endpoint wants these keys present even when empty.
        params: Dict[str, Any] = {
            "page": query.page,
            "size": query.size,
            "chain": query.chain or "",
            "state": query.state,
            "groupId": query.group_id or "",
            "token": query.token or "",
            "sortBy": query.sort_by or "",
            "sort": query.sort,
        }
        if query.pair:
            params["pair"] = query.pair
        if query.enabled is not None:
            params["enabled"] = query.enabled
        return self._request("GET", "/automation/limit_orders", params=params)

    # --- account / market info ---

    def get_wallets(self, wallet_type: Optional[str] = None, page: int = 0, size: int = 20) -> ApiEnvelope:
        params = {"type": wallet_type or "solana", "page": page, "size": size}
        return self._request("GET", "/account/wallets", params=params)

    def get_token_security_info(self, query: TokenSecurityQuery) -> ApiEnvelope:
        return self._request(
            "GET",
            "/dex/poolinfo",
            params={"chain": query.chain or "solana", "pair": query.pair},
            url=self.security_url,
        )
