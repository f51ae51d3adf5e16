"""
Fast swap: immediate market buys/sells, their order status and history, and the
take-profit/stop-loss tasks they spawn.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from app.tools.account import ACCOUNT_TOOLS
from app.tools.formatting import format_percent, format_timestamp
from app.tools.registry import ToolSpec
from execution.models import ApiEnvelope
from execution.schemas import (
    CreateFastSwap,
    CreateFastSwaps,
    DeleteOrder,
    EditLimitOrder,
    SwapOrderInfoQuery,
    SwapRecordsQuery,
    SwapTpslTasksQuery,
    SwitchLimitOrder,
)


def _rows(res: Any) -> List[Dict[str, Any]]:
    return [r for r in res if isinstance(r, dict)] if isinstance(res, list) else []


def render_swap_created(req: CreateFastSwap, env: ApiEnvelope) -> str:
    res = env.res if isinstance(env.res, dict) else {}
    return (
        "✅ Trade order created successfully!\n\n"
        f"Order ID: {res.get('id') or 'Unknown'}\n"
        f"Chain: {req.chain}\n"
        f"Transaction Type: {req.type}\n"
        f"Token: {req.pair}\n\n"
        "⚠️ Note: Please immediately use get_swap_order_info tool with order ID to check order status "
        "and transaction result.\n\n"
        f"Documentation: {env.docs}"
    )


def render_swaps_created(req: CreateFastSwaps, env: ApiEnvelope) -> str:
    ids = ", ".join(str(r.get("id") or "Unknown") for r in _rows(env.res))
    return (
        "✅ Batch trade orders created successfully!\n\n"
        f"Order ID List: {ids}\n"
        f"Chain: {req.chain}\n"
        f"Trade Type: {req.type}\n"
        f"Token: {req.pair}\n\n"
        "⚠️ Note: Please use get_swap_order_info tool with order IDs immediately to check order status "
        "and transaction results.\n\n"
        f"Docs: {env.docs}"
    )


def render_order_info(q: SwapOrderInfoQuery, env: ApiEnvelope) -> str:
    orders = _rows(env.res)
    text = f"📊 Order Information Query Results ({len(orders)} orders in total):\n\n"
    for i, order in enumerate(orders, start=1):
        text += f"{i}. Order ID: {order.get('id')}\n"
        text += f"   Status: {order.get('state')}\n"
        text += f"   Chain: {order.get('chain')}\n"
        text += f"   Type: {order.get('tradeType')}\n"
        if order.get("txPriceUsd"):
            text += f"   Price: ${order['txPriceUsd']}\n"
        if order.get("swapHash"):
            text += f"   Transaction Hash: {order['swapHash']}\n"
        if order.get("errorCode") or order.get("errorMessage"):
            text += f"   Error: {order.get('errorCode')} - {order.get('errorMessage')}\n"
        text += "\n"
    return text + f"\nDocs: {env.docs}"


def _ui_amount(side: Dict[str, Any]) -> float:
    info = side.get("info") or {}
    return float(side.get("amount") or 0) / 10 ** int(info.get("decimals") or 0)


def render_records(q: SwapRecordsQuery, env: ApiEnvelope) -> str:
    records = _rows(env.res)
    text = f"📜 Fast Buy/Sell Records ({len(records)} records in total):\n\n"
    if not records:
        text += "No records found.\n"
    for i, record in enumerate(records, start=1):
        text += f"[{i}] {format_timestamp(record.get('createAt'))}\n"
        text += f"  Order ID: {record.get('id')}\n"
        text += f"  Status: {record.get('state')} | Chain: {record.get('chain')} | Type: {record.get('type')}\n"
        text += f"  Trading Pair: {record.get('pair')}\n"
        send, receive = record.get("send") or {}, record.get("receive") or {}
        if send.get("info") and receive.get("info"):
            text += (
                f"  Trade: {_ui_amount(send):.2f} {send['info'].get('symbol')} -> "
                f"{_ui_amount(receive):.2f} {receive['info'].get('symbol')}\n"
            )
        if record.get("errorMessage"):
            text += f"  Error: {record['errorMessage']}\n"
        text += "\n"
    return text + f"\nDocs: {env.docs}"


def render_tpsl_tasks(q: SwapTpslTasksQuery, env: ApiEnvelope) -> str:
    # The endpoint answers with a bare task array, not a paginated object.
    tasks = _rows(env.res)
    text = f"📈 Take Profit/Stop Loss Task List ({len(tasks)} tasks in total, showing {len(tasks)}):\n\n"
    for i, task in enumerate(tasks, start=1):
        direction = "When price rises" if task.get("triggerDirection") == "up" else "When price falls"
        text += f"{i}. Task ID: {task.get('id')}\n"
        text += f"   Status: {task.get('state')} {'(Enabled)' if task.get('enabled') else '(Disabled)'}\n"
        text += f"   Chain: {task.get('chain')}\n"
        text += f"   Token: {task.get('pair')}\n"
        text += f"   Trade Type: {task.get('tradeType')}\n"
        text += f"   Trigger Direction: {direction}\n"
        text += f"   Trigger Price: ${task.get('triggerPriceUsd')}\n"
        text += f"   Take Profit/Stop Loss Percentage: {format_percent(task.get('triggerPercent'), 2)}\n"
        if task.get("basePriceUsd"):
            text += f"   Buy Price: ${task['basePriceUsd']}\n"
        if task.get("txPriceUsd"):
            text += f"   Transaction Price: ${task['txPriceUsd']}\n"
        if task.get("walletName"):
            text += f"   Wallet: {task['walletName']}\n"
        text += f"   Source: {'Fast Buy/Sell' if task.get('source') == 'swap_order' else 'Copy Trade'}\n"
        if task.get("errorCode") or task.get("errorMessage"):
            text += f"   Error: {task.get('errorCode')} - {task.get('errorMessage')}\n"
        text += "\n"
    if not tasks:
        text += "No take profit/stop loss tasks\n\n"
    return text + f"\nDocs: {env.docs}"


def _render_tpsl_change(verb: str):
    def render(req: Any, env: ApiEnvelope) -> str:
        res = json.dumps(env.res, indent=2, ensure_ascii=False, default=str)
        return f"✅ Successfully {verb} take profit/stop loss order: {res}\n\nPlease print result status."

    return render


FAST_SWAP_TOOLS = (
    ToolSpec(
        name="create_fast_swap",
        description=(
            "Create a fast buy or sell order. For buys amountOrPercent is the quote amount (e.g. 0.1 SOL); for "
            "sells it is the ratio of holdings (0-1). Optional take-profit/stop-loss groups create follow-up "
            "tasks; their pricePercent and amountPercent are ratios in 0-1, so a take-profit above +100% is not "
            "accepted. Use get_swap_order_info with the returned order ID to check the result."
        ),
        schema=CreateFastSwap,
        operation="Create fast trade order",
        call=lambda client, req: client.create_fast_swap(req),
        render=render_swap_created,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="create_fast_swaps",
        description=(
            "Create the same fast buy or sell order across up to 5 wallets at once. Buys draw a random amount "
            "between minAmount and maxAmount per wallet; sells use sellPercent. Take-profit/stop-loss group "
            "pricePercent and amountPercent are ratios in 0-1."
        ),
        schema=CreateFastSwaps,
        operation="Create batch fast trade orders",
        call=lambda client, req: client.create_fast_swaps(req),
        render=render_swaps_created,
        wallet_field="walletIdList",
    ),
    ToolSpec(
        name="get_swap_order_info",
        description="Query status of one or more fast swap orders. ids is a comma-separated list of order IDs.",
        schema=SwapOrderInfoQuery,
        operation="Query order information",
        call=lambda client, q: client.get_swap_order_info(q.order_ids),
        render=render_order_info,
    ),
    ToolSpec(
        name="get_swap_records",
        description="Query fast buy/sell history (page size up to 20), optionally filtered by chain.",
        schema=SwapRecordsQuery,
        operation="Query fast buy/sell records",
        call=lambda client, q: client.get_swap_records(q),
        render=render_records,
    ),
    ToolSpec(
        name="swap_tpsl_tasks",
        description="List take-profit/stop-loss tasks created by fast swaps, filtered by state, chain or token.",
        schema=SwapTpslTasksQuery,
        operation="Query take profit/stop loss tasks",
        call=lambda client, q: client.get_swap_tpsl_tasks(q),
        render=render_tpsl_tasks,
    ),
    ToolSpec(
        name="edit_fastswap_tpsl_order",
        description="Edit a take-profit/stop-loss order created by a fast swap. Only the given fields change.",
        schema=EditLimitOrder,
        operation="Edit take profit/stop loss order",
        call=lambda client, req: client.edit_limit_order(req),
        render=_render_tpsl_change("edited"),
    ),
    ToolSpec(
        name="enable_fastswap_tpsl_order",
        description="Enable or disable a take-profit/stop-loss order created by a fast swap.",
        schema=SwitchLimitOrder,
        operation="Enable/Disable take profit/stop loss order",
        call=lambda client, req: client.switch_limit_order(req),
        render=_render_tpsl_change("enabled/disabled"),
    ),
    ToolSpec(
        name="delete_fastswap_tpsl_order",
        description="Delete a take-profit/stop-loss order created by a fast swap.",
        schema=DeleteOrder,
        operation="Delete take profit/stop loss order",
        call=lambda client, req: client.delete_limit_order(req.id),
        render=_render_tpsl_change("deleted"),
    ),
) + ACCOUNT_TOOLS
