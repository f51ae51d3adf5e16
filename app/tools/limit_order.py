"""
Limit orders: buy or sell once a token's USD price crosses a trigger.
"""

from __future__ import annotations

from typing import Any, Dict, List

from app.tools.account import ACCOUNT_TOOLS
from app.tools.formatting import enabled_label, format_percent, format_timestamp, yes_no
from app.tools.registry import ToolSpec
from execution.models import ApiEnvelope
from execution.schemas import (
    CreateLimitOrders,
    DeleteAllLimitOrders,
    DeleteLimitOrders,
    DeleteOrder,
    EditLimitOrder,
    LimitOrdersQuery,
    SwitchLimitOrder,
)

SOURCE_LABELS = {
    "normal": "Manually created limit orders",
    "pnl_for_follow": "Take profit/stop loss orders created by following",
    "pnl_for_swap": "Take profit/stop loss orders created by quick swap",
}


def render_created(req: CreateLimitOrders, env: ApiEnvelope) -> str:
    res = env.res if isinstance(env.res, dict) else {}
    ids = res.get("ids") if isinstance(res.get("ids"), list) else []

    blocks = []
    for i, setting in enumerate(req.settings):
        order_id = ids[i] if i < len(ids) and ids[i] else "Unknown"
        blocks.append(
            f"Order ID: {order_id}\n"
            f"- Trade Type: {setting.trade_type}\n"
            f"- Trigger Price: ${setting.trigger_price_usd}\n"
            f"- Trigger Direction: {setting.trigger_direction}\n"
            f"- Trade Amount: {setting.currency_amount_ui:g}\n"
            f"- Status: {enabled_label(setting.enabled)}"
        )

    return (
        "✅ Limit orders created successfully!\n\n"
        f"Created {len(req.settings)} limit orders\n"
        f"Chain: {req.chain}\n"
        f"Token: {req.pair}\n\n"
        + "\n\n".join(blocks)
        + f"\n\nDocs: {env.docs}"
    )


def render_edited(req: EditLimitOrder, env: ApiEnvelope) -> str:
    return f"✅ Limit order edited successfully!\n\nOrder ID: {req.id}\n\nDocs: {env.docs}"


def render_switched(req: SwitchLimitOrder, env: ApiEnvelope) -> str:
    return (
        "✅ Limit order status switched successfully!\n\n"
        f"Order ID: {req.id}\n"
        f"New Status: {enabled_label(req.enabled)}\n\n"
        f"Docs: {env.docs}"
    )


def render_deleted(req: DeleteOrder, env: ApiEnvelope) -> str:
    return f"✅ Limit order deleted successfully!\n\nOrder ID: {req.id}\n\nDocs: {env.docs}"


def render_deleted_many(req: DeleteLimitOrders, env: ApiEnvelope) -> str:
    return f"✅ Batch delete limit orders successful!\n\nOrder IDs: {', '.join(req.ids)}\n\nDocs: {env.docs}"


def render_deleted_all(req: DeleteAllLimitOrders, env: ApiEnvelope) -> str:
    return f"✅ Delete limit orders successful!\n\nDeleted Type: {SOURCE_LABELS[req.source]}\n\nDocs: {env.docs}"


def _order_rows(res: Any) -> List[Dict[str, Any]]:
    return [r for r in res if isinstance(r, dict)] if isinstance(res, list) else []


def render_orders(q: LimitOrdersQuery, env: ApiEnvelope) -> str:
    orders = _order_rows(env.res)
    text = f"📊 Limit Orders List ({len(orders)} orders total):\n\n"
    for i, order in enumerate(orders, start=1):
        text += f"{i}. Order ID: {order.get('id')}\n"
        text += f"   Chain: {order.get('chain')}\n"
        text += f"   Trading Pair: {order.get('pair')}\n"
        text += f"   Pair Type: {order.get('pairType')}\n"
        text += f"   Trade Type: {order.get('tradeType')}\n"
        text += f"   State: {order.get('state')}\n"
        text += f"   Enabled: {yes_no(order.get('enabled'))}\n"
        text += f"   Trigger Price: ${order.get('triggerPriceUsd')}\n"
        text += f"   Trigger Direction: {order.get('triggerDirection')}\n"
        text += f"   Amount: {order.get('currencyAmountUI')}\n"
        text += f"   Wallet: {order.get('walletName')} ({order.get('walletAddress')})\n"
        text += f"   Group ID: {order.get('groupId')}\n"
        text += f"   Expiry Time: {format_timestamp(order.get('expireAt'))}\n"
        text += f"   Max Slippage: {format_percent(order.get('maxSlippage'))}\n"
        text += f"   Jito Enabled: {yes_no(order.get('jitoEnabled'))}\n"
        if order.get("jitoEnabled"):
            text += f"   Jito Fee: {order.get('jitoTip')} SOL\n"
        if order.get("errorMessage"):
            text += f"   Error Message: {order['errorMessage']}\n"
        token = order.get("tokenInfo")
        if token:
            text += f"   Token Name: {token.get('name')} ({token.get('symbol')})\n"
        text += "\n"
    if not orders:
        text += "No limit orders\n\n"
    return text + f"Docs: {env.docs}"


LIMIT_ORDER_TOOLS = (
    ToolSpec(
        name="create_limit_order",
        description=(
            "Create one or more limit orders for a token. Each settings entry has tradeType, triggerPriceUsd, "
            "triggerDirection (up/down) and currencyAmountUI (quote amount for buys, token ratio for sells). "
            "Unspecified fee, slippage and expiry settings fall back to the operator's configured defaults."
        ),
        schema=CreateLimitOrders,
        operation="Create limit orders",
        call=lambda client, req: client.create_limit_orders(req),
        render=render_created,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="edit_limit_order",
        description="Edit a limit order. Only the given fields change.",
        schema=EditLimitOrder,
        operation="Edit limit order",
        call=lambda client, req: client.edit_limit_order(req),
        render=render_edited,
    ),
    ToolSpec(
        name="switch_limit_order",
        description="Enable or disable a limit order.",
        schema=SwitchLimitOrder,
        operation="Switch limit order status",
        call=lambda client, req: client.switch_limit_order(req),
        render=render_switched,
    ),
    ToolSpec(
        name="delete_limit_order",
        description="Delete one limit order.",
        schema=DeleteOrder,
        operation="Delete limit order",
        call=lambda client, req: client.delete_limit_order(req.id),
        render=render_deleted,
    ),
    ToolSpec(
        name="delete_limit_orders",
        description="Delete several limit orders by ID.",
        schema=DeleteLimitOrders,
        operation="Batch delete limit orders",
        call=lambda client, req: client.delete_limit_orders(req),
        render=render_deleted_many,
    ),
    ToolSpec(
        name="delete_all_limit_order",
        description=(
            "Delete all limit orders of one source: normal (manually created, default), pnl_for_follow "
            "(created by copy trading) or pnl_for_swap (created by fast swap)."
        ),
        schema=DeleteAllLimitOrders,
        operation="Delete all limit orders",
        call=lambda client, req: client.delete_all_limit_orders(req),
        render=render_deleted_all,
    ),
    ToolSpec(
        name="limit_orders",
        description="List limit orders (page size up to 20), filtered by state, chain, pair, token or group.",
        schema=LimitOrdersQuery,
        operation="Query limit orders",
        call=lambda client, q: client.get_limit_orders(q),
        render=render_orders,
    ),
) + ACCOUNT_TOOLS
