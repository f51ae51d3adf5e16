"""
Conditional orders: sell when a token migrates off Pump ("sell on open") and
sell when the token's developer sells ("follow dev sell").
"""

from __future__ import annotations

from typing import Any, Dict, List

from app.tools.account import ACCOUNT_TOOLS
from app.tools.formatting import format_percent, yes_no
from app.tools.registry import ToolSpec
from execution.models import ApiEnvelope
from execution.schemas import (
    ConditionalOrdersQuery,
    CreateDevOrder,
    CreateMigrateOrder,
    DeleteOrder,
    ToggleOrder,
    UpdateDevOrder,
    UpdateMigrateOrder,
)

_MIGRATE = "Sell-on-open task"
_DEV = "Follow-dev-sell task"


def _res_id(env: ApiEnvelope) -> str:
    res = env.res if isinstance(env.res, dict) else {}
    return str(res.get("id") or "Unknown")


def render_migrate_created(req: CreateMigrateOrder, env: ApiEnvelope) -> str:
    return (
        f"✅ {_MIGRATE} created successfully!\n\n"
        f"Task ID: {_res_id(env)}\n"
        f"Chain: {req.chain}\n"
        f"Token: {req.pair}\n"
        f"Sell Ratio: {format_percent(req.amount_or_percent)}\n\n"
        "💡 The system will automatically execute the sell when the token migrates from Pump to Raydium.\n\n"
        f"Docs: {env.docs}"
    )


def render_dev_created(req: CreateDevOrder, env: ApiEnvelope) -> str:
    trigger = format_percent(req.min_dev_sell_percent)
    sell = format_percent(req.amount_or_percent)
    return (
        f"✅ {_DEV} created successfully!\n\n"
        f"Task ID: {_res_id(env)}\n"
        f"Chain: {req.chain}\n"
        f"Token: {req.pair}\n"
        f"Trigger Ratio: {trigger}\n"
        f"Sell Ratio: {sell}\n\n"
        f"💡 When the developer sells over {trigger}, the system will automatically sell {sell} of your tokens.\n\n"
        f"Docs: {env.docs}"
    )


def render_migrate_updated(req: UpdateMigrateOrder, env: ApiEnvelope) -> str:
    return (
        f"✅ {_MIGRATE} edited successfully!\n\n"
        f"Task ID: {req.id}\n"
        f"Chain: {req.chain}\n"
        f"Token: {req.pair}\n"
        f"Sell Ratio: {format_percent(req.amount_or_percent)}\n\n"
        f"Docs: {env.docs}"
    )


def render_dev_updated(req: UpdateDevOrder, env: ApiEnvelope) -> str:
    return (
        f"✅ {_DEV} edited successfully!\n\n"
        f"Task ID: {req.id}\n"
        f"Chain: {req.chain}\n"
        f"Token: {req.pair}\n"
        f"Trigger Ratio: {format_percent(req.min_dev_sell_percent)}\n"
        f"Sell Ratio: {format_percent(req.amount_or_percent)}\n\n"
        f"Docs: {env.docs}"
    )


def _render_toggled(kind: str):
    def render(req: ToggleOrder, env: ApiEnvelope) -> str:
        status = "Enabled" if req.enabled else "Disabled"
        return f"✅ {kind} status updated successfully!\n\nTask ID: {req.id}\nStatus: {status}\n\nDocs: {env.docs}"

    return render


def _render_deleted(kind: str):
    def render(req: DeleteOrder, env: ApiEnvelope) -> str:
        return f"✅ {kind} deleted successfully!\n\nTask ID: {req.id}\n\nDocs: {env.docs}"

    return render


def _order_rows(res: Any) -> List[Dict[str, Any]]:
    # The list endpoint answers either {orders, total, page, size} or a bare list.
    if isinstance(res, dict):
        rows = res.get("orders") or []
    else:
        rows = res or []
    return [r for r in rows if isinstance(r, dict)] if isinstance(rows, list) else []


def _render_orders(kind: str, *, with_trigger: bool):
    def render(q: ConditionalOrdersQuery, env: ApiEnvelope) -> str:
        orders = _order_rows(env.res)
        meta = env.res if isinstance(env.res, dict) else {}
        total = meta.get("total") or len(orders)
        page = meta.get("page") if meta.get("page") is not None else q.page
        size = meta.get("size") if meta.get("size") is not None else q.size

        text = f"✅ {kind} list retrieved successfully!\n\n"
        text += "📊 Statistics:\n"
        text += f"- Total tasks: {total}\n"
        text += f"- Current page: {int(page) + 1}\n"
        text += f"- Page size: {size}\n\n"

        if orders:
            text += "📋 Task List:\n"
            for i, order in enumerate(orders, start=1):
                text += f"\n{i}. Task ID: {order.get('id')}\n"
                text += f"   - Token: {order.get('pair')}\n"
                if with_trigger:
                    text += f"   - Trigger Ratio: {format_percent(order.get('minDevSellPercent'))}\n"
                text += f"   - Sell Ratio: {format_percent(order.get('amountOrPercent'))}\n"
                text += f"   - Status: {order.get('state') or 'unknown'}\n"
                text += f"   - Enabled: {yes_no(order.get('enabled'))}\n"
                if order.get("createdAt"):
                    text += f"   - Created At: {order['createdAt']}\n"
        else:
            text += f"📋 No {kind.lower()}s found.\n"

        return text + f"\n📚 Docs: {env.docs}"

    return render


_TRADE_PARAMS_NOTE = (
    " Unspecified fee, slippage, expiry, node and retry settings fall back to the operator's configured defaults."
)

CONDITIONAL_ORDER_TOOLS = (
    ToolSpec(
        name="create_migrate_order",
        description=(
            "Create a sell-on-open task: automatically sell a Pump token when it migrates to Raydium. "
            "amountOrPercent is the sell ratio (0-1)." + _TRADE_PARAMS_NOTE
        ),
        schema=CreateMigrateOrder,
        operation=f"Create {_MIGRATE.lower()}",
        call=lambda client, req: client.create_migrate_order(req),
        render=render_migrate_created,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="create_dev_order",
        description=(
            "Create a follow-dev-sell task: sell when the token developer sells more than minDevSellPercent "
            "of their holdings. amountOrPercent is the sell ratio (0-1)." + _TRADE_PARAMS_NOTE
        ),
        schema=CreateDevOrder,
        operation=f"Create {_DEV.lower()}",
        call=lambda client, req: client.create_dev_order(req),
        render=render_dev_created,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="update_migrate_order",
        description="Edit an existing sell-on-open task. All task parameters are sent as given.",
        schema=UpdateMigrateOrder,
        operation=f"Edit {_MIGRATE.lower()}",
        call=lambda client, req: client.update_migrate_order(req),
        render=render_migrate_updated,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="update_dev_order",
        description="Edit an existing follow-dev-sell task. All task parameters are sent as given.",
        schema=UpdateDevOrder,
        operation=f"Edit {_DEV.lower()}",
        call=lambda client, req: client.update_dev_order(req),
        render=render_dev_updated,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="toggle_migrate_order",
        description="Enable or disable a sell-on-open task.",
        schema=ToggleOrder,
        operation=f"Toggle {_MIGRATE.lower()}",
        call=lambda client, req: client.toggle_migrate_order(req),
        render=_render_toggled(_MIGRATE),
    ),
    ToolSpec(
        name="toggle_dev_order",
        description="Enable or disable a follow-dev-sell task.",
        schema=ToggleOrder,
        operation=f"Toggle {_DEV.lower()}",
        call=lambda client, req: client.toggle_dev_order(req),
        render=_render_toggled(_DEV),
    ),
    ToolSpec(
        name="delete_migrate_order",
        description="Delete a sell-on-open task.",
        schema=DeleteOrder,
        operation=f"Delete {_MIGRATE.lower()}",
        call=lambda client, req: client.delete_migrate_order(req.id),
        render=_render_deleted(_MIGRATE),
    ),
    ToolSpec(
        name="delete_dev_order",
        description="Delete a follow-dev-sell task.",
        schema=DeleteOrder,
        operation=f"Delete {_DEV.lower()}",
        call=lambda client, req: client.delete_dev_order(req.id),
        render=_render_deleted(_DEV),
    ),
    ToolSpec(
        name="get_migrate_orders",
        description="List sell-on-open tasks, optionally filtered by state (init/processing/done/fail/expired).",
        schema=ConditionalOrdersQuery,
        operation=f"Get {_MIGRATE.lower()} list",
        call=lambda client, q: client.get_migrate_orders(q),
        render=_render_orders(_MIGRATE, with_trigger=False),
    ),
    ToolSpec(
        name="get_dev_orders",
        description="List follow-dev-sell tasks, optionally filtered by state (init/processing/done/fail/expired).",
        schema=ConditionalOrdersQuery,
        operation=f"Get {_DEV.lower()} list",
        call=lambda client, q: client.get_dev_orders(q),
        render=_render_orders(_DEV, with_trigger=True),
    ),
) + ACCOUNT_TOOLS
