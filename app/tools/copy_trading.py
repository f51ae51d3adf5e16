"""
Copy trading: follow target wallets' buys and sells with per-task buy/sell settings.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from app.tools.account import ACCOUNT_TOOLS
from app.tools.formatting import enabled_label, yes_no
from app.tools.registry import ToolSpec
from execution.models import ApiEnvelope
from execution.schemas import (
    CopyTradingTasksQuery,
    CreateCopyTrading,
    DeleteCopyTrading,
    EditCopyTrading,
    SwitchCopyTrading,
)


def _settings_block(req: CreateCopyTrading | EditCopyTrading) -> str:
    buy, sell = req.buy_settings, req.sell_settings
    return (
        "🛒 Buy Settings:\n"
        f"- Enabled: {yes_no(buy.enabled)}\n"
        f"- Max Buy Amount: {buy.max_buy_amount_ui}\n"
        f"- Buy Amount Type: {buy.buy_amount_type}\n\n"
        "💰 Sell Settings:\n"
        f"- Enabled: {yes_no(sell.enabled)}\n"
        f"- Mode: {sell.mode}"
    )


def _task_block(task_id: str, req: CreateCopyTrading | EditCopyTrading) -> str:
    text = "📋 Task Information:\n"
    text += f"- Task ID: {task_id}\n"
    text += f"- Task Name: {req.name}\n"
    text += f"- Chain: {req.chain}\n"
    text += f"- Target Addresses: {', '.join(req.target_ids)}\n"
    text += f"- Status: {enabled_label(req.enabled)}\n"
    text += f"- Wallet ID: {req.wallet_id}\n"
    if req.group_id:
        text += f"- Group ID: {req.group_id}\n"
    return text


def render_created(req: CreateCopyTrading, env: ApiEnvelope) -> str:
    res = env.res if isinstance(env.res, dict) else {}
    task_id = str(res.get("id") or "Unknown")
    return (
        "✅ Copy trading task created successfully!\n\n"
        f"{_task_block(task_id, req)}\n"
        f"{_settings_block(req)}\n\n"
        f"Docs: {env.docs}"
    )


def render_edited(req: EditCopyTrading, env: ApiEnvelope) -> str:
    return (
        "✅ Copy trading task edited successfully!\n\n"
        f"{_task_block(req.id, req)}\n"
        f"{_settings_block(req)}\n\n"
        f"Docs: {env.docs}"
    )


def render_switched(req: SwitchCopyTrading, env: ApiEnvelope) -> str:
    text = "✅ Copy trading task status switched successfully!\n\n"
    text += "📋 Task Information:\n"
    text += f"- Task ID: {req.id}\n"
    text += f"- New Status: {enabled_label(req.enabled)}\n"
    if req.close_pnl_order:
        text += "- Also closed all take-profit/stop-loss orders\n"
    return text + f"\nDocs: {env.docs}"


def render_deleted(req: DeleteCopyTrading, env: ApiEnvelope) -> str:
    pnl = (
        "- Also deleted all associated take-profit/stop-loss orders"
        if req.delete_pnl_order
        else "- Kept associated take-profit/stop-loss orders"
    )
    return (
        "✅ Copy trading task deleted successfully!\n\n"
        "📋 Deletion Information:\n"
        f"- Task ID: {req.id}\n"
        f"{pnl}\n\n"
        f"Docs: {env.docs}"
    )


def _task_rows(res: Any) -> List[Dict[str, Any]]:
    if isinstance(res, dict):
        res = res.get("list") or res.get("tasks") or []
    return [t for t in res if isinstance(t, dict)] if isinstance(res, list) else []


def render_tasks(q: CopyTradingTasksQuery, env: ApiEnvelope) -> str:
    tasks = _task_rows(env.res)
    text = f"📊 Copy Trading Task List ({len(tasks)} tasks, page {q.page + 1}):\n\n"
    if not tasks:
        text += "No copy trading tasks found.\n"
    for i, task in enumerate(tasks, start=1):
        buy = task.get("buySettings") or {}
        sell = task.get("sellSettings") or {}
        text += f"{i}. Task ID: {task.get('id')}\n"
        text += f"   Name: {task.get('name')}\n"
        text += f"   Chain: {task.get('chain')}\n"
        text += f"   Status: {enabled_label(task.get('enabled'))}\n"
        text += f"   Target Addresses: {', '.join(task.get('targetIds') or [])}\n"
        text += f"   Wallet ID: {task.get('walletId')}\n"
        if buy:
            text += f"   Buy: {yes_no(buy.get('enabled'))}, max {buy.get('maxBuyAmountUI')} ({buy.get('buyAmountType')})\n"
        if sell:
            text += f"   Sell: {yes_no(sell.get('enabled'))}, mode {sell.get('mode')}\n"
        text += "\n"
    # raw task list follows the summary
    text += f"Raw Response: {json.dumps(env.res, indent=2, ensure_ascii=False, default=str)}\n\n"
    return text + f"Docs: {env.docs}"


COPY_TRADING_TOOLS = (
    ToolSpec(
        name="create_copy_trading",
        description=(
            "Create a copy trading task that follows up to 10 target wallets. buySettings.maxBuyAmountUI is "
            "required; stop-earn/stop-loss groups hold at most 6 entries and the trailing stop group at most 1. "
            "Group pricePercent and amountPercent are ratios in 0-1, so a stop-earn above +100% is not accepted."
        ),
        schema=CreateCopyTrading,
        operation="Create copy trading task",
        call=lambda client, req: client.create_copy_trading(req),
        render=render_created,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="edit_copy_trading",
        description=(
            "Edit a copy trading task. The full task definition (id, enabled, chain, settings) is required. "
            "Stop-earn/stop-loss pricePercent is a ratio in 0-1."
        ),
        schema=EditCopyTrading,
        operation="Edit copy trading task",
        call=lambda client, req: client.edit_copy_trading(req),
        render=render_edited,
        wallet_field="walletId",
    ),
    ToolSpec(
        name="switch_copy_trading",
        description=(
            "Enable or disable a copy trading task. closePnlOrder also closes the take-profit/stop-loss tasks "
            "it created (effective when disabling)."
        ),
        schema=SwitchCopyTrading,
        operation="Switch copy trading task status",
        call=lambda client, req: client.switch_copy_trading(req),
        render=render_switched,
    ),
    ToolSpec(
        name="delete_copy_trading",
        description=(
            "Delete a copy trading task. deletePnlOrder also deletes the take-profit/stop-loss tasks it created."
        ),
        schema=DeleteCopyTrading,
        operation="Delete copy trading task",
        call=lambda client, req: client.delete_copy_trading(req),
        render=render_deleted,
    ),
    ToolSpec(
        name="get_copy_trading_tasks",
        description="Get the list of copy trading tasks (page size up to 100).",
        schema=CopyTradingTasksQuery,
        operation="Get copy trading task list",
        call=lambda client, q: client.get_copy_trading_tasks(q),
        render=render_tasks,
    ),
) + ACCOUNT_TOOLS
