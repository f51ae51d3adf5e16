"""
Text rendering shared by every adapter.

All functions here are pure: they take already-fetched data and return the
text block handed back to the calling agent.
"""

from __future__ import annotations

import json
import re
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import requests

from app.core.config import DOCS_URL
from common.wallets import mask_wallet_id
from execution.models import ApiEnvelope

_SUBSCRIPT_DIGITS = "₀₁₂₃₄₅₆₇₈₉"
_SMALL_PRICE_RE = re.compile(r"^0\.(0*)([1-9]\d*)")

_NETWORK_SUGGESTIONS = (
    "- Check if the API key is correct.\n"
    "- Check if the network connection is stable.\n"
    "- Check if the parameter format is correct.\n"
    "- Check if the wallet ID is valid.\n"
)


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _subscript(n: int) -> str:
    return "".join(_SUBSCRIPT_DIGITS[int(d)] for d in str(n))


def format_price(price: float) -> str:
    """
    Compact USD price.

    >= 1 -> 2 decimals, >= 0.0001 -> 4 decimals, smaller prices use a
    subscript zero count: 0.00000132 -> $0.0₅132 (at most 4 significant digits).
    """
    p = float(price)
    if p >= 1:
        return f"${p:.2f}"
    if p >= 0.0001:
        return f"${p:.4f}"
    # str() first so the float's shortest repr is expanded, not its binary noise
    m = _SMALL_PRICE_RE.match(format(Decimal(str(p)), "f"))
    if not m or len(m.group(1)) >= 20:
        return f"${p:.2e}"
    zeros, digits = m.groups()
    # trailing zeros inside the 4 kept digits are dropped: 0.00001000 -> $0.0₄1, not $0.0₄1000
    significant = digits[:4].rstrip("0")
    return f"$0.0{_subscript(len(zeros))}{significant}"


def format_market_cap(mcap: float) -> str:
    m = float(mcap)
    if m >= 1_000_000_000:
        return f"${m / 1_000_000_000:.2f}B"
    if m >= 1_000_000:
        return f"${m / 1_000_000:.2f}M"
    if m >= 1_000:
        return f"${m / 1_000:.2f}K"
    return f"${m:.2f}"


def format_time_ago(timestamp_ms: float, now_ms: Optional[float] = None) -> str:
    """
    Age of an epoch-ms timestamp as "Xd Yh Zm".

    Zero days/hours are omitted; minutes are always shown when nothing else is.
    """
    now = int(time.time() * 1000) if now_ms is None else now_ms
    diff = max(0, int(now - timestamp_ms))
    days = diff // 86_400_000
    hours = (diff % 86_400_000) // 3_600_000
    minutes = (diff % 3_600_000) // 60_000

    parts: List[str] = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def mask_wallet_ids(request: Dict[str, Any]) -> Dict[str, Any]:
    safe = dict(request)
    if safe.get("walletId"):
        safe["walletId"] = mask_wallet_id(safe["walletId"])
    if isinstance(safe.get("walletIdList"), list):
        safe["walletIdList"] = [mask_wallet_id(w) for w in safe["walletIdList"]]
    return safe


def format_api_error(env: ApiEnvelope, operation: str, request: Optional[Dict[str, Any]] = None) -> str:
    text = f"❌ {operation} failed:\n\n"
    text += f"🔍 Error Status: {'Failed' if env.err else 'Unknown Error'}\n"
    if env.res:
        text += f"📄 API Response: {_to_json(env.res)}\n"
    if request:
        text += f"📋 Request Parameters: {_to_json(mask_wallet_ids(request))}\n"
    text += f"\n📚 Documentation: {env.docs or DOCS_URL}"
    return text


def _response_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def format_network_error(error: Exception, operation: str, request: Optional[Dict[str, Any]] = None) -> str:
    text = f"❌ {operation} failed:\n\n"
    resp = getattr(error, "response", None)
    if isinstance(error, requests.HTTPError) and resp is not None:
        text += f"🌐 HTTP Status: {resp.status_code} {resp.reason or ''}".rstrip() + "\n"
        text += f"📄 Error Response: {_to_json(_response_body(resp))}\n"
    elif isinstance(error, (requests.ConnectionError, requests.Timeout)):
        text += "🔌 Network Error: No response from the server, please check your network connection.\n"
        text += f"📡 Request Details: {error}\n"
    else:
        text += f"⚠️ Unknown Error: {error}\n"

    if request:
        text += f"📋 Request Parameters: {_to_json(mask_wallet_ids(request))}\n"

    text += "\n💡 Suggestions:\n" + _NETWORK_SUGGESTIONS
    return text


def _wallet_lines(wallets: Iterable[Dict[str, Any]]) -> str:
    out = ""
    for i, w in enumerate(wallets, start=1):
        out += f"{i}. Wallet ID: {w.get('id')}\n"
        out += f"   Name: {w.get('name')}\n"
        out += f"   Type: {w.get('type')}\n"
        out += f"   Address: {w.get('address')}\n\n"
    return out


def format_wallets(wallets: List[Dict[str, Any]], wallet_type: str, docs: str) -> str:
    text = f"💳 User Wallets Query Results ({len(wallets)} {wallet_type} wallets):\n\n"
    text += _wallet_lines(wallets) if wallets else "No wallets found\n"
    return text + f"\n📚 Documentation: {docs}"


def format_all_wallets(solana: List[Dict[str, Any]], evm: List[Dict[str, Any]], docs: str) -> str:
    total = len(solana) + len(evm)
    text = f"💳 User Wallets Query Results ({total} wallets total):\n\n"
    if not total:
        text += "No wallets found\n"
    if solana:
        text += f"🔶 Solana Wallets ({len(solana)}):\n" + _wallet_lines(solana)
    if evm:
        text += f"🔷 EVM Wallets ({len(evm)}):\n" + _wallet_lines(evm)
    return text + f"\n📚 Documentation: {docs}"


def format_token_security(info: Optional[Dict[str, Any]], chain: str, now_ms: Optional[float] = None) -> str:
    if not info:
        return "❌ Token information not found"

    token = info.get("tokenInfo") or {}
    currency = info.get("currencyInfo") or {}
    safety = info.get("poolSafetyInfo") or {}
    links = info.get("links") or {}
    symbol = token.get("symbol")
    quote = currency.get("symbol")
    reserve = float(safety.get("currencyReserveUI") or info.get("currencyReserve") or 0)
    top10 = float(safety.get("top10Percent") or 0)

    text = f"📌 {symbol}\n{token.get('contract')}\n\n"

    text += "⚖️ Trading\n"
    text += f"┣ Price: {format_price(info.get('tokenPriceUsd') or 0)}\n"
    text += f"┣ Market Cap: {format_market_cap(info.get('tokenMcUsd') or 0)}\n"
    text += f"┣ Token Created: {format_time_ago(info.get('tokenCreateAt') or 0, now_ms)}\n"
    text += f"┣ Pool Created: {format_time_ago(info.get('poolCreateAt') or 0, now_ms)}\n"
    text += f"┣ DEX: {info.get('exchange')}\n"
    text += f"┣ Pair: {symbol}/{quote}\n"
    text += f"┗ {quote} in Pool: {reserve:.2f} {quote}\n\n"

    mint = "❌ Mint Authority Not Revoked" if safety.get("canMint") else "✅ Mint Authority Revoked"
    freeze = "❌ Freeze Authority Not Revoked" if safety.get("canFrozen") else "✅ Freeze Authority Revoked"
    text += "🔎 Security\n"
    text += f"┣ {mint} {freeze}\n"
    text += f"┗ {'✅' if top10 < 0.3 else '❌'} Top 10 Holders ({top10 * 100:.2f}%)\n\n"

    items = [f"[{label}]({links[key]})" for key, label in (("website", "Website"), ("twitter", "Twitter"), ("telegram", "Telegram")) if links.get(key)]
    if chain == "solana":
        items.append(f"[Birdeye](https://birdeye.so/token/{token.get('contract')})")
        items.append(f"[Jupiter](https://jup.ag/swap/SOL-{token.get('contract')})")
    text += "🔗 Links\n"
    text += f"┗ {' | '.join(items)}\n"
    return text


def format_percent(ratio: Optional[float], digits: int = 1) -> str:
    return f"{float(ratio or 0) * 100:.{digits}f}%"


def enabled_label(enabled: Any) -> str:
    return "Enabled" if enabled else "Disabled"


def yes_no(flag: Any) -> str:
    return "Yes" if flag else "No"


def format_timestamp(timestamp_ms: Any) -> str:
    """Epoch-ms timestamp as a UTC date-time string; unparseable values pass through."""
    try:
        return datetime.fromtimestamp(float(timestamp_ms) / 1000.0, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (TypeError, ValueError, OverflowError, OSError):
        return str(timestamp_ms)
