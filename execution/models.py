from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.core.config import DOCS_URL


@dataclass(frozen=True)
class ApiEnvelope:
    """
    The `{err, res, docs}` wrapper every DBot API response uses.

    Notes:
    - `err=True` is a logical failure reported by the service (HTTP 2xx).
    - Transport failures never produce an envelope; they raise.
    """

    err: bool
    res: Any
    docs: str

    @classmethod
    def from_json(cls, payload: Any) -> "ApiEnvelope":
        if not isinstance(payload, dict):
            # Non-envelope body on a 2xx; surface it as a logical error.
            return cls(err=True, res=payload, docs=DOCS_URL)
        return cls(
            err=bool(payload.get("err")),
            res=payload.get("res"),
            docs=str(payload.get("docs") or DOCS_URL),
        )


@dataclass(frozen=True)
class SwapOrderInfo:
    """
    Stable shape for a fast-swap order status record.

    The service has returned both camelCase and snake_case keys for these
    records over time, so every field is read through `_pick`.
    """

    id: Optional[str]
    state: Optional[str]
    chain: Optional[str]
    trade_type: Optional[str]
    tx_price_usd: Optional[float]
    swap_hash: Optional[str]
    error_code: str
    error_message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state,
            "chain": self.chain,
            "tradeType": self.trade_type,
            "txPriceUsd": self.tx_price_usd,
            "swapHash": self.swap_hash,
            "errorCode": self.error_code,
            "errorMessage": self.error_message,
        }


def _pick(order: Dict[str, Any], camel: str, snake: str) -> Any:
    return order.get(camel) or order.get(snake)


def normalize_swap_order(order: Dict[str, Any]) -> SwapOrderInfo:
    return SwapOrderInfo(
        id=order.get("id"),
        state=order.get("state"),
        chain=order.get("chain"),
        trade_type=_pick(order, "tradeType", "trade_type"),
        tx_price_usd=_pick(order, "txPriceUsd", "tx_price_usd"),
        swap_hash=_pick(order, "swapHash", "swap_hash"),
        error_code=_pick(order, "errorCode", "error_code") or "",
        error_message=_pick(order, "errorMessage", "error_message") or "",
    )


def normalize_swap_orders(res: Any) -> List[Dict[str, Any]]:
    if not isinstance(res, list):
        return []
    return [normalize_swap_order(o).to_dict() for o in res if isinstance(o, dict)]
