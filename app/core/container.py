from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import requests

from app.core.config import Settings
from app.tools.conditional_order import CONDITIONAL_ORDER_TOOLS
from app.tools.copy_trading import COPY_TRADING_TOOLS
from app.tools.fast_swap import FAST_SWAP_TOOLS
from app.tools.limit_order import LIMIT_ORDER_TOOLS
from app.tools.registry import Dispatcher, ToolSpec
from common.errors import ConfigurationError
from execution.dbot_service import DbotClient
from observability import Metrics


@dataclass(frozen=True)
class Adapter:
    name: str
    server_name: str
    tools: Tuple[ToolSpec, ...]


ADAPTERS: Dict[str, Adapter] = {
    a.name: a
    for a in (
        Adapter("conditional-order", "dbot-conditional-order-mcp", CONDITIONAL_ORDER_TOOLS),
        Adapter("copy-trading", "dbot-copy-trading-mcp", COPY_TRADING_TOOLS),
        Adapter("fast-swap", "dbot-fast-swap-mcp", FAST_SWAP_TOOLS),
        Adapter("limit-order", "dbot-limit-order-mcp", LIMIT_ORDER_TOOLS),
    )
}


def get_adapter(name: str) -> Adapter:
    adapter = ADAPTERS.get((name or "").strip().lower())
    if adapter is None:
        raise ConfigurationError(
            f"Unknown adapter: {name}. Expected one of: {', '.join(ADAPTERS)}",
            {"adapter": name},
        )
    return adapter


class Container:
    """Wires one adapter process: settings, metrics, API client and dispatcher."""

    def __init__(self, settings: Settings, adapter: Optional[str] = None, session: Optional[requests.Session] = None):
        self.settings = settings
        self.adapter = get_adapter(adapter or settings.adapter)

        # Observability
        self.metrics = Metrics()

        # API client (raises ConfigurationError without DBOT_API_KEY)
        self.client = DbotClient(settings, session=session)

        self.dispatcher = Dispatcher(
            adapter=self.adapter.name,
            specs=self.adapter.tools,
            client=self.client,
            settings=settings,
            metrics=self.metrics,
        )
