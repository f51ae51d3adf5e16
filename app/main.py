from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from fastmcp import FastMCP

from app.core.config import Settings
from app.core.container import ADAPTERS, Container
from app.tools.registry import register_tools
from common.wallets import validate_wallet_config
from observability.logging import build_log_context, log_event


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="DBot automation MCP server (stdio)")
    parser.add_argument(
        "adapter",
        nargs="?",
        choices=sorted(ADAPTERS),
        help="Adapter to serve (default: DBOT_ADAPTER or conditional-order)",
    )
    return parser.parse_args(argv)


def build_server(container: Container) -> FastMCP:
    mcp = FastMCP(container.adapter.server_name)
    register_tools(mcp, container.dispatcher)
    return mcp


def main(argv: Optional[List[str]] = None, *, adapter: Optional[str] = None) -> int:
    args = _parse_args(argv)
    ctx = build_log_context(tool="server")
    try:
        settings = Settings.from_env()
        container = Container(settings, adapter=adapter or args.adapter)
        validate_wallet_config(settings.wallet_ids)
        mcp = build_server(container)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1

    log_event(
        "server_starting",
        ctx=ctx,
        data={
            "adapter": container.adapter.name,
            "server": container.adapter.server_name,
            "version": Settings.VERSION,
            "tools": container.dispatcher.tool_names(),
        },
        level="info",
    )
    try:
        mcp.run()
    except KeyboardInterrupt:
        pass
    log_event("server_stopped", ctx=ctx, data={"metrics": container.metrics.snapshot()}, level="info")
    return 0


def conditional_order_main() -> int:
    return main([], adapter="conditional-order")


def copy_trading_main() -> int:
    return main([], adapter="copy-trading")


def fast_swap_main() -> int:
    return main([], adapter="fast-swap")


def limit_order_main() -> int:
    return main([], adapter="limit-order")


if __name__ == "__main__":
    sys.exit(main())
