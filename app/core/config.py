from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, Mapping, Optional, TypeVar

from dotenv import load_dotenv

from observability.logging import build_log_context, log_event

load_dotenv()

T = TypeVar("T")

API_BASE_URL = "https://api-bot-v1.dbotx.com"
SECURITY_API_URL = "https://servapi.dbotx.com/dex/poolinfo"
DOCS_URL = "https://dbotx.com/docs"
REQUEST_TIMEOUT_SEC = 30

WALLET_ENV_VARS = (
    "DBOT_WALLET_ID_SOLANA",
    "DBOT_WALLET_ID_EVM",
    "DBOT_WALLET_ID_TRON",
    "DBOT_WALLET_ID_BASE",
    "DBOT_WALLET_ID_ARBITRUM",
    "DBOT_WALLET_ID_BSC",
)

_CONFIG_CTX = build_log_context(tool="config")


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() == "true"


def _env_value(env: Mapping[str, str], key: str, default: T, parse: Callable[[str], T]) -> T:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except (TypeError, ValueError):
        log_event(
            "config_invalid_value",
            ctx=_CONFIG_CTX,
            data={"key": key, "fallback": default},
            level="warn",
        )
        return default


@dataclass(frozen=True)
class TradeDefaults:
    """
    Defaults for trade parameters that operators may override per deployment.

    Built once from the environment and handed to request validation through
    the pydantic validation context.
    """

    chain: str = "solana"
    custom_fee_and_tip: bool = False
    priority_fee: str = "0.0001"
    jito_enabled: bool = True
    jito_tip: float = 0.001
    expire_delta: int = 360000000
    max_slippage: float = 0.1
    concurrent_nodes: int = 2
    retries: int = 1
    min_dev_sell_percent: float = 0.5
    gas_fee_delta: int = 5
    max_fee_per_gas: int = 100
    amount_or_percent: float = 0.001
    migrate_sell_percent: float = 1.0
    dev_sell_percent: float = 1.0
    pnl_order_expire_delta: int = 43200000
    pnl_order_expire_execute: bool = False
    pnl_order_use_mid_price: bool = False
    pnl_custom_config_enabled: bool = True

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "TradeDefaults":
        base = cls()
        return cls(
            chain=_env_value(env, "DBOT_CHAIN", base.chain, str),
            custom_fee_and_tip=_env_value(env, "DBOT_CUSTOM_FEE_AND_TIP", base.custom_fee_and_tip, _parse_bool),
            priority_fee=_env_value(env, "DBOT_PRIORITY_FEE", base.priority_fee, str),
            jito_enabled=_env_value(env, "DBOT_JITO_ENABLED", base.jito_enabled, _parse_bool),
            jito_tip=_env_value(env, "DBOT_JITO_TIP", base.jito_tip, float),
            expire_delta=_env_value(env, "DBOT_EXPIRE_DELTA", base.expire_delta, int),
            max_slippage=_env_value(env, "DBOT_MAX_SLIPPAGE", base.max_slippage, float),
            concurrent_nodes=_env_value(env, "DBOT_CONCURRENT_NODES", base.concurrent_nodes, int),
            retries=_env_value(env, "DBOT_RETRIES", base.retries, int),
            min_dev_sell_percent=_env_value(env, "DBOT_MIN_DEV_SELL_PERCENT", base.min_dev_sell_percent, float),
            gas_fee_delta=_env_value(env, "DBOT_GAS_FEE_DELTA", base.gas_fee_delta, int),
            max_fee_per_gas=_env_value(env, "DBOT_MAX_FEE_PER_GAS", base.max_fee_per_gas, int),
            amount_or_percent=_env_value(env, "DBOT_AMOUNT_OR_PERCENT", base.amount_or_percent, float),
            migrate_sell_percent=_env_value(env, "DBOT_MIGRATE_SELL_PERCENT", base.migrate_sell_percent, float),
            dev_sell_percent=_env_value(env, "DBOT_DEV_SELL_PERCENT", base.dev_sell_percent, float),
            pnl_order_expire_delta=_env_value(
                env, "DBOT_PNL_ORDER_EXPIRE_DELTA", base.pnl_order_expire_delta, int
            ),
            pnl_order_expire_execute=_env_value(
                env, "DBOT_PNL_ORDER_EXPIRE_EXECUTE", base.pnl_order_expire_execute, _parse_bool
            ),
            pnl_order_use_mid_price=_env_value(
                env, "DBOT_PNL_ORDER_USE_MID_PRICE", base.pnl_order_use_mid_price, _parse_bool
            ),
            pnl_custom_config_enabled=_env_value(
                env, "DBOT_PNL_CUSTOM_CONFIG_ENABLED", base.pnl_custom_config_enabled, _parse_bool
            ),
        )


@dataclass(frozen=True)
class Settings:
    PROJECT_NAME: ClassVar[str] = "dbot-automation-mcp"
    VERSION: ClassVar[str] = "1.0.1"

    api_key: Optional[str] = None
    adapter: str = "conditional-order"
    api_base_url: str = API_BASE_URL
    security_api_url: str = SECURITY_API_URL
    request_timeout_sec: int = REQUEST_TIMEOUT_SEC

    # env var name -> wallet id, only the non-empty ones
    wallet_ids: Dict[str, str] = field(default_factory=dict)
    defaults: TradeDefaults = field(default_factory=TradeDefaults)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        wallet_ids = {key: env[key].strip() for key in WALLET_ENV_VARS if (env.get(key) or "").strip()}
        return cls(
            api_key=(env.get("DBOT_API_KEY") or "").strip() or None,
            adapter=(env.get("DBOT_ADAPTER") or "conditional-order").strip().lower(),
            wallet_ids=wallet_ids,
            defaults=TradeDefaults.from_env(env),
        )
