from __future__ import annotations

from typing import Annotated, Any, ClassVar, Dict, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, model_validator
from pydantic.alias_generators import to_camel

from common.errors import ToolValidationError

Ratio = Annotated[float, Field(ge=0, le=1)]
NonNegative = Annotated[float, Field(ge=0)]
NonNegativeInt = Annotated[int, Field(ge=0)]
ExpireDelta = Annotated[int, Field(ge=0, le=432000000)]
ConcurrentNodes = Annotated[int, Field(ge=1, le=3)]
Retries = Annotated[int, Field(ge=0, le=10)]
Hour = Annotated[int, Field(ge=0, le=23)]
NonEmptyStr = Annotated[str, Field(min_length=1)]

Chain = Literal["solana", "ethereum", "base", "bsc", "tron"]
TradeType = Literal["buy", "sell"]
TriggerDirection = Literal["up", "down"]

M = TypeVar("M", bound="DbotRequest")


class DbotRequest(BaseModel):
    """
    Base for every tool request.

    Attributes are snake_case; the wire/tool names are the camelCase aliases.
    `env_defaults` maps a field name to the `TradeDefaults` attribute that
    supplies its default when the caller omits it and a `defaults` object is
    present in the validation context.

    Validation is strict: "0.5" is not a number and "yes" is not a boolean.
    Ints are still accepted where a float is expected.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid", strict=True)

    env_defaults: ClassVar[Dict[str, str]] = {}

    @model_validator(mode="before")
    @classmethod
    def _fill_env_defaults(cls, data: Any, info: ValidationInfo) -> Any:
        defaults = (info.context or {}).get("defaults")
        if defaults is None or not cls.env_defaults or not isinstance(data, Mapping):
            return data
        filled = dict(data)
        for name, attr in cls.env_defaults.items():
            alias = cls.model_fields[name].alias or name
            if alias not in filled and name not in filled:
                filled[alias] = getattr(defaults, attr)
        return filled

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


_FEE_DEFAULTS = {
    "custom_fee_and_tip": "custom_fee_and_tip",
    "priority_fee": "priority_fee",
    "jito_enabled": "jito_enabled",
    "jito_tip": "jito_tip",
    "max_slippage": "max_slippage",
    "concurrent_nodes": "concurrent_nodes",
    "retries": "retries",
}
_EVM_FEE_DEFAULTS = {**_FEE_DEFAULTS, "gas_fee_delta": "gas_fee_delta", "max_fee_per_gas": "max_fee_per_gas"}


def validate_request(model: Type[M], args: Mapping[str, Any] | None, *, defaults: Any = None) -> M:
    """
    Validate raw tool arguments into `model`.

    Raises ToolValidationError naming every failing field; nothing is clamped.
    """
    try:
        return model.model_validate(dict(args or {}), context={"defaults": defaults})
    except ValidationError as e:
        problems = []
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
            problems.append({"field": loc, "reason": err.get("msg", "invalid value")})
        message = "Parameter validation failed: " + "; ".join(f"{p['field']}: {p['reason']}" for p in problems)
        raise ToolValidationError(message, {"errors": problems}) from e


# --- trigger groups ---


class PnlGroup(DbotRequest):
    price_percent: Ratio
    amount_percent: Ratio


class TrailingStopGroup(DbotRequest):
    price_percent: Annotated[float, Field(ge=0, lt=1)]
    amount_percent: Ratio


PnlGroupList = Annotated[List[PnlGroup], Field(max_length=6)]
TrailingStopList = Annotated[List[TrailingStopGroup], Field(max_length=1)]


class PnlCustomConfig(DbotRequest):
    env_defaults = _EVM_FEE_DEFAULTS

    custom_fee_and_tip: bool = False
    priority_fee: str = "0.0001"
    gas_fee_delta: NonNegativeInt = 5
    max_fee_per_gas: NonNegativeInt = 100
    jito_enabled: bool = True
    jito_tip: NonNegative = 0.001
    max_slippage: Ratio = 0.1
    concurrent_nodes: ConcurrentNodes = 2
    retries: Retries = 1


class _PnlGroups(DbotRequest):
    stop_earn_percent: Optional[NonNegative] = None
    stop_loss_percent: Optional[Ratio] = None
    stop_earn_group: Optional[PnlGroupList] = None
    stop_loss_group: Optional[PnlGroupList] = None
    trailing_stop_group: Optional[TrailingStopList] = None


# --- shared lookups ---


class WalletQuery(DbotRequest):
    type: Optional[Literal["solana", "evm"]] = None
    page: NonNegativeInt = 0
    size: Annotated[int, Field(ge=1, le=20)] = 20


class TokenSecurityQuery(DbotRequest):
    chain: NonEmptyStr = "solana"
    pair: NonEmptyStr


# --- conditional orders (sell on migration / follow dev sell) ---


class _ConditionalOrderFields(DbotRequest):
    chain: Literal["solana"] = "solana"
    pair_type: Literal["pump", "raydium_amm"] = "pump"
    pair: NonEmptyStr
    wallet_id: NonEmptyStr
    trade_type: Literal["sell"] = "sell"
    amount_or_percent: Ratio
    custom_fee_and_tip: bool = False
    priority_fee: str = "0.0001"
    jito_enabled: bool = True
    jito_tip: NonNegative = 0.001
    expire_delta: ExpireDelta = 360000000
    max_slippage: Ratio = 0.1
    concurrent_nodes: ConcurrentNodes = 2
    retries: Retries = 1


_CONDITIONAL_DEFAULTS = {**_FEE_DEFAULTS, "expire_delta": "expire_delta"}


class CreateMigrateOrder(_ConditionalOrderFields):
    env_defaults = _CONDITIONAL_DEFAULTS


class CreateDevOrder(_ConditionalOrderFields):
    env_defaults = {**_CONDITIONAL_DEFAULTS, "min_dev_sell_percent": "min_dev_sell_percent"}

    min_dev_sell_percent: Ratio = 0.5


class UpdateMigrateOrder(_ConditionalOrderFields):
    id: NonEmptyStr


class UpdateDevOrder(_ConditionalOrderFields):
    id: NonEmptyStr
    min_dev_sell_percent: Ratio = 0.5


class ToggleOrder(DbotRequest):
    id: NonEmptyStr
    enabled: bool


class DeleteOrder(DbotRequest):
    id: NonEmptyStr


class ConditionalOrdersQuery(DbotRequest):
    page: NonNegativeInt = 0
    size: Annotated[int, Field(ge=1, le=100)] = 20
    chain: Literal["solana"] = "solana"
    state: Optional[Literal["init", "processing", "done", "fail", "expired"]] = None
    source: Optional[str] = None


# --- copy trading ---


class BuySettings(DbotRequest):
    enabled: bool = True
    start_hour: Hour = 0
    end_hour: Hour = 23
    buy_amount_type: Literal["fixed_amount", "fixed_ratio", "follow_amount"] = "follow_amount"
    max_buy_amount_ui: NonEmptyStr = Field(alias="maxBuyAmountUI")
    buy_ratio: Annotated[float, Field(ge=0, le=10)] = 1
    max_balance_ui: NonNegative = Field(default=100, alias="maxBalanceUI")
    reserved_amount_ui: NonNegative = Field(default=0.01, alias="reservedAmountUI")
    target_min_amount_ui: NonNegative = Field(default=0, alias="targetMinAmountUI")
    target_max_amount_ui: NonNegative = Field(default=999999, alias="targetMaxAmountUI")
    min_token_mc_usd: NonNegative = Field(default=0, alias="minTokenMCUSD")
    max_token_mc_usd: NonNegative = Field(default=999999999, alias="maxTokenMCUSD")
    max_buy_tax: Optional[Ratio] = None
    max_sell_tax: Optional[Ratio] = None
    custom_fee_and_tip: bool = False
    priority_fee: str = ""
    gas_fee_delta: NonNegativeInt = 5
    max_fee_per_gas: NonNegativeInt = 100
    jito_enabled: bool = True
    jito_tip: NonNegative = 0.001
    max_slippage: Ratio = 0.1
    skip_freezable_token: bool = False
    skip_mintable_token: bool = False
    skip_delegated_token: bool = False
    skip_not_opensource: bool = False
    skip_honey_pot: bool = False
    skip_target_increase_position: bool = False
    min_burned_lp: Ratio = 0
    min_lp_usd: NonNegative = 0
    min_token_age_ms: NonNegative = 0
    max_token_age_ms: NonNegative = 999999999999
    max_top_hold_percent: Ratio = 1
    max_buy_times_per_token: Annotated[int, Field(ge=1)] = 999
    max_buy_amount_per_token: NonNegative = 999999
    buy_exist: bool = False
    buy_once_per_wallet: bool = False
    concurrent_nodes: ConcurrentNodes = 2
    retries: Retries = 1


class SellSettings(_PnlGroups):
    enabled: bool = True
    start_hour: Hour = 0
    end_hour: Hour = 23
    mode: Literal["mixed", "only_copy", "only_pnl"] = "mixed"
    sell_amount_type: Literal["all", "follow_ratio", "x_target_ratio"] = "all"
    x_target_ratio: Annotated[float, Field(ge=0, le=100)] = 1
    sell_speed_type: Literal["fast", "accurate"] = "accurate"
    target_min_amount_ui: NonNegative = Field(default=0, alias="targetMinAmountUI")
    target_max_amount_ui: NonNegative = Field(default=999999, alias="targetMaxAmountUI")
    pnl_order_expire_delta: ExpireDelta = 43200000
    pnl_order_expire_execute: bool = False
    pnl_order_use_mid_price: bool = False
    sell_mode: Literal["smart", "normal"] = "smart"
    migrate_sell_percent: Ratio = 0
    min_dev_sell_percent: Ratio = 0.5
    dev_sell_percent: Ratio = 1
    custom_fee_and_tip: bool = False
    priority_fee: str = ""
    gas_fee_delta: NonNegativeInt = 5
    max_fee_per_gas: NonNegativeInt = 100
    jito_enabled: bool = True
    jito_tip: NonNegative = 0.001
    max_slippage: Ratio = 0.1
    concurrent_nodes: ConcurrentNodes = 2
    retries: Retries = 1


class _CopyTradingFields(DbotRequest):
    name: NonEmptyStr
    dex_filter: Optional[List[str]] = None
    target_ids: List[str] = Field(min_length=1, max_length=10)
    token_blacklist: Optional[Annotated[List[str], Field(max_length=20)]] = None
    wallet_id: NonEmptyStr
    group_id: Optional[str] = None
    buy_settings: BuySettings
    sell_settings: SellSettings


class CreateCopyTrading(_CopyTradingFields):
    enabled: bool = True
    chain: Chain = "solana"


class EditCopyTrading(_CopyTradingFields):
    id: NonEmptyStr
    enabled: bool
    chain: Chain


class SwitchCopyTrading(DbotRequest):
    id: NonEmptyStr
    enabled: bool
    close_pnl_order: bool = False


class DeleteCopyTrading(DbotRequest):
    id: NonEmptyStr
    delete_pnl_order: bool = False


class CopyTradingTasksQuery(DbotRequest):
    page: NonNegativeInt = 0
    size: Annotated[int, Field(ge=1, le=100)] = 20


# --- fast swap ---


class _SwapFeeFields(_PnlGroups):
    custom_fee_and_tip: bool = False
    priority_fee: str = "0.0001"
    gas_fee_delta: NonNegativeInt = 5
    max_fee_per_gas: NonNegativeInt = 100
    jito_enabled: bool = True
    jito_tip: NonNegative = 0.001
    max_slippage: Ratio = 0.1
    concurrent_nodes: ConcurrentNodes = 2
    retries: Retries = 1
    pnl_order_expire_delta: ExpireDelta = 43200000
    pnl_order_expire_execute: bool = False
    pnl_order_use_mid_price: bool = False
    pnl_custom_config_enabled: bool = True
    pnl_custom_config: Optional[PnlCustomConfig] = None


class CreateFastSwap(_SwapFeeFields):
    env_defaults = {
        **_EVM_FEE_DEFAULTS,
        "chain": "chain",
        "amount_or_percent": "amount_or_percent",
        "migrate_sell_percent": "migrate_sell_percent",
        "min_dev_sell_percent": "min_dev_sell_percent",
        "dev_sell_percent": "dev_sell_percent",
        "pnl_order_expire_delta": "pnl_order_expire_delta",
        "pnl_order_expire_execute": "pnl_order_expire_execute",
        "pnl_order_use_mid_price": "pnl_order_use_mid_price",
        "pnl_custom_config_enabled": "pnl_custom_config_enabled",
    }

    chain: Chain = "solana"
    pair: NonEmptyStr
    wallet_id: NonEmptyStr
    type: TradeType
    amount_or_percent: NonNegative = 0.001
    migrate_sell_percent: Ratio = 1.0
    min_dev_sell_percent: Ratio = 0.5
    dev_sell_percent: Ratio = 1.0


class CreateFastSwaps(_SwapFeeFields):
    chain: Chain = "solana"
    pair: NonEmptyStr
    wallet_id_list: List[NonEmptyStr] = Field(min_length=1, max_length=5)
    type: TradeType
    priority_fee: str = ""
    jito_enabled: bool = False
    min_amount: Optional[NonNegative] = None
    max_amount: Optional[NonNegative] = None
    sell_percent: Ratio = 1.0


class SwapOrderInfoQuery(DbotRequest):
    ids: NonEmptyStr

    @property
    def order_ids(self) -> List[str]:
        return [part.strip() for part in self.ids.split(",") if part.strip()]


class SwapRecordsQuery(DbotRequest):
    page: NonNegativeInt = 0
    size: Annotated[int, Field(ge=1, le=20)] = 10
    chain: Literal["solana", "ethereum", "base", "bsc", "tron", ""] = ""


class SwapTpslTasksQuery(DbotRequest):
    page: NonNegativeInt = 0
    size: Annotated[int, Field(ge=1, le=20)] = 20
    chain: Literal["solana", "ethereum", "base", "bsc", "tron", ""] = ""
    state: Literal["init", "processing", "done", "fail", "expired"] = "init"
    source_id: str = ""
    token: str = ""
    sort_by: str = ""
    sort: Literal[1, -1] = -1


# --- limit orders (also used for fast swap take-profit/stop-loss orders) ---


class LimitOrderSetting(DbotRequest):
    env_defaults = {
        **_EVM_FEE_DEFAULTS,
        "expire_execute": "pnl_order_expire_execute",
        "use_mid_price": "pnl_order_use_mid_price",
    }

    enabled: bool = True
    trade_type: TradeType
    trigger_price_usd: NonEmptyStr
    trigger_direction: TriggerDirection
    currency_amount_ui: NonNegative = Field(alias="currencyAmountUI")
    custom_fee_and_tip: bool = False
    priority_fee: str = "0.0001"
    gas_fee_delta: NonNegativeInt = 5
    max_fee_per_gas: NonNegativeInt = 100
    jito_enabled: bool = True
    jito_tip: NonNegative = 0.001
    expire_delta: ExpireDelta = 432000000
    expire_execute: bool = False
    use_mid_price: bool = False
    max_slippage: Ratio = 0.1
    concurrent_nodes: ConcurrentNodes = 2
    retries: Retries = 1


class CreateLimitOrders(DbotRequest):
    env_defaults = {"chain": "chain"}

    chain: Chain = "solana"
    pair: NonEmptyStr
    wallet_id: NonEmptyStr
    group_id: Optional[str] = None
    settings: List[LimitOrderSetting] = Field(min_length=1)


class EditLimitOrder(DbotRequest):
    id: NonEmptyStr
    enabled: Optional[bool] = None
    group_id: Optional[str] = None
    trigger_price_usd: Optional[NonEmptyStr] = None
    trigger_direction: Optional[TriggerDirection] = None
    currency_amount_ui: Optional[NonNegative] = Field(default=None, alias="currencyAmountUI")
    custom_fee_and_tip: Optional[bool] = None
    priority_fee: Optional[str] = None
    gas_fee_delta: Optional[NonNegativeInt] = None
    max_fee_per_gas: Optional[NonNegativeInt] = None
    jito_enabled: Optional[bool] = None
    jito_tip: Optional[NonNegative] = None
    expire_delta: Optional[ExpireDelta] = None
    expire_execute: Optional[bool] = None
    use_mid_price: Optional[bool] = None
    max_slippage: Optional[Ratio] = None
    concurrent_nodes: Optional[ConcurrentNodes] = None
    retries: Optional[Retries] = None


class SwitchLimitOrder(DbotRequest):
    id: NonEmptyStr
    enabled: bool


class DeleteLimitOrders(DbotRequest):
    ids: List[NonEmptyStr] = Field(min_length=1)


class DeleteAllLimitOrders(DbotRequest):
    source: Literal["normal", "pnl_for_follow", "pnl_for_swap"] = "normal"


class LimitOrdersQuery(DbotRequest):
    page: NonNegativeInt = 0
    size: Annotated[int, Field(ge=1, le=20)] = 20
    chain: Optional[Chain] = None
    pair: Optional[str] = None
    state: Literal["init", "done", "expired", "canceled"] = "init"
    enabled: Optional[bool] = None
    group_id: Optional[str] = None
    token: Optional[str] = None
    sort_by: Optional[str] = None
    sort: Literal[1, -1] = -1
