import pytest

from app.core.config import TradeDefaults
from common.errors import ToolValidationError
from execution.schemas import (
    CreateCopyTrading,
    CreateDevOrder,
    CreateFastSwap,
    CreateFastSwaps,
    CreateLimitOrders,
    CreateMigrateOrder,
    DeleteAllLimitOrders,
    SwapOrderInfoQuery,
    ToggleOrder,
    WalletQuery,
    validate_request,
)

MIGRATE = {"pair": "So1Pair", "walletId": "wallet-1", "amountOrPercent": 0.5}


def _copy_trading(**overrides):
    args = {
        "name": "follow whale",
        "targetIds": ["Target1"],
        "walletId": "wallet-1",
        "buySettings": {"maxBuyAmountUI": "0.1"},
        "sellSettings": {},
    }
    args.update(overrides)
    return args


def test_ratio_bounds_are_rejected_not_clamped():
    with pytest.raises(ToolValidationError) as exc:
        validate_request(CreateMigrateOrder, {**MIGRATE, "amountOrPercent": 1.5})
    assert "amountOrPercent" in exc.value.message
    assert exc.value.code == "invalid_params"

    req = validate_request(CreateMigrateOrder, MIGRATE)
    assert req.amount_or_percent == 0.5


def test_conditional_defaults_in_payload():
    payload = validate_request(CreateMigrateOrder, MIGRATE).to_payload()
    assert payload["chain"] == "solana"
    assert payload["pairType"] == "pump"
    assert payload["tradeType"] == "sell"
    assert payload["expireDelta"] == 360000000
    assert payload["concurrentNodes"] == 2


def test_env_defaults_fill_only_omitted_fields():
    defaults = TradeDefaults(max_slippage=0.25, retries=3, min_dev_sell_percent=0.8)
    req = validate_request(CreateDevOrder, {**MIGRATE, "retries": 5}, defaults=defaults)
    assert req.max_slippage == 0.25
    assert req.retries == 5
    assert req.min_dev_sell_percent == 0.8


def test_env_defaults_accept_snake_case_keys():
    defaults = TradeDefaults(max_slippage=0.25)
    req = validate_request(CreateMigrateOrder, {**MIGRATE, "max_slippage": 0.05}, defaults=defaults)
    assert req.max_slippage == 0.05


def test_unknown_fields_are_rejected():
    with pytest.raises(ToolValidationError):
        validate_request(CreateMigrateOrder, {**MIGRATE, "surprise": 1})


def test_stop_earn_group_size_limit():
    group = {"pricePercent": 0.2, "amountPercent": 0.5}
    sell = {"stopEarnGroup": [group] * 6}
    req = validate_request(CreateCopyTrading, _copy_trading(sellSettings=sell))
    assert len(req.sell_settings.stop_earn_group) == 6

    with pytest.raises(ToolValidationError) as exc:
        validate_request(CreateCopyTrading, _copy_trading(sellSettings={"stopEarnGroup": [group] * 7}))
    assert "stopEarnGroup" in exc.value.message


def test_trailing_stop_price_percent_must_be_below_one():
    with pytest.raises(ToolValidationError):
        validate_request(
            CreateFastSwap,
            {"pair": "P", "walletId": "w", "type": "buy", "trailingStopGroup": [{"pricePercent": 1.0, "amountPercent": 1}]},
        )
    req = validate_request(
        CreateFastSwap,
        {"pair": "P", "walletId": "w", "type": "buy", "trailingStopGroup": [{"pricePercent": 0.3, "amountPercent": 1}]},
    )
    assert req.trailing_stop_group[0].price_percent == 0.3


def test_copy_trading_target_limit_and_aliases():
    with pytest.raises(ToolValidationError):
        validate_request(CreateCopyTrading, _copy_trading(targetIds=[f"t{i}" for i in range(11)]))
    with pytest.raises(ToolValidationError):
        validate_request(CreateCopyTrading, _copy_trading(targetIds=[]))

    payload = validate_request(CreateCopyTrading, _copy_trading()).to_payload()
    buy = payload["buySettings"]
    assert buy["maxBuyAmountUI"] == "0.1"
    assert buy["minTokenMCUSD"] == 0
    assert buy["buyAmountType"] == "follow_amount"
    assert payload["sellSettings"]["mode"] == "mixed"
    assert payload["enabled"] is True


def test_fast_swaps_wallet_list_limit():
    base = {"pair": "P", "type": "buy"}
    with pytest.raises(ToolValidationError):
        validate_request(CreateFastSwaps, {**base, "walletIdList": [f"w{i}" for i in range(6)]})
    req = validate_request(CreateFastSwaps, {**base, "walletIdList": ["w1", "w2"]})
    assert req.jito_enabled is False
    assert req.priority_fee == ""


def test_fast_swap_env_chain_default():
    req = validate_request(CreateFastSwap, {"pair": "P", "walletId": "w", "type": "sell"}, defaults=TradeDefaults(chain="bsc"))
    assert req.chain == "bsc"
    assert req.amount_or_percent == 0.001


def test_limit_order_settings():
    with pytest.raises(ToolValidationError):
        validate_request(CreateLimitOrders, {"pair": "P", "walletId": "w", "settings": []})

    setting = {"tradeType": "buy", "triggerPriceUsd": "0.0012", "triggerDirection": "down", "currencyAmountUI": 0.1}
    payload = validate_request(
        CreateLimitOrders,
        {"pair": "P", "walletId": "w", "settings": [setting]},
        defaults=TradeDefaults(pnl_order_use_mid_price=True),
    ).to_payload()
    s = payload["settings"][0]
    assert s["currencyAmountUI"] == 0.1
    assert s["expireDelta"] == 432000000
    assert s["useMidPrice"] is True


def test_small_models():
    assert validate_request(DeleteAllLimitOrders, {}).source == "normal"
    assert validate_request(SwapOrderInfoQuery, {"ids": "a, b,,c"}).order_ids == ["a", "b", "c"]
    with pytest.raises(ToolValidationError):
        validate_request(WalletQuery, {"size": 21})
    assert validate_request(WalletQuery, {}).to_payload() == {"page": 0, "size": 20}


@pytest.mark.parametrize(
    "override",
    [
        {"amountOrPercent": True},
        {"amountOrPercent": "0.5"},
        {"jitoEnabled": "yes"},
        {"retries": "3"},
        {"customFeeAndTip": 1},
    ],
)
def test_wrong_types_are_rejected_not_converted(override):
    with pytest.raises(ToolValidationError) as exc:
        validate_request(CreateMigrateOrder, {**MIGRATE, **override})
    assert next(iter(override)) in exc.value.message


def test_toggle_enabled_must_be_a_boolean():
    with pytest.raises(ToolValidationError):
        validate_request(ToggleOrder, {"id": "abc", "enabled": "off"})
    assert validate_request(ToggleOrder, {"id": "abc", "enabled": False}).enabled is False


def test_int_is_accepted_for_float_fields():
    req = validate_request(CreateMigrateOrder, {**MIGRATE, "amountOrPercent": 1, "jitoTip": 0})
    assert req.amount_or_percent == 1.0
    assert isinstance(req.amount_or_percent, float)


def test_conditional_orders_ignore_env_chain():
    req = validate_request(CreateMigrateOrder, MIGRATE, defaults=TradeDefaults(chain="bsc"))
    assert req.chain == "solana"


def test_stop_earn_price_percent_is_a_ratio():
    sell = {"stopEarnGroup": [{"pricePercent": 2.0, "amountPercent": 0.5}]}
    with pytest.raises(ToolValidationError) as exc:
        validate_request(CreateCopyTrading, _copy_trading(sellSettings=sell))
    assert "pricePercent" in exc.value.message
