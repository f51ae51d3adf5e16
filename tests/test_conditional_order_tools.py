import pytest
import requests

from conftest import api_err, ok, sent, text_of
from common.errors import ToolValidationError, UnknownToolError


@pytest.fixture
def dispatcher(make_dispatcher):
    return make_dispatcher("conditional-order")


def test_tool_catalog(dispatcher):
    assert dispatcher.tool_names() == [
        "create_migrate_order",
        "create_dev_order",
        "update_migrate_order",
        "update_dev_order",
        "toggle_migrate_order",
        "toggle_dev_order",
        "delete_migrate_order",
        "delete_dev_order",
        "get_migrate_orders",
        "get_dev_orders",
        "get_user_wallets",
        "get_token_security_info",
    ]


def test_create_migrate_order_success(dispatcher, session):
    session.request.return_value = ok({"id": "abc"})
    text = text_of(dispatcher.handle("create_migrate_order", {"pair": "So1Pair", "amountOrPercent": 0.5}))

    assert "Task ID: abc" in text
    assert "Sell Ratio: 50.0%" in text
    assert text.endswith("Docs: https://dbotx.com/docs")

    method, url, body, _ = sent(session)
    assert method == "POST"
    assert url.endswith("/automation/migrate_order")
    assert body["chain"] == "solana"
    assert body["pairType"] == "pump"
    assert body["tradeType"] == "sell"
    # filled from DBOT_WALLET_ID_SOLANA
    assert body["walletId"] == "sol-wallet-0001"


def test_create_migrate_order_api_error_masks_wallet(dispatcher, session):
    session.request.return_value = api_err({"message": "insufficient balance"})
    text = text_of(
        dispatcher.handle(
            "create_migrate_order",
            {"pair": "So1Pair", "walletId": "wallet-abcdefgh-123", "amountOrPercent": 0.5},
        )
    )
    assert text.startswith("❌ Create sell-on-open task failed:")
    assert "insufficient balance" in text
    assert "wallet-a***" in text
    assert "wallet-abcdefgh-123" not in text
    assert dispatcher.metrics.count("create_migrate_order", "api_error") == 1


def test_invalid_ratio_never_reaches_the_api(dispatcher, session):
    with pytest.raises(ToolValidationError):
        dispatcher.handle("create_migrate_order", {"pair": "So1Pair", "amountOrPercent": 1.5})
    session.request.assert_not_called()
    assert dispatcher.metrics.count("create_migrate_order", "error") == 1


def test_create_dev_order_text(dispatcher, session):
    session.request.return_value = ok({"id": "dev1"})
    text = text_of(
        dispatcher.handle("create_dev_order", {"pair": "P", "amountOrPercent": 1, "minDevSellPercent": 0.3})
    )
    assert "Trigger Ratio: 30.0%" in text
    assert "Sell Ratio: 100.0%" in text
    assert "When the developer sells over 30.0%" in text


def test_toggle_dev_order(dispatcher, session):
    text = text_of(dispatcher.handle("toggle_dev_order", {"id": "d1", "enabled": False}))
    assert "Status: Disabled" in text
    assert sent(session)[2] == {"id": "d1", "enabled": False}


def test_delete_migrate_order(dispatcher, session):
    text = text_of(dispatcher.handle("delete_migrate_order", {"id": "m1"}))
    assert "Task ID: m1" in text
    assert sent(session)[1].endswith("/automation/migrate_order/m1")


def test_list_orders_empty_and_populated(dispatcher, session):
    session.request.return_value = ok({"orders": [], "total": 0, "page": 0, "size": 20})
    text = text_of(dispatcher.handle("get_migrate_orders", {}))
    assert "📋 No sell-on-open tasks found." in text

    session.request.return_value = ok(
        {
            "orders": [{"id": "d1", "pair": "P", "minDevSellPercent": 0.5, "amountOrPercent": 1, "enabled": True, "state": "init"}],
            "total": 1,
            "page": 0,
            "size": 20,
        }
    )
    text = text_of(dispatcher.handle("get_dev_orders", {"state": "init"}))
    assert "- Total tasks: 1" in text
    assert "1. Task ID: d1" in text
    assert "- Trigger Ratio: 50.0%" in text
    assert "- Enabled: Yes" in text


def test_transport_error_becomes_text(dispatcher, session):
    session.request.side_effect = requests.ConnectionError("connection refused")
    text = text_of(dispatcher.handle("delete_dev_order", {"id": "d1"}))
    assert text.startswith("❌ Delete follow-dev-sell task failed:")
    assert "🔌 Network Error" in text
    assert dispatcher.metrics.count("delete_dev_order", "transport_error") == 1


def test_unknown_tool(dispatcher):
    with pytest.raises(UnknownToolError):
        dispatcher.handle("create_limit_order", {})


def test_conditional_order_stays_on_solana_when_env_chain_differs(session):
    from app.core.config import Settings
    from app.core.container import Container

    settings = Settings.from_env(
        {
            "DBOT_API_KEY": "test-api-key",
            "DBOT_WALLET_ID_SOLANA": "sol-wallet-0001",
            "DBOT_WALLET_ID_EVM": "evm-wallet-0001",
            "DBOT_CHAIN": "bsc",
        }
    )
    dispatcher = Container(settings, adapter="conditional-order", session=session).dispatcher
    session.request.return_value = ok({"id": "abc"})

    text = text_of(dispatcher.handle("create_migrate_order", {"pair": "TOKEN123", "amountOrPercent": 0.5}))

    assert "Task ID: abc" in text
    _, _, body, _ = sent(session)
    assert body["chain"] == "solana"
    assert body["walletId"] == "sol-wallet-0001"


def test_string_amount_never_reaches_the_api(dispatcher, session):
    with pytest.raises(ToolValidationError):
        dispatcher.handle("create_migrate_order", {"pair": "So1Pair", "amountOrPercent": "0.5"})
    session.request.assert_not_called()
