import pytest

from conftest import api_err, ok, sent, text_of


@pytest.fixture
def dispatcher(make_dispatcher):
    return make_dispatcher("fast-swap")


def test_create_fast_swap(dispatcher, session):
    session.request.return_value = ok({"id": "swap1"})
    text = text_of(dispatcher.handle("create_fast_swap", {"pair": "P", "type": "buy", "amountOrPercent": 0.1}))
    assert "Order ID: swap1" in text
    assert "Transaction Type: buy" in text
    assert "get_swap_order_info" in text

    _, url, body, _ = sent(session)
    assert url.endswith("/automation/swap_order")
    assert body["walletId"] == "sol-wallet-0001"
    assert body["pnlCustomConfigEnabled"] is True
    assert body["migrateSellPercent"] == 1.0


def test_create_fast_swaps_fills_wallet_list(dispatcher, session):
    session.request.return_value = ok([{"id": "a"}, {}])
    text = text_of(dispatcher.handle("create_fast_swaps", {"pair": "P", "type": "sell", "chain": "base"}))
    assert "Order ID List: a, Unknown" in text
    assert sent(session)[2]["walletIdList"] == ["evm-wallet-0001"]


def test_create_fast_swaps_error_masks_wallet_list(dispatcher, session):
    session.request.return_value = api_err({"message": "bad"})
    text = text_of(
        dispatcher.handle("create_fast_swaps", {"pair": "P", "type": "buy", "walletIdList": ["abcdefghijkl"]})
    )
    assert "abcdefgh***" in text
    assert "abcdefghijkl" not in text


def test_get_swap_order_info(dispatcher, session):
    session.request.return_value = ok(
        [{"id": "o1", "state": "fail", "chain": "solana", "trade_type": "buy", "error_code": "E9", "error_message": "slippage"}]
    )
    text = text_of(dispatcher.handle("get_swap_order_info", {"ids": "o1"}))
    assert "(1 orders in total)" in text
    assert "   Type: buy" in text
    assert "   Error: E9 - slippage" in text
    assert "Price:" not in text


def test_get_swap_records(dispatcher, session):
    session.request.return_value = ok(
        [
            {
                "id": "r1",
                "createAt": 1_700_000_000_000,
                "state": "done",
                "chain": "solana",
                "type": "buy",
                "pair": "P",
                "send": {"amount": 1_500_000_000, "info": {"symbol": "SOL", "decimals": 9}},
                "receive": {"amount": 123_450_000, "info": {"symbol": "BONK", "decimals": 5}},
            }
        ]
    )
    text = text_of(dispatcher.handle("get_swap_records", {}))
    assert "[1] 2023-11-14 22:13:20 UTC" in text
    assert "  Trade: 1.50 SOL -> 1234.50 BONK" in text
    assert sent(session)[3] == {"page": 0, "size": 10, "chain": ""}

    session.request.return_value = ok([])
    assert "No records found." in text_of(dispatcher.handle("get_swap_records", {}))


def test_swap_tpsl_tasks(dispatcher, session):
    session.request.return_value = ok(
        [
            {
                "id": "t1",
                "state": "init",
                "enabled": True,
                "triggerDirection": "down",
                "triggerPriceUsd": "0.5",
                "triggerPercent": 0.15,
                "source": "swap_order",
            }
        ]
    )
    text = text_of(dispatcher.handle("swap_tpsl_tasks", {}))
    assert "Status: init (Enabled)" in text
    assert "Trigger Direction: When price falls" in text
    assert "Take Profit/Stop Loss Percentage: 15.00%" in text
    assert "Source: Fast Buy/Sell" in text

    session.request.return_value = ok([])
    assert "No take profit/stop loss tasks" in text_of(dispatcher.handle("swap_tpsl_tasks", {}))


def test_tpsl_order_changes_hit_limit_order_routes(dispatcher, session):
    session.request.return_value = ok({"id": "t1"})
    text = text_of(dispatcher.handle("edit_fastswap_tpsl_order", {"id": "t1", "triggerPriceUsd": "0.7"}))
    assert text.startswith("✅ Successfully edited take profit/stop loss order:")
    assert text.endswith("Please print result status.")
    method, url, body, _ = sent(session)
    assert (method, body) == ("PATCH", {"id": "t1", "triggerPriceUsd": "0.7"})
    assert url.endswith("/automation/limit_order")

    dispatcher.handle("enable_fastswap_tpsl_order", {"id": "t1", "enabled": True})
    assert sent(session)[2] == {"id": "t1", "enabled": True}

    dispatcher.handle("delete_fastswap_tpsl_order", {"id": "t1"})
    method, url, _, _ = sent(session)
    assert method == "DELETE"
    assert url.endswith("/automation/limit_order/t1")
