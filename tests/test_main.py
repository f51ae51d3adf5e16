from unittest.mock import patch

from app.main import main


def test_missing_api_key_exits_with_fatal_error(monkeypatch, capsys):
    monkeypatch.delenv("DBOT_API_KEY", raising=False)
    assert main(["limit-order"]) == 1
    assert "Fatal error: Please set the DBOT_API_KEY environment variable" in capsys.readouterr().err


def test_missing_wallets_exits_with_fatal_error(monkeypatch, capsys):
    monkeypatch.setenv("DBOT_API_KEY", "k")
    monkeypatch.delenv("DBOT_WALLET_ID_SOLANA", raising=False)
    assert main(["fast-swap"]) == 1
    assert "At least one wallet ID must be configured" in capsys.readouterr().err


def test_server_runs_selected_adapter(monkeypatch):
    monkeypatch.setenv("DBOT_API_KEY", "k")
    monkeypatch.setenv("DBOT_WALLET_ID_SOLANA", "sol-w")
    with patch("app.main.FastMCP") as mcp_cls:
        mcp_cls.return_value.run.side_effect = KeyboardInterrupt
        assert main(["copy-trading"]) == 0
    mcp_cls.assert_called_once_with("dbot-copy-trading-mcp")
    names = [c.kwargs["name"] for c in mcp_cls.return_value.tool.call_args_list]
    assert "create_copy_trading" in names
