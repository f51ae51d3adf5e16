import json

from observability.logging import build_log_context, log_event, redact


def test_redact_removes_sensitive_keys():
    inp = {
        "api_key": "abc",
        "nested": {"password": "p", "ok": 1},
        "tokenValue": "t",
        "safe": "x",
        "items": [{"secret": "s"}],
    }
    out = redact(inp)
    assert out["api_key"] == "***REDACTED***"
    assert out["nested"]["password"] == "***REDACTED***"
    assert out["tokenValue"] == "***REDACTED***"
    assert out["items"][0]["secret"] == "***REDACTED***"
    assert out["safe"] == "x"


def test_log_event_writes_json_to_stderr(monkeypatch, capsys):
    monkeypatch.setenv("DBOT_LOG_LEVEL", "info")
    ctx = build_log_context(tool="create_migrate_order", request_id="r-1")
    log_event("tool_start", ctx=ctx, data={"apiKey": "k", "adapter": "conditional-order"})

    captured = capsys.readouterr()
    assert captured.out == ""
    line = json.loads(captured.err.strip())
    assert line["event"] == "tool_start"
    assert line["level"] == "INFO"
    assert line["request_id"] == "r-1"
    assert line["data"]["apiKey"] == "***REDACTED***"
    assert line["data"]["adapter"] == "conditional-order"


def test_log_event_respects_min_level(monkeypatch, capsys):
    monkeypatch.setenv("DBOT_LOG_LEVEL", "warn")
    log_event("api_request", ctx=build_log_context(tool="t"), level="debug")
    log_event("api_logical_error", ctx=build_log_context(tool="t"), level="warn")
    lines = [l for l in capsys.readouterr().err.splitlines() if l]
    assert len(lines) == 1
    assert json.loads(lines[0])["event"] == "api_logical_error"


def test_redact_masks_wallet_ids():
    out = redact({"walletId": "abcdefghijkl", "walletIdList": ["1234567890"], "pair": "P"})
    assert out == {"walletId": "abcdefgh***", "walletIdList": ["12345678***"], "pair": "P"}


def test_tool_context_is_scoped():
    from observability.logging import get_current_context, tool_context

    assert get_current_context() is None
    with tool_context("limit_orders", request_id="r-9") as ctx:
        assert get_current_context() is ctx
        assert ctx["tool"] == "limit_orders"
    assert get_current_context() is None
