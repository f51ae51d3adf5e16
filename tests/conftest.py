import os
import sys
from unittest.mock import MagicMock

import pytest

# Add root directory to sys.path to allow imports from top-level modules
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Set environment variables BEFORE modules are imported
os.environ["DBOT_API_KEY"] = "test-api-key"
os.environ["DBOT_WALLET_ID_SOLANA"] = "sol-wallet-0001"
os.environ["DBOT_LOG_LEVEL"] = "error"

DOCS = "https://dbotx.com/docs"


def make_response(payload, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def ok(res=None):
    return make_response({"err": False, "res": res if res is not None else {}, "docs": DOCS})


def api_err(res=None):
    return make_response({"err": True, "res": res, "docs": DOCS})


@pytest.fixture
def settings():
    from app.core.config import Settings

    return Settings.from_env(
        {
            "DBOT_API_KEY": "test-api-key",
            "DBOT_WALLET_ID_SOLANA": "sol-wallet-0001",
            "DBOT_WALLET_ID_EVM": "evm-wallet-0001",
        }
    )


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    s.request.return_value = ok()
    return s


@pytest.fixture
def client(settings, session):
    from execution.dbot_service import DbotClient

    return DbotClient(settings, session=session)


@pytest.fixture
def make_dispatcher(settings, session):
    from app.core.container import Container

    def _make(adapter):
        return Container(settings, adapter=adapter, session=session).dispatcher

    return _make


def sent(session, index=-1):
    """(method, url, json body, params) of a recorded session.request call."""
    call = session.request.call_args_list[index]
    method, url = call.args[0], call.args[1]
    return method, url, call.kwargs.get("json"), call.kwargs.get("params")


def text_of(result):
    return result["content"][0]["text"]
