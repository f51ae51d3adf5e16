import pytest

from app.core.config import Settings, TradeDefaults
from common.errors import ConfigurationError
from common.wallets import mask_wallet_id, resolve_wallet_id, validate_wallet_config


def test_chain_specific_wallet_wins():
    ids = {"DBOT_WALLET_ID_BASE": "base-w", "DBOT_WALLET_ID_EVM": "evm-w"}
    assert resolve_wallet_id("base", ids) == "base-w"
    assert resolve_wallet_id("ethereum", ids) == "evm-w"


def test_family_fallbacks():
    ids = {"DBOT_WALLET_ID_SOLANA": "sol-w", "DBOT_WALLET_ID_TRON": "tron-w", "DBOT_WALLET_ID_EVM": "evm-w"}
    assert resolve_wallet_id("solana", ids) == "sol-w"
    assert resolve_wallet_id("TRON", ids) == "tron-w"
    assert resolve_wallet_id("bsc", ids) == "evm-w"
    assert resolve_wallet_id("somechain", ids) == "evm-w"


def test_missing_wallet_lists_accepted_variables():
    with pytest.raises(ConfigurationError) as exc:
        resolve_wallet_id("tron", {"DBOT_WALLET_ID_SOLANA": "sol-w"})
    assert "No wallet ID configured for chain tron" in exc.value.message
    assert "DBOT_WALLET_ID_TRON" in exc.value.message
    assert "DBOT_WALLET_ID_ARBITRUM" in exc.value.message


def test_validate_wallet_config():
    validate_wallet_config({"DBOT_WALLET_ID_BSC": "w"})
    with pytest.raises(ConfigurationError) as exc:
        validate_wallet_config({})
    assert exc.value.message.startswith("At least one wallet ID must be configured")


def test_mask_wallet_id():
    assert mask_wallet_id("1234567890abc") == "12345678***"


def test_settings_from_env_reads_defaults_and_wallets():
    s = Settings.from_env(
        {
            "DBOT_API_KEY": " key ",
            "DBOT_WALLET_ID_SOLANA": "sol-w",
            "DBOT_WALLET_ID_EVM": "   ",
            "DBOT_MAX_SLIPPAGE": "0.2",
            "DBOT_JITO_ENABLED": "false",
            "DBOT_CHAIN": "base",
        }
    )
    assert s.api_key == "key"
    assert s.wallet_ids == {"DBOT_WALLET_ID_SOLANA": "sol-w"}
    assert s.defaults.max_slippage == 0.2
    assert s.defaults.jito_enabled is False
    assert s.defaults.chain == "base"
    assert s.defaults.expire_delta == 360000000


def test_invalid_env_number_falls_back_to_default():
    d = TradeDefaults.from_env({"DBOT_RETRIES": "many"})
    assert d.retries == 1
