from __future__ import annotations

from typing import Mapping

from app.core.config import WALLET_ENV_VARS
from common.errors import ConfigurationError

# chain -> wallet slot used when no chain-specific id is configured
_FAMILY_FALLBACK = {
    "solana": "DBOT_WALLET_ID_SOLANA",
    "ethereum": "DBOT_WALLET_ID_EVM",
    "base": "DBOT_WALLET_ID_EVM",
    "bsc": "DBOT_WALLET_ID_EVM",
    "arbitrum": "DBOT_WALLET_ID_EVM",
    "tron": "DBOT_WALLET_ID_TRON",
}


def resolve_wallet_id(chain: str, wallet_ids: Mapping[str, str]) -> str:
    """
    Pick the wallet to trade with on `chain`.

    Lookup order: DBOT_WALLET_ID_<CHAIN>, then the chain family slot
    (solana / shared EVM / tron). Unknown chains fall back to the EVM slot.
    """
    chain_key = str(chain or "solana").strip().lower()
    specific = wallet_ids.get(f"DBOT_WALLET_ID_{chain_key.upper()}")
    if specific:
        return specific

    fallback = wallet_ids.get(_FAMILY_FALLBACK.get(chain_key, "DBOT_WALLET_ID_EVM"))
    if fallback:
        return fallback

    raise ConfigurationError(
        f"No wallet ID configured for chain {chain_key}. Please configure at least one of the "
        f"following environment variables: {', '.join(WALLET_ENV_VARS)}",
        {"chain": chain_key, "accepted": list(WALLET_ENV_VARS)},
    )


def validate_wallet_config(wallet_ids: Mapping[str, str]) -> None:
    if not any(wallet_ids.get(key) for key in WALLET_ENV_VARS):
        raise ConfigurationError(
            "At least one wallet ID must be configured. Please set one of the following "
            f"environment variables: {', '.join(WALLET_ENV_VARS)}",
            {"accepted": list(WALLET_ENV_VARS)},
        )


def mask_wallet_id(wallet_id: str) -> str:
    return f"{str(wallet_id)[:8]}***"
