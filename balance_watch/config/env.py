"""
Environment variable loading for Balance Watch.

- SOLANA_RPC_URL: RPC endpoint of the ledger (Eclipse mainnet by default)
- TOKEN_MINT_ADDRESS: Token-2022 mint whose balance is watched
- TELEGRAM_BOT_TOKEN: bot credential (TELEGRAM_TOKEN accepted as fallback)
- SEED_ADDRESSES: comma-separated addresses seeded at startup
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is balance_watch/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

ECLIPSE_MAINNET_RPC_URL = "https://mainnetbeta-rpc.eclipse.xyz"


def load_watch_env() -> None:
    """Load .env from project root (and cwd). Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)
    load_dotenv()


def get_rpc_url() -> str:
    """Resolve RPC URL from env. Order: SOLANA_RPC_URL > ECLIPSE_RPC_URL > Eclipse mainnet."""
    load_watch_env()
    url = (os.getenv("SOLANA_RPC_URL") or os.getenv("ECLIPSE_RPC_URL") or "").strip()
    return url or ECLIPSE_MAINNET_RPC_URL


def get_token_mint() -> str:
    """Return TOKEN_MINT_ADDRESS from env; empty string when unset."""
    load_watch_env()
    return (os.getenv("TOKEN_MINT_ADDRESS") or os.getenv("SPL_TOKEN_MINT_ADDRESS") or "").strip()


def get_bot_token() -> str:
    """Return the Telegram bot token; empty string when unset."""
    load_watch_env()
    return (os.getenv("TELEGRAM_BOT_TOKEN") or os.getenv("TELEGRAM_TOKEN") or "").strip()


def get_seed_addresses() -> list[str]:
    """Return SEED_ADDRESSES split on commas, blanks dropped, order and duplicates preserved."""
    load_watch_env()
    raw = os.getenv("SEED_ADDRESSES", "")
    return [a.strip() for a in raw.split(",") if a.strip()]


def mask_rpc_url(rpc: str) -> str:
    """Hide API keys embedded in RPC URLs before logging them."""
    if "api-key=" in rpc:
        return rpc.split("api-key=")[0] + "api-key=***"
    return rpc
