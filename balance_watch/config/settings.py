"""
Application settings for the balance monitor.

Loaded once at startup from environment variables (and .env) and static for
the process lifetime. Required values are checked by validate(); numeric
values are clamped in __post_init__ so a bad env var cannot stall the loop.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from balance_watch.config.env import (
    ECLIPSE_MAINNET_RPC_URL,
    get_bot_token,
    get_rpc_url,
    get_seed_addresses,
    get_token_mint,
)
from balance_watch.core.exceptions import ConfigError

DEFAULT_POLL_INTERVAL_SEC = 10.0
DEFAULT_PROBE_TIMEOUT_SEC = 15.0
DEFAULT_MAX_CONCURRENT_PROBES = 8
DEFAULT_TOKEN_DECIMALS = 6
DEFAULT_TOKEN_SYMBOL = "ES"
DEFAULT_COMMITMENT = "confirmed"
MIN_POLL_INTERVAL_SEC = 1.0
MIN_PROBE_TIMEOUT_SEC = 0.5


@dataclass
class MonitorSettings:
    """
    Static configuration for the monitor and bot.

    token_mint: Token-2022 mint whose balance is watched (exactly one).
    token_decimals: Fixed decimal precision used to normalize raw amounts.
    poll_interval_seconds: Period of the monitor cycle timer.
    probe_timeout_seconds: Upper bound on a single ledger probe.
    max_concurrent_probes: Probes in flight at once within a cycle.
    """

    token_mint: str = ""
    rpc_url: str = ECLIPSE_MAINNET_RPC_URL
    bot_token: str = ""
    seed_addresses: list[str] = field(default_factory=list)
    token_symbol: str = DEFAULT_TOKEN_SYMBOL
    token_decimals: int = DEFAULT_TOKEN_DECIMALS
    commitment: str = DEFAULT_COMMITMENT
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SEC
    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SEC
    max_concurrent_probes: int = DEFAULT_MAX_CONCURRENT_PROBES

    def __post_init__(self) -> None:
        self.poll_interval_seconds = max(MIN_POLL_INTERVAL_SEC, float(self.poll_interval_seconds))
        self.probe_timeout_seconds = max(MIN_PROBE_TIMEOUT_SEC, float(self.probe_timeout_seconds))
        self.max_concurrent_probes = max(1, int(self.max_concurrent_probes))
        self.token_decimals = max(0, int(self.token_decimals))

    def validate(self, *, require_bot_token: bool = True) -> None:
        """Raise ConfigError when a value the process cannot run without is missing."""
        if not self.token_mint:
            raise ConfigError("TOKEN_MINT_ADDRESS is not set")
        if require_bot_token and not self.bot_token:
            raise ConfigError("TELEGRAM_BOT_TOKEN is not set")


def _load_settings_from_env() -> MonitorSettings:
    """Build MonitorSettings from environment with defaults."""
    return MonitorSettings(
        token_mint=get_token_mint(),
        rpc_url=get_rpc_url(),
        bot_token=get_bot_token(),
        seed_addresses=get_seed_addresses(),
        token_symbol=(os.getenv("TOKEN_SYMBOL") or DEFAULT_TOKEN_SYMBOL).strip(),
        token_decimals=int(os.getenv("TOKEN_DECIMALS") or DEFAULT_TOKEN_DECIMALS),
        commitment=(os.getenv("COMMITMENT") or DEFAULT_COMMITMENT).strip().lower(),
        poll_interval_seconds=float(os.getenv("POLL_INTERVAL_SECONDS") or DEFAULT_POLL_INTERVAL_SEC),
        probe_timeout_seconds=float(os.getenv("PROBE_TIMEOUT_SECONDS") or DEFAULT_PROBE_TIMEOUT_SEC),
        max_concurrent_probes=int(os.getenv("MAX_CONCURRENT_PROBES") or DEFAULT_MAX_CONCURRENT_PROBES),
    )


def get_settings() -> MonitorSettings:
    """Return the current application settings, read from the environment."""
    return _load_settings_from_env()
