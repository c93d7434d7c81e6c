"""
Application-level exceptions.

InvalidAddress is surfaced to the requesting chat; LedgerError is wrapped into a
ProbeFailure by the probe and only logged; NotificationDeliveryError is logged by
dispatch and never retried; ConfigError is fatal for the entrypoint only.
"""

from __future__ import annotations


class BalanceWatchError(Exception):
    """Base class for all Balance Watch errors."""


class ConfigError(BalanceWatchError):
    """Required configuration is missing or malformed."""


class InvalidAddress(BalanceWatchError, ValueError):
    """Address string is not a valid base58 public key."""

    def __init__(self, address: str, reason: str | None = None) -> None:
        self.address = address
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid Solana address {address!r}{detail}")


class LedgerError(BalanceWatchError):
    """Ledger RPC call failed (transport, RPC error, or unusable response)."""


class InvalidTokenAccount(LedgerError):
    """Account exists but is not a token account of the expected program or mint."""


class NotificationDeliveryError(BalanceWatchError):
    """Notification sink rejected or failed to send a message."""
