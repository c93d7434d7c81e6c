"""Wallet validation utilities."""

from solders.pubkey import Pubkey

from balance_watch.core.exceptions import InvalidAddress


def parse_address(w: str) -> Pubkey:
    """Parse w as a Solana public key; raise InvalidAddress if it is not one."""
    if w is None or not str(w).strip():
        raise InvalidAddress(str(w or ""), "address must be non-empty")
    try:
        return Pubkey.from_string(str(w).strip())
    except Exception as e:
        raise InvalidAddress(str(w), str(e)) from e
