"""
Ledger access package.

Derives associated token accounts for the watched mint, fetches them over
Solana JSON-RPC, and decodes the raw account data into TokenAccountState.
"""

from balance_watch.ledger.client import LedgerClient, SolanaLedgerClient
from balance_watch.ledger.models import TokenAccountState
from balance_watch.ledger.token_accounts import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    decode_token_account,
    derive_associated_token_address,
)

__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "LedgerClient",
    "SolanaLedgerClient",
    "TOKEN_2022_PROGRAM_ID",
    "TokenAccountState",
    "decode_token_account",
    "derive_associated_token_address",
]
