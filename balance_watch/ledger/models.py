"""
Data models for ledger client output.

TokenAccountState mirrors the base (165-byte) SPL token account layout, which
Token-2022 accounts share before any extension data.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TokenAccountState:
    """
    Decoded token account as returned by fetch_token_account.

    amount is the raw integer amount; use ui_amount(decimals) for the
    normalized balance.
    """

    address: str
    mint: str
    owner: str
    amount: int
    delegate: str | None
    state: int  # 0 uninitialized, 1 initialized, 2 frozen
    delegated_amount: int
    close_authority: str | None

    def ui_amount(self, decimals: int) -> Decimal:
        """Raw amount divided by 10^decimals, exact."""
        return Decimal(self.amount).scaleb(-decimals)
