"""
BalanceProbe: one balance-fetch attempt for one address.

Returns facts only: a ProbeResult on success (including "account does not exist",
which is a zero balance) or a ProbeFailure for any other outcome. Deciding whether
a result means a new token account or a balance change is the cycle's job.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import Decimal

from solders.pubkey import Pubkey

from balance_watch.core.exceptions import LedgerError
from balance_watch.ledger.client import LedgerClient
from balance_watch.ledger.token_accounts import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    derive_associated_token_address,
)
from balance_watch.watch_logging import bind_address, get_logger

logger = get_logger(__name__)

ZERO = Decimal(0)


@dataclass(frozen=True)
class ProbeResult:
    """Successful probe. token_account is None when the account does not exist."""

    address: str
    balance: Decimal
    token_account: str | None
    account_exists: bool

    ok = True


@dataclass(frozen=True)
class ProbeFailure:
    """Failed probe; never to be read as a zero balance."""

    address: str
    error: str

    ok = False
    balance = None
    token_account = None


class BalanceProbe:
    """Probe the associated token account of an address for the configured mint."""

    def __init__(
        self,
        ledger: LedgerClient,
        token_mint: Pubkey | str,
        *,
        decimals: int = 6,
        timeout_sec: float | None = None,
        token_program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
        associated_token_program_id: Pubkey = ASSOCIATED_TOKEN_PROGRAM_ID,
    ) -> None:
        self._ledger = ledger
        self._mint = token_mint if isinstance(token_mint, Pubkey) else Pubkey.from_string(token_mint)
        self._decimals = decimals
        self._timeout = timeout_sec
        self._token_program_id = token_program_id
        self._ata_program_id = associated_token_program_id

    def token_account_for(self, address: str) -> Pubkey:
        """Derive the token account location for address; pure, no I/O."""
        return derive_associated_token_address(
            Pubkey.from_string(address),
            self._mint,
            self._token_program_id,
            self._ata_program_id,
        )

    async def probe(self, address: str) -> ProbeResult | ProbeFailure:
        log = bind_address(address)
        try:
            token_account = self.token_account_for(address)
            fetch = self._ledger.fetch_token_account(token_account, self._token_program_id)
            if self._timeout is not None:
                state = await asyncio.wait_for(fetch, timeout=self._timeout)
            else:
                state = await fetch
        except asyncio.TimeoutError:
            log.warning("probe_timeout", timeout_sec=self._timeout)
            return ProbeFailure(address, f"probe timed out after {self._timeout}s")
        except LedgerError as e:
            log.warning("probe_failed", error=str(e))
            return ProbeFailure(address, str(e))
        except Exception as e:
            log.exception("probe_unexpected_error", error=str(e))
            return ProbeFailure(address, str(e))

        if state is None:
            log.info("probe_account_not_found", token_account=str(token_account))
            return ProbeResult(address, ZERO, None, False)

        balance = state.ui_amount(self._decimals)
        log.info(
            "probe_ok",
            token_account=state.address,
            balance=balance,
            mint=state.mint,
            state=state.state,
        )
        return ProbeResult(address, balance, state.address, True)
