"""
Solana JSON-RPC ledger client.

Thin wrapper over solana-py's AsyncClient: one shared connection, read-only,
used by every probe. fetch_token_account returns None when the account does
not exist and raises LedgerError for every other failure.
"""

from __future__ import annotations

from typing import Protocol

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solders.pubkey import Pubkey

from balance_watch.core.exceptions import LedgerError
from balance_watch.ledger.models import TokenAccountState
from balance_watch.ledger.token_accounts import TOKEN_2022_PROGRAM_ID, decode_token_account
from balance_watch.watch_logging import get_logger

logger = get_logger(__name__)

DEFAULT_REQUEST_TIMEOUT_SEC = 30.0


class LedgerClient(Protocol):
    """Account-fetch primitive the probe depends on."""

    async def fetch_token_account(
        self,
        token_account: Pubkey,
        program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
    ) -> TokenAccountState | None:
        ...


class SolanaLedgerClient:
    """
    Ledger client over a single AsyncClient connection.

    Use as an async context manager or call close() on shutdown.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        client: AsyncClient | None = None,
    ) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url.strip()
        self._commitment = Commitment(commitment)
        self._client = client or AsyncClient(
            self._rpc_url,
            commitment=self._commitment,
            timeout=request_timeout_sec,
        )

    async def __aenter__(self) -> "SolanaLedgerClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    async def fetch_token_account(
        self,
        token_account: Pubkey,
        program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
    ) -> TokenAccountState | None:
        """Fetch and decode one token account; None if it does not exist."""
        try:
            resp = await self._client.get_account_info(
                token_account,
                commitment=self._commitment,
                encoding="base64",
            )
        except (SolanaRpcException, RPCException, httpx.HTTPError) as e:
            raise LedgerError(f"getAccountInfo failed for {token_account}: {e}") from e

        account = resp.value
        if account is None:
            logger.debug("ledger_account_not_found", token_account=str(token_account))
            return None
        return decode_token_account(token_account, bytes(account.data), account.owner, program_id)
