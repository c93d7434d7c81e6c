"""
Associated token account derivation and token account decoding.

derive_associated_token_address is a pure function of (owner, mint, token
program, associated-token program); no RPC. decode_token_account applies the
same size/type/owner checks as the SPL token client before reading fields.
"""

from __future__ import annotations

import struct

from solders.pubkey import Pubkey

from balance_watch.core.exceptions import InvalidTokenAccount, LedgerError
from balance_watch.ledger.models import TokenAccountState

TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

# Base account layout (bytes): mint 32 | owner 32 | amount 8 | delegate COption 36 |
# state 1 | is_native COption 12 | delegated_amount 8 | close_authority COption 36
ACCOUNT_SIZE = 165
MULTISIG_SIZE = 355
ACCOUNT_TYPE_ACCOUNT = 2
MINT_OFFSET = 0
OWNER_OFFSET = 32
AMOUNT_OFFSET = 64
DELEGATE_OFFSET = 72
STATE_OFFSET = 108
DELEGATED_AMOUNT_OFFSET = 121
CLOSE_AUTHORITY_OFFSET = 129


class OwnerOffCurve(LedgerError):
    """Owner is a program-derived address; its associated token account is not derived."""


def derive_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
    associated_token_program_id: Pubkey = ASSOCIATED_TOKEN_PROGRAM_ID,
    *,
    allow_owner_off_curve: bool = False,
) -> Pubkey:
    """
    Return the associated token account address for (owner, mint).

    Seeds: [owner, token_program_id, mint]; program: associated token program.
    Raises OwnerOffCurve for PDA owners unless allow_owner_off_curve is set.
    """
    if not allow_owner_off_curve and not owner.is_on_curve():
        raise OwnerOffCurve(f"Owner {owner} is off curve")
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(token_program_id), bytes(mint)],
        associated_token_program_id,
    )
    return address


def _read_pubkey(data: bytes, offset: int) -> str:
    return str(Pubkey.from_bytes(data[offset : offset + 32]))


def _read_coption_pubkey(data: bytes, offset: int) -> str | None:
    (tag,) = struct.unpack_from("<I", data, offset)
    if tag == 0:
        return None
    return _read_pubkey(data, offset + 4)


def decode_token_account(
    address: Pubkey | str,
    data: bytes,
    account_owner: Pubkey,
    token_program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> TokenAccountState:
    """
    Decode raw account data into TokenAccountState.

    Raises InvalidTokenAccount when the account is owned by another program,
    is too short, is a multisig, or carries a non-account type byte.
    """
    if account_owner != token_program_id:
        raise InvalidTokenAccount(
            f"Account {address} is owned by {account_owner}, expected {token_program_id}"
        )
    if len(data) < ACCOUNT_SIZE:
        raise InvalidTokenAccount(f"Account {address} data too short: {len(data)} bytes")
    if len(data) > ACCOUNT_SIZE:
        if len(data) == MULTISIG_SIZE:
            raise InvalidTokenAccount(f"Account {address} is a multisig account")
        if data[ACCOUNT_SIZE] != ACCOUNT_TYPE_ACCOUNT:
            raise InvalidTokenAccount(f"Account {address} has account type {data[ACCOUNT_SIZE]}")

    (amount,) = struct.unpack_from("<Q", data, AMOUNT_OFFSET)
    (delegated_amount,) = struct.unpack_from("<Q", data, DELEGATED_AMOUNT_OFFSET)
    return TokenAccountState(
        address=str(address),
        mint=_read_pubkey(data, MINT_OFFSET),
        owner=_read_pubkey(data, OWNER_OFFSET),
        amount=amount,
        delegate=_read_coption_pubkey(data, DELEGATE_OFFSET),
        state=data[STATE_OFFSET],
        delegated_amount=delegated_amount,
        close_authority=_read_coption_pubkey(data, CLOSE_AUTHORITY_OFFSET),
    )
