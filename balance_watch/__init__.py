"""
Balance Watch: Telegram bot that watches token balances on a Solana-compatible ledger.

Polls the associated token account of every tracked address on a fixed
interval, diffs the balance against the last observation, and notifies the
chats that track the address. Modular layout with clear separation between
ledger client, monitor engine, notifier, and bot front end.
"""

__version__ = "0.1.0"
