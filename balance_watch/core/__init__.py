"""
Core utilities: error taxonomy shared by ledger client, monitor, notifier and bot.
"""
