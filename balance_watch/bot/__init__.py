"""
Telegram bot front end: /start and /add commands.
"""

from balance_watch.bot.handlers import add, register_handlers, start

__all__ = ["add", "register_handlers", "start"]
