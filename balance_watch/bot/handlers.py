"""
Telegram command handlers: /start and /add <address>.

The MonitorCycle lives in application.bot_data["monitor"]; handlers only parse
the command, call into the monitor, and reply.
"""

from __future__ import annotations

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from balance_watch.core.exceptions import InvalidAddress
from balance_watch.monitor.cycle import MonitorCycle
from balance_watch.monitor.events import format_amount
from balance_watch.watch_logging import bind_subscriber, get_logger

logger = get_logger(__name__)

MONITOR_KEY = "monitor"
SYMBOL_KEY = "token_symbol"

WELCOME_TEXT = "Welcome! Use /add <address> to add a Solana address to track {symbol} token balance."
USAGE_TEXT = "Please provide an address: /add <address>"
INVALID_TEXT = "Invalid Solana address. Please try again."


def _symbol(context: ContextTypes.DEFAULT_TYPE) -> str:
    return context.application.bot_data.get(SYMBOL_KEY, "ES")


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat_id = update.effective_chat.id
    bind_subscriber(chat_id).info("bot_start_command")
    await update.effective_message.reply_text(WELCOME_TEXT.format(symbol=_symbol(context)))


async def add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat_id = update.effective_chat.id
    address = context.args[0].strip() if context.args else ""
    log = bind_subscriber(chat_id)
    log.info("bot_add_command", address=address)

    if not address:
        await update.effective_message.reply_text(USAGE_TEXT)
        return

    monitor: MonitorCycle = context.application.bot_data[MONITOR_KEY]
    try:
        outcome = await monitor.subscribe(chat_id, address)
    except InvalidAddress as e:
        log.info("bot_add_invalid_address", address=address, error=str(e))
        await update.effective_message.reply_text(INVALID_TEXT)
        return

    text = f"Added address {outcome.address} for tracking."
    if outcome.probe.ok:
        text += f"\nCurrent balance: {format_amount(outcome.probe.balance)} {_symbol(context)}"
    await update.effective_message.reply_text(text)
    if outcome.events:
        await monitor.notify(outcome.events)


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    update_type = type(update).__name__ if update is not None else None
    logger.error("bot_handler_error", update_type=update_type, error=str(context.error))


def register_handlers(application: Application, monitor: MonitorCycle, *, token_symbol: str = "ES") -> None:
    """Attach command handlers and the monitor to the application."""
    application.bot_data[MONITOR_KEY] = monitor
    application.bot_data[SYMBOL_KEY] = token_symbol
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("add", add))
    application.add_error_handler(on_error)
