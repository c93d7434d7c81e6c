"""
Process entrypoint: Telegram bot + periodic balance monitor in one event loop.

Startup: load settings, open the ledger connection, seed balances for the seed
list, schedule MonitorCycle.run_once every POLL_INTERVAL_SECONDS (one instance at
a time), then poll Telegram for commands until SIGINT/SIGTERM.

Usage:
  python -m balance_watch.agent_worker.runtime                # run the bot
  python -m balance_watch.agent_worker.runtime --probe ADDR   # probe addresses once, then exit
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from telegram.ext import Application

from balance_watch.alerts.notifier import TelegramNotifier
from balance_watch.bot.handlers import register_handlers
from balance_watch.config.env import mask_rpc_url
from balance_watch.config.settings import MonitorSettings, get_settings
from balance_watch.core.exceptions import ConfigError
from balance_watch.ledger.client import SolanaLedgerClient
from balance_watch.monitor.cycle import MonitorCycle
from balance_watch.monitor.probe import BalanceProbe
from balance_watch.monitor.registry import SubscriptionRegistry
from balance_watch.monitor.store import BalanceStore
from balance_watch.watch_logging import get_logger

logger = get_logger(__name__)

CYCLE_JOB_ID = "balance_monitor_cycle"


def build_probe(settings: MonitorSettings, ledger: SolanaLedgerClient) -> BalanceProbe:
    return BalanceProbe(
        ledger,
        settings.token_mint,
        decimals=settings.token_decimals,
        timeout_sec=settings.probe_timeout_seconds,
    )


def build_scheduler(monitor: MonitorCycle, settings: MonitorSettings) -> AsyncIOScheduler:
    """Interval job for the monitor cycle; max_instances=1 keeps cycles from overlapping."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        monitor.run_once,
        "interval",
        seconds=settings.poll_interval_seconds,
        id=CYCLE_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def build_application(settings: MonitorSettings) -> Application:
    """Wire ledger, monitor, notifier, scheduler and handlers into a telegram Application."""
    ledger = SolanaLedgerClient(settings.rpc_url, commitment=settings.commitment)
    registry = SubscriptionRegistry()
    store = BalanceStore()
    scheduler_ref: dict[str, AsyncIOScheduler] = {}

    async def post_init(application: Application) -> None:
        seeded = await monitor.seed(settings.seed_addresses)
        logger.info("runtime_seeded", seeded=seeded, requested=len(settings.seed_addresses))
        scheduler = build_scheduler(monitor, settings)
        scheduler.start()
        scheduler_ref["scheduler"] = scheduler
        logger.info("runtime_monitor_scheduled", interval_sec=settings.poll_interval_seconds)

    async def post_shutdown(application: Application) -> None:
        scheduler = scheduler_ref.get("scheduler")
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
        await ledger.close()
        logger.info("runtime_stopped")

    application = (
        Application.builder()
        .token(settings.bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    notifier = TelegramNotifier(application.bot, token_symbol=settings.token_symbol)
    monitor = MonitorCycle(
        registry,
        store,
        build_probe(settings, ledger),
        notifier,
        max_concurrent_probes=settings.max_concurrent_probes,
    )
    register_handlers(application, monitor, token_symbol=settings.token_symbol)
    return application


async def probe_addresses(settings: MonitorSettings, addresses: list[str]) -> int:
    """Probe each address once and log the result. Returns number of failures."""
    failures = 0
    async with SolanaLedgerClient(settings.rpc_url, commitment=settings.commitment) as ledger:
        probe = build_probe(settings, ledger)
        for address in addresses:
            result = await probe.probe(address)
            if result.ok:
                logger.info(
                    "runtime_probe_result",
                    address=address,
                    balance=result.balance,
                    token_account=result.token_account,
                    symbol=settings.token_symbol,
                )
            else:
                failures += 1
                logger.warning("runtime_probe_result_failed", address=address, error=result.error)
    return failures


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: load settings from env and run the bot, or probe once."""
    parser = argparse.ArgumentParser(description="Watch token balances and notify Telegram chats.")
    parser.add_argument(
        "--probe",
        nargs="+",
        metavar="ADDRESS",
        help="Probe the given addresses once, log balances, then exit.",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    try:
        settings.validate(require_bot_token=not args.probe)
    except ConfigError as e:
        logger.error("runtime_config_error", error=str(e))
        return 2

    logger.info(
        "runtime_starting",
        rpc_url=mask_rpc_url(settings.rpc_url),
        token_mint=settings.token_mint,
        seed_count=len(settings.seed_addresses),
        poll_interval_sec=settings.poll_interval_seconds,
    )

    if args.probe:
        failures = asyncio.run(probe_addresses(settings, args.probe))
        return 1 if failures else 0

    try:
        application = build_application(settings)
        # run_polling installs SIGINT/SIGTERM handlers and runs post_init/post_shutdown
        application.run_polling(drop_pending_updates=True)
        return 0
    except KeyboardInterrupt:
        logger.info("runtime_shutdown_signal")
        return 0
    except Exception as e:
        logger.exception("runtime_fatal", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
