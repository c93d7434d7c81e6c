"""
Main entrypoint: Telegram bot and balance monitor in a single process.

Env: TELEGRAM_BOT_TOKEN, TOKEN_MINT_ADDRESS, SOLANA_RPC_URL, SEED_ADDRESSES,
POLL_INTERVAL_SECONDS, etc. (see README / .env.example).
"""

import sys

# Configure structured logging before other imports that may log
from balance_watch.watch_logging import get_logger

logger = get_logger("main")


def main() -> int:
    """Run the bot until SIGINT/SIGTERM."""
    from balance_watch.agent_worker.runtime import main as run

    logger.info("main_starting")
    return run()


if __name__ == "__main__":
    sys.exit(main())
