"""
Agent worker package: process orchestration.

Runs the Telegram bot and the periodic monitor cycle in one event loop and
coordinates startup seeding and shutdown.
"""

from balance_watch.agent_worker.runtime import build_application, main

__all__ = ["build_application", "main"]
