"""
Structured logging for Balance Watch.

Use get_logger() in all modules so probe, cycle and delivery logs share one format.
"""

from balance_watch.watch_logging.logger import bind_address, bind_subscriber, get_logger, render_amount

__all__ = ["bind_address", "bind_subscriber", "get_logger", "render_amount"]
