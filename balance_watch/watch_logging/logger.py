"""
Structured logging for the balance monitor.

Every record carries event_type, level, timestamp and the module logger name.
Balances are logged as Decimal and rendered as plain strings without trailing
zeros ("7.5", not "7.500000" or "7.5E+0"), so a store write, the probe that
produced it and the chat message it triggers all show the same figure.
Subscriber ids (Telegram chat ids) are rendered as strings so JSON consumers
see one type for the key.

LOG_LEVEL picks the threshold, LOG_FORMAT=json|console the renderer.
Stdlib logging and structlog only; no balance_watch imports.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Hashable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

SUBSCRIBER_KEYS = ("subscriber", "subscribers")


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _event_type(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def render_amount(value: Decimal) -> str:
    """Plain decimal without trailing zeros or exponent: 7.500000 -> 7.5, 0E-6 -> 0."""
    if not value.is_finite():
        return str(value)
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "") else text


def _render_domain_values(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Decimal amounts to plain strings; subscriber ids to strings."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = render_amount(value)
    for key in SUBSCRIBER_KEYS:
        value = event_dict.get(key)
        if isinstance(value, (list, tuple, set, frozenset)):
            event_dict[key] = sorted(str(v) for v in value)
        elif value is not None:
            event_dict[key] = str(value)
    return event_dict


def build_processors(log_format: str = LOG_FORMAT) -> list[Any]:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _event_type,
        _render_domain_values,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_structlog(log_format: str = LOG_FORMAT, level: int = LOG_LEVEL_VALUE) -> None:
    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Structured logger for a module.

        logger = get_logger(__name__)
        logger.info("store_balance_changed", address=addr, previous=Decimal("5"), current=Decimal("7.5"))

    JSON: {"event_type": "store_balance_changed", "address": "...", "previous": "5", "current": "7.5", ...}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_address(address: str) -> structlog.BoundLogger:
    """Logger with the watched address bound."""
    return get_logger("balance_watch.address").bind(address=address)


def bind_subscriber(subscriber: Hashable) -> structlog.BoundLogger:
    """Logger with the chat (subscriber) id bound."""
    return get_logger("balance_watch.subscriber").bind(subscriber=subscriber)
