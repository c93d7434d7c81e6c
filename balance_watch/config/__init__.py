"""
Configuration management for Balance Watch.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for all service configuration.
"""

from balance_watch.config.settings import MonitorSettings, get_settings  # noqa: F401

__all__ = ["MonitorSettings", "get_settings"]
