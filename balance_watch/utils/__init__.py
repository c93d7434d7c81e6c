"""Shared helpers: address validation."""
