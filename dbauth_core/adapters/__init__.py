"""Database adapters for DbTable authentication."""

from .base import DIALECT_CONFIG, DbAdapter, get_dialect_config, quote_identifier

__all__ = ["DbAdapter", "DIALECT_CONFIG", "get_dialect_config", "quote_identifier"]
