"""Structured logging package."""

from src.logs.logger import LedgerLogger, configure_logging, get_logger

__all__ = ["LedgerLogger", "configure_logging", "get_logger"]
