"""Ledger event logging package."""

from expense_ledger.events.logger import EventLogger, configure_logging

__all__ = ["EventLogger", "configure_logging"]
