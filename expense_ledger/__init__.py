"""
Expense Ledger - Source Package

The state engine of a personal expense tracker: an in-memory ledger of
expenses, write-through persisted as one versioned JSON document, with
totals recomputed on every read.

DESIGN PRINCIPLES:
1. Amounts are exact (Decimal cents)
2. Every change is saved, in order
3. Unreadable saved state never stops the app from starting
4. No global state: the ledger is built and passed around
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
