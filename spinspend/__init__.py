"""
SpinSpend - Source Package

A personal finance tracker for discretionary expenses and recurring
subscriptions.

DESIGN PRINCIPLES:
1. "Now" is always passed in, never read from a global clock
2. Invalid records are rejected before they touch the ledger
3. Subscriptions are charged at most once per calendar month
4. Every mutation is auditable
5. Storage is swappable (in-memory today)
"""

__version__ = "1.0.0"
__author__ = "SpinSpend Team"
