"""
Transaction Tracker - Source Package

A small personal finance tracker: record income and expenses,
see a running balance, keep the records in a remote store.

DESIGN PRINCIPLES:
1. Balance is always derived, never stored
2. Validate before any write
3. Re-fetch after every write
4. Storage errors are shown, not crashed on
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Transaction Tracker Team"
