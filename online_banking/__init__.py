"""
Online Banking Ledger

A minimal banking ledger with per-account locking, atomic two-account
transfers, integer minor-unit balances and an append-only entry history.
"""

__version__ = "1.0.0"
