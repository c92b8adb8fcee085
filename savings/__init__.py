"""Savings portfolio backend: ledger sync and portfolio valuation."""

__version__ = "1.0.0"
