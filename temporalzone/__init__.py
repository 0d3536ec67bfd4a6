"""Delegation history records and auto-compounding setting types for staking."""

__version__ = "0.1.0"