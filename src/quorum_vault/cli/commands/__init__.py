"""CLI command modules."""
from . import networks, transactions, wallets

__all__ = ["networks", "transactions", "wallets"]
