"""Shop balances, daily ledgers, and wallet transactions from published sheets."""

__version__ = "1.0.0"
