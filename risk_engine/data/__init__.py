"""Transaction feed loading"""

from .transaction_loader import load_transactions, TransactionLoader

__all__ = ['load_transactions', 'TransactionLoader']
