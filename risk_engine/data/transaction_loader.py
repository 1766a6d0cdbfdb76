"""Transaction feed loader - reads the materialized transaction collection from JSON"""

import pandas as pd
from pathlib import Path
from typing import List, Optional
from datetime import datetime
import os
from pydantic import ValidationError
from risk_engine.models.transaction import Transaction
from risk_engine.utils.errors import DataLoadError
from risk_engine.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TRANSACTIONS_FILE = "data/sample_transactions.json"


class TransactionLoader:
    """
    Loads transactions from a JSON array of records (the shape returned by
    the transactions endpoint) and validates them into Transaction models.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Args:
            path: JSON file with transaction records (defaults to TRANSACTIONS_FILE)
        """
        if path is None:
            path = os.getenv("TRANSACTIONS_FILE", DEFAULT_TRANSACTIONS_FILE)

        self.path = Path(path)
        if not self.path.exists():
            raise DataLoadError(f"Transaction file not found: {path}")

        self._transactions: Optional[List[Transaction]] = None
        self.rejected_count = 0

    def _load_frame(self) -> pd.DataFrame:
        """Read the raw records, with nulls normalized to None"""
        try:
            df = pd.read_json(self.path, orient='records', dtype=False, convert_dates=False)
        except ValueError as e:
            raise DataLoadError(f"Invalid transaction JSON in {self.path}: {e}")

        if df.empty:
            return df

        # NaN -> None so that an absent risk score stays "no signal"
        df = df.astype(object).where(pd.notna(df), None)
        logger.info(f"Loaded {len(df)} records from {self.path.name}")
        return df

    @property
    def transactions(self) -> List[Transaction]:
        """Load and cache validated transactions"""
        if self._transactions is None:
            df = self._load_frame()
            records = df.to_dict('records') if not df.empty else []

            transactions = []
            for row in records:
                # Keys missing from a record come back as None; let model defaults apply
                record = {key: value for key, value in row.items() if value is not None}
                try:
                    transactions.append(Transaction.model_validate(record))
                except ValidationError as e:
                    self.rejected_count += 1
                    logger.warning(
                        "Rejected malformed transaction record",
                        txn_id=record.get('id'),
                        errors=e.error_count()
                    )

            self._transactions = transactions
        return self._transactions

    def get_transactions(
        self,
        since: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        """
        Transactions with optional filtering

        Args:
            since: Only return transactions created at or after this time
            limit: Maximum number of transactions to return

        Returns:
            List of transactions in feed order
        """
        result = self.transactions

        if since is not None:
            result = [t for t in result if t.created_at is not None and t.created_at >= since]

        if limit is not None:
            result = result[:limit]

        logger.info(f"Retrieved {len(result)} transactions")
        return list(result)


def load_transactions(path: Optional[str] = None) -> List[Transaction]:
    """Convenience wrapper returning every valid transaction in the file"""
    return TransactionLoader(path).get_transactions()
