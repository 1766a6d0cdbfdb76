"""Case lifecycle management for flagged transactions"""

import threading
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Union
from risk_engine.constants import CaseStatus
from risk_engine.models.transaction import Transaction
from risk_engine.utils.errors import InvalidStatus, TransactionNotFoundError
from risk_engine.utils.logging import get_logger
from risk_engine.utils.metrics import case_updates

logger = get_logger(__name__)

VALID_STATUSES = {status.value: status for status in CaseStatus}


def validate_status(status: Union[CaseStatus, str]) -> CaseStatus:
    """
    Return the CaseStatus for status.

    Raises:
        InvalidStatus: If status is not exactly OPEN, PENDING or CLOSED
    """
    if isinstance(status, CaseStatus):
        return status
    if isinstance(status, str) and status in VALID_STATUSES:
        return VALID_STATUSES[status]
    raise InvalidStatus(status)


class CaseLifecycleManager:
    """
    Owns the case fields (status, notes, last update) of transactions.

    Any status can move to any other status; only the value is validated.
    Updates to the same transaction id are serialized with a per-id lock,
    different ids never wait on each other.
    """

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.clock = clock
        self._transactions: Dict[int, Transaction] = {}
        self._locks: Dict[int, threading.Lock] = {}
        self._registry_lock = threading.Lock()

        if transactions is not None:
            self.register(transactions)

    def register(self, transactions: Iterable[Transaction]) -> None:
        """Make transactions addressable by id"""
        with self._registry_lock:
            for txn in transactions:
                self._transactions[txn.id] = txn

    def get_transaction(self, txn_id: int) -> Transaction:
        """
        Raises:
            TransactionNotFoundError: If no transaction has this id
        """
        try:
            return self._transactions[txn_id]
        except KeyError:
            raise TransactionNotFoundError(f"Transaction not found: {txn_id}")

    def _lock_for(self, txn_id: int) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(txn_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[txn_id] = lock
            return lock

    def set_status(self, transaction: Transaction, new_status: Union[CaseStatus, str]) -> Transaction:
        """
        Set the case status and stamp last_updated.

        Raises:
            InvalidStatus: If new_status is unrecognized; the transaction is untouched
        """
        return self.update_case(transaction, status=validate_status(new_status))

    def append_note(self, transaction: Transaction, text: str) -> Transaction:
        """Append a note as given; empty or whitespace-only text is ignored"""
        return self.update_case(transaction, note=text)

    def update_case(
        self,
        transaction: Transaction,
        status: Optional[Union[CaseStatus, str]] = None,
        note: Optional[str] = None
    ) -> Transaction:
        """
        Apply a status change and/or a note in one critical section.

        The status is validated before anything is modified.
        """
        new_status = validate_status(status) if status is not None else None
        has_note = bool(note and note.strip())

        if new_status is None and not has_note:
            return transaction

        with self._lock_for(transaction.id):
            if new_status is not None:
                previous = transaction.case_status
                transaction.case_status = new_status
                case_updates.labels(kind="status").inc()
                logger.info(
                    "Case status changed",
                    txn_id=transaction.id,
                    previous=previous.value,
                    status=new_status.value
                )

            if has_note:
                transaction.case_notes.append(note)
                case_updates.labels(kind="note").inc()
                logger.info("Case note added", txn_id=transaction.id, note_count=len(transaction.case_notes))

            transaction.last_updated = self.clock()

        return transaction

    def set_status_by_id(self, txn_id: int, new_status: Union[CaseStatus, str]) -> Transaction:
        return self.set_status(self.get_transaction(txn_id), new_status)

    def append_note_by_id(self, txn_id: int, text: str) -> Transaction:
        return self.append_note(self.get_transaction(txn_id), text)
