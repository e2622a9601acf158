from typing import Dict, Optional

from models import LedgerEntry


class DuplicateTransactionError(Exception):
    def __init__(self, transaction_id: int):
        super().__init__(f"transaction {transaction_id} is already recorded")
        self.transaction_id = transaction_id


class Ledger:
    """
    History of applied deposits and withdrawals, keyed by transaction id.
    Entries are never removed, so a charged back transaction cannot be disputed again.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}

    def record(self, entry: LedgerEntry) -> None:
        """Store a new entry. Transaction ids must be unique."""
        if entry.transaction_id in self._entries:
            raise DuplicateTransactionError(entry.transaction_id)
        self._entries[entry.transaction_id] = entry

    def find(self, transaction_id: int) -> Optional[LedgerEntry]:
        """Retrieve stored entry by ID."""
        return self._entries.get(transaction_id)

    def set_disputed(self, transaction_id: int, disputed: bool) -> None:
        entry = self._entries.get(transaction_id)
        if entry is not None:
            entry.disputed = disputed

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
