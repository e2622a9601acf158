import logging
from typing import Dict, Iterable, List, Optional

from ledger import Ledger
from models import (
    AccountSnapshot,
    ClientAccount,
    LedgerEntry,
    ProcessingStats,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Applies transactions to client accounts in arrival order.

    Rejected transactions are logged and skipped; apply() never raises for
    a well-formed transaction. The only visible effect of a rejection is the
    missing balance change.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._ledger = Ledger()
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transactions: Iterable[Transaction]) -> ProcessingStats:
        """Apply every transaction in order and return the running stats."""
        for transaction in transactions:
            self.apply(transaction)
        logger.info(f"Applied: {self._stats.applied}, Ignored: {self._stats.ignored}")
        return self._stats

    def apply(self, transaction: Transaction) -> None:
        account = self._get_or_create_account(transaction.client_id)

        if account.locked:
            logger.info(f"{transaction}: account {account.client_id} is locked, skipping")
            applied = False
        else:
            applied = self._dispatch(account, transaction)

        if applied:
            self._stats.record_applied()
        else:
            self._stats.record_ignored()

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def snapshot(self) -> List[AccountSnapshot]:
        """Return rounded account states, ordered by client id."""
        return [AccountSnapshot.from_account(self._accounts[client_id]) for client_id in sorted(self._accounts)]

    def _get_or_create_account(self, client_id: int) -> ClientAccount:
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def _dispatch(self, account: ClientAccount, transaction: Transaction) -> bool:
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)
            case _:
                return False

    def _check_new_funds_movement(self, transaction: Transaction) -> bool:
        name = transaction.transaction_type.value.capitalize()
        if transaction.amount is None or transaction.amount <= 0:
            logger.warning(f"{name} tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return False

        if transaction.transaction_id in self._ledger:
            logger.warning(f"{name} tx {transaction.transaction_id}: duplicate transaction id, skipping")
            return False

        return True

    def _record(self, transaction: Transaction) -> None:
        self._ledger.record(
            LedgerEntry(
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
                amount=transaction.amount,
                kind=transaction.transaction_type,
            )
        )

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> bool:
        if not self._check_new_funds_movement(transaction):
            return False

        account.credit(transaction.amount)
        self._record(transaction)
        return True

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> bool:
        if not self._check_new_funds_movement(transaction):
            return False

        if account.available < transaction.amount:
            logger.warning(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return False

        account.debit(transaction.amount)
        self._record(transaction)
        return True

    def _find_referenced(self, transaction: Transaction) -> Optional[LedgerEntry]:
        """Look up the entry a dispute, resolve or chargeback refers to."""
        name = transaction.transaction_type.value.capitalize()
        entry = self._ledger.find(transaction.transaction_id)

        if entry is None:
            logger.info(f"{name} for tx {transaction.transaction_id}: transaction not found")
            return None

        if entry.client_id != transaction.client_id:
            logger.warning(
                f"{name} for tx {transaction.transaction_id}: client mismatch "
                f"(expected {entry.client_id}, got {transaction.client_id})"
            )
            return None

        return entry

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> bool:
        entry = self._find_referenced(transaction)
        if entry is None:
            return False

        if entry.disputed:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return False

        # Withdrawals are held the same way as deposits. A dispute may drive
        # available below zero if the funds were already withdrawn.
        account.hold(entry.amount)
        self._ledger.set_disputed(entry.transaction_id, True)
        return True

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> bool:
        entry = self._find_referenced(transaction)
        if entry is None:
            return False

        if not entry.disputed:
            logger.info(f"Resolve for tx {transaction.transaction_id}: transaction is not disputed")
            return False

        account.release_hold(entry.amount)
        self._ledger.set_disputed(entry.transaction_id, False)
        return True

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> bool:
        entry = self._find_referenced(transaction)
        if entry is None:
            return False

        if not entry.disputed:
            logger.info(f"Chargeback for tx {transaction.transaction_id}: transaction is not disputed")
            return False

        # The entry stays disputed; the lock makes any later reference a no-op.
        account.remove_held(entry.amount)
        account.lock()
        logger.info(f"Chargeback for tx {transaction.transaction_id}: account {account.client_id} locked")
        return True
