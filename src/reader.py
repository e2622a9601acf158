import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO

from models import MAX_AMOUNT, Transaction, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295


class TransactionParseError(ValueError):
    """A CSV row that cannot be turned into a Transaction."""

    def __init__(self, line_number: int, reason: str):
        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason


def read_transactions_file(filepath: str) -> Iterator[Transaction]:
    """Read CSV file and yield transactions in file order."""
    logger.info(f"Reading transactions from {filepath}")
    with open(filepath, "r", newline="") as f:
        yield from read_transactions(f)


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Parse `type, client, tx, amount` rows from stream.

    Raises TransactionParseError on the first malformed row.
    """
    reader = csv.DictReader(stream)
    for row in reader:
        yield _parse_csv_row(row, reader.line_num)


def _parse_csv_row(row: Dict[Optional[str], str], line_number: int) -> Transaction:
    # DictReader stores surplus fields under the None key
    if None in row:
        raise TransactionParseError(line_number, f"unexpected extra fields {row[None]}")

    normalized = {k.strip(): (v or "").strip() for k, v in row.items()}

    try:
        transaction_type = TransactionType(normalized.get("type", "").lower())
    except ValueError:
        raise TransactionParseError(line_number, f"unknown transaction type {normalized.get('type')!r}")

    client_id = _parse_int(normalized, "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_int(normalized, "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise TransactionParseError(line_number, f"invalid amount {amount_str!r}")
        if not amount.is_finite():
            raise TransactionParseError(line_number, f"invalid amount {amount_str!r}")
        if amount.copy_abs() > MAX_AMOUNT:
            raise TransactionParseError(line_number, f"amount {amount_str} out of range")

    if amount is None and transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
        raise TransactionParseError(line_number, f"{transaction_type.value} requires an amount")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_int(normalized: Dict[str, str], field: str, maximum: int, line_number: int) -> int:
    raw = normalized.get(field, "")
    # int() would also take "1_0" and non-ASCII digits
    if not (raw.isascii() and raw.isdigit()):
        raise TransactionParseError(line_number, f"invalid {field} {raw!r}")
    value = int(raw)
    if value > maximum:
        raise TransactionParseError(line_number, f"{field} {value} out of range")
    return value
