from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_EVEN
from enum import Enum
from typing import Optional

DECIMAL_PLACES = 4
_QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)

# Largest amount a single row may carry (same bound as a 96-bit decimal mantissa)
MAX_AMOUNT = Decimal("79228162514264337593543950335")

# Balances are kept exact well past MAX_AMOUNT at DECIMAL_PLACES; the
# default context only keeps 28 significant digits.
MONEY_CONTEXT = Context(prec=64, rounding=ROUND_HALF_EVEN)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class LedgerEntry:
    """An applied deposit or withdrawal, kept so it can be disputed later."""

    client_id: int
    transaction_id: int
    amount: Decimal
    kind: TransactionType
    disputed: bool = False


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return MONEY_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = MONEY_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = MONEY_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.available = MONEY_CONTEXT.subtract(self.available, amount)
        self.held = MONEY_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.held = MONEY_CONTEXT.subtract(self.held, amount)
        self.available = MONEY_CONTEXT.add(self.available, amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = MONEY_CONTEXT.subtract(self.held, amount)

    def lock(self) -> None:
        self.locked = True


def quantize(value: Decimal) -> Decimal:
    """Round to the fixed output precision."""
    return value.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN, context=MONEY_CONTEXT)


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    @classmethod
    def from_account(cls, account: ClientAccount) -> "AccountSnapshot":
        return cls(
            client_id=account.client_id,
            available=quantize(account.available),
            held=quantize(account.held),
            total=quantize(account.total),
            locked=account.locked,
        )


class ProcessingStats:
    """Counters for applied and ignored transactions."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0

    def record_applied(self):
        self.applied += 1

    def record_ignored(self):
        self.ignored += 1

    @property
    def processed(self) -> int:
        return self.applied + self.ignored
