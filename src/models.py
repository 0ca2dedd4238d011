from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def parse(cls, tag: str) -> "TransactionType":
        """Case-insensitive lookup; "withdraw" is accepted as an alias of withdrawal."""
        normalized = tag.strip().lower()
        if normalized == "withdraw":
            return cls.WITHDRAWAL
        return cls(normalized)

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    SUCCESS = "success"
    AMOUNT_REQUIRED = "amount_required"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    ACCOUNT_NOT_FOUND = "account_not_found"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    ONLY_DEPOSITS_DISPUTABLE = "only_deposits_disputable"
    ALREADY_CHARGED_BACK = "already_charged_back"
    NOT_DISPUTED = "not_disputed"
    ACCOUNT_LOCKED = "account_locked"
    UNKNOWN_TRANSACTION_TYPE = "unknown_transaction_type"

    @property
    def is_success(self) -> bool:
        return self is ProcessingResult.SUCCESS


class MalformedRecordError(ValueError):
    """An input row that cannot be turned into a Transaction."""

    def __init__(self, message: str, reason: Optional[ProcessingResult] = None):
        super().__init__(message)
        self.reason = reason


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        kind = getattr(self.transaction_type, "value", self.transaction_type)
        return f"Transaction({kind}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """History entry kept for dispute lookups. Never removed once stored."""

    transaction_id: int
    client_id: int
    transaction_type: TransactionType
    amount: Optional[Decimal] = None
    disputed: bool = False
    charged_back: bool = False

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionRecord":
        return cls(
            transaction_id=transaction.transaction_id,
            client_id=transaction.client_id,
            transaction_type=transaction.transaction_type,
            amount=transaction.amount,
        )


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount


class ProcessingStats:
    """Counters for a single run, including a breakdown of rejections by reason."""

    def __init__(self):
        self.processed = 0
        self.failed = 0
        self.rejections: Counter = Counter()

    def record_success(self):
        self.processed += 1

    def record_failure(self, reason: Optional[ProcessingResult] = None):
        self.failed += 1
        if reason is not None:
            self.rejections[reason] += 1

    def summary(self) -> str:
        report = f"Processed: {self.processed}, Failed: {self.failed}"
        if self.rejections:
            breakdown = ", ".join(f"{reason.value}={count}" for reason, count in self.rejections.most_common())
            report += f" ({breakdown})"
        return report
