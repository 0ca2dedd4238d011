import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import (
    Transaction,
    TransactionRecord,
    TransactionType,
    ClientAccount,
    ProcessingResult,
    ProcessingStats,
)


class TestTransactionType:
    @pytest.mark.parametrize("tag", ["deposit", "DEPOSIT", " Deposit "])
    def test_parse_case_insensitive(self, tag):
        assert TransactionType.parse(tag) == TransactionType.DEPOSIT

    def test_parse_withdraw_alias(self):
        assert TransactionType.parse("withdraw") == TransactionType.WITHDRAWAL
        assert TransactionType.parse("Withdrawal") == TransactionType.WITHDRAWAL

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError):
            TransactionType.parse("transfer")

    def test_carries_amount(self):
        assert TransactionType.DEPOSIT.carries_amount
        assert TransactionType.WITHDRAWAL.carries_amount
        assert not TransactionType.DISPUTE.carries_amount
        assert not TransactionType.RESOLVE.carries_amount
        assert not TransactionType.CHARGEBACK.carries_amount


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None

    def test_repr(self):
        transaction = Transaction(TransactionType.DEPOSIT, 3, 7, Decimal("1.5"))
        assert repr(transaction) == "Transaction(deposit, client=3, tx=7, amount=1.5)"


class TestTransactionRecord:
    def test_from_transaction_starts_undisputed(self):
        transaction = Transaction(TransactionType.DEPOSIT, 1, 9, Decimal("2"))
        record = TransactionRecord.from_transaction(transaction)
        assert record.transaction_id == 9
        assert record.client_id == 1
        assert record.amount == Decimal("2")
        assert record.disputed is False
        assert record.charged_back is False


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_hold_and_release_keep_total(self):
        account = ClientAccount(client_id=1, available=Decimal("10.25"))
        account.hold(Decimal("4.2"))
        assert account.available == Decimal("6.05")
        assert account.held == Decimal("4.2")
        assert account.total == Decimal("10.25")

        account.release_hold(Decimal("4.2"))
        assert account.available == Decimal("10.25")
        assert account.held == Decimal("0")

    def test_remove_held_reduces_total(self):
        account = ClientAccount(client_id=1, held=Decimal("3"))
        account.remove_held(Decimal("3"))
        assert account.total == Decimal("0")


class TestProcessingResult:
    def test_enum_values(self):
        assert ProcessingResult.SUCCESS.value == "success"
        assert ProcessingResult.DUPLICATE_TRANSACTION.value == "duplicate_transaction"
        assert ProcessingResult.NOT_DISPUTED.value == "not_disputed"

    def test_is_success(self):
        assert ProcessingResult.SUCCESS.is_success
        assert not ProcessingResult.AMOUNT_REQUIRED.is_success


class TestProcessingStats:
    def test_counts_and_summary(self):
        stats = ProcessingStats()
        stats.record_success()
        stats.record_success()
        stats.record_failure(ProcessingResult.NOT_DISPUTED)
        stats.record_failure()

        assert stats.processed == 2
        assert stats.failed == 2
        assert stats.rejections[ProcessingResult.NOT_DISPUTED] == 1
        assert stats.summary() == "Processed: 2, Failed: 2 (not_disputed=1)"

    def test_summary_without_rejections(self):
        assert ProcessingStats().summary() == "Processed: 0, Failed: 0"
