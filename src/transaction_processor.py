import logging
from typing import Optional, Tuple

from models import Transaction, TransactionRecord, TransactionType, ClientAccount, ProcessingResult
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to state.
    Every precondition is checked before the first mutation, so a rejected
    transaction leaves accounts and history untouched.
    """

    def __init__(self, state: StateManager, enforce_locked: bool = False):
        self._state = state
        self._enforce_locked = enforce_locked

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS if the transaction was applied, otherwise the reason it was rejected.
        """
        if self._enforce_locked:
            account = self._state.get_account(transaction.client_id)
            if account is not None and account.locked:
                logger.info(f"Tx {transaction.transaction_id}: client {transaction.client_id} account is locked")
                return ProcessingResult.ACCOUNT_LOCKED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                logger.warning(f"Tx {transaction.transaction_id}: unknown transaction type {transaction.transaction_type!r}")
                return ProcessingResult.UNKNOWN_TRANSACTION_TYPE

    def _check_new_funds(self, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            return ProcessingResult.AMOUNT_REQUIRED

        if self._state.has_transaction(transaction.transaction_id):
            return ProcessingResult.DUPLICATE_TRANSACTION

        return ProcessingResult.SUCCESS

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        result = self._check_new_funds(transaction)
        if not result.is_success:
            logger.info(f"Deposit tx {transaction.transaction_id}: rejected ({result.value}), amount {transaction.amount}")
            return result

        self._state.store_transaction(transaction)
        account = self._state.get_or_create_account(transaction.client_id)
        account.credit(transaction.amount)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        result = self._check_new_funds(transaction)
        if not result.is_success:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: rejected ({result.value}), amount {transaction.amount}")
            return result

        # No sufficient-funds check: available may go negative.
        self._state.store_transaction(transaction)
        account = self._state.get_or_create_account(transaction.client_id)
        account.debit(transaction.amount)
        return ProcessingResult.SUCCESS

    def _lookup_referenced(
        self, transaction: Transaction
    ) -> Tuple[ProcessingResult, Optional[ClientAccount], Optional[TransactionRecord]]:
        """
        Find the requesting client's account and the stored record a dispute-family
        transaction points at. The requesting client's account is the one adjusted,
        whichever client the stored record belongs to.
        """
        account = self._state.get_account(transaction.client_id)
        if account is None:
            return ProcessingResult.ACCOUNT_NOT_FOUND, None, None

        original = self._state.get_transaction(transaction.transaction_id)
        if original is None:
            return ProcessingResult.TRANSACTION_NOT_FOUND, account, None

        return ProcessingResult.SUCCESS, account, original

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        result, account, original = self._lookup_referenced(transaction)
        if not result.is_success:
            logger.info(f"Dispute for tx {transaction.transaction_id}: rejected ({result.value})")
            return result

        # TODO: withdrawal disputes would need a way to recall funds that already left the account
        if original.transaction_type != TransactionType.DEPOSIT:
            logger.warning(f"Dispute for tx {transaction.transaction_id}: only deposits can be disputed (got {original.transaction_type.value})")
            return ProcessingResult.ONLY_DEPOSITS_DISPUTABLE

        if original.amount is None:
            return ProcessingResult.AMOUNT_REQUIRED

        # Disputing an open dispute again holds the amount again; only a charged-back record is closed.
        if original.charged_back:
            logger.warning(f"Dispute for tx {transaction.transaction_id}: transaction already charged back")
            return ProcessingResult.ALREADY_CHARGED_BACK

        account.hold(original.amount)
        original.disputed = True
        return ProcessingResult.SUCCESS

    def _check_open_dispute(self, transaction: Transaction) -> Tuple[ProcessingResult, Optional[ClientAccount], Optional[TransactionRecord]]:
        result, account, original = self._lookup_referenced(transaction)
        if not result.is_success:
            return result, account, original

        # A charged-back record keeps disputed=True but its dispute is closed.
        if not original.disputed or original.charged_back:
            return ProcessingResult.NOT_DISPUTED, account, original

        if original.amount is None:
            return ProcessingResult.AMOUNT_REQUIRED, account, original

        return ProcessingResult.SUCCESS, account, original

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        result, account, original = self._check_open_dispute(transaction)
        if not result.is_success:
            logger.info(f"Resolve for tx {transaction.transaction_id}: rejected ({result.value})")
            return result

        account.release_hold(original.amount)
        original.disputed = False
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        result, account, original = self._check_open_dispute(transaction)
        if not result.is_success:
            logger.info(f"Chargeback for tx {transaction.transaction_id}: rejected ({result.value})")
            return result

        account.remove_held(original.amount)
        account.locked = True
        original.charged_back = True
        return ProcessingResult.SUCCESS
