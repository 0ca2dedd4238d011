from dataclasses import replace
from typing import Dict, Optional

from models import Transaction, TransactionRecord, ClientAccount, ProcessingResult
from state_manager import StateManager
from transaction_processor import TransactionProcessor


class Ledger:
    """
    Owns client accounts and transaction history.

    apply() is the only way to change state. Everything handed back to callers
    is a copy, so no reference to a stored account or record escapes.
    """

    def __init__(self, enforce_locked: bool = False):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state, enforce_locked=enforce_locked)

    def apply(self, transaction: Transaction) -> ProcessingResult:
        return self._processor.process_transaction(transaction)

    def accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        account = self._state.get_account(client_id)
        return replace(account) if account is not None else None

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        record = self._state.get_transaction(transaction_id)
        return replace(record) if record is not None else None

    def transaction_count(self) -> int:
        return self._state.transaction_count()
