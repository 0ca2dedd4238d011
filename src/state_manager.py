from dataclasses import replace
from typing import Dict, Optional

from models import Transaction, TransactionRecord, ClientAccount


class StateManager:
    """
    Holds client accounts and the transaction history used for dispute lookups.
    Accounts are created lazily; history entries are never removed.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, TransactionRecord] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the live account, or None if the client has never transacted."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def store_transaction(self, transaction: Transaction) -> TransactionRecord:
        """Store transaction for future dispute lookups."""
        record = TransactionRecord.from_transaction(transaction)
        self._transactions[transaction.transaction_id] = record
        return record

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return copies of all accounts (for final output)."""
        return {client_id: replace(account) for client_id, account in self._accounts.items()}

    def transaction_count(self) -> int:
        return len(self._transactions)
