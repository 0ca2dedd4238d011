import logging
from typing import Dict, Iterable, Mapping, Optional

from csv_io import read_csv_rows, parse_csv_row
from ledger import Ledger
from models import Transaction, ClientAccount, ProcessingResult, ProcessingStats, MalformedRecordError

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Feeds transactions to a Ledger one at a time, in the order received.
    A bad row or a rejected transaction is logged and counted, never fatal.
    """

    def __init__(self, enforce_locked: bool = False):
        self._ledger = Ledger(enforce_locked=enforce_locked)
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        self.process_rows(read_csv_rows(filepath))
        logger.info(f"Finished {filepath}: {self._stats.summary()}")
        return self._ledger.accounts()

    def process_rows(self, rows: Iterable[Mapping[Optional[str], Optional[str]]]) -> None:
        # Line 1 is the header
        for line_number, row in enumerate(rows, start=2):
            try:
                transaction = parse_csv_row(row)
            except MalformedRecordError as e:
                logger.warning(f"Failed to parse line {line_number} {dict(row)}: {e}")
                self._stats.record_failure(e.reason)
                continue
            self.process_transaction(transaction)

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply an already-parsed stream of transactions and return final account states."""
        for transaction in transactions:
            self.process_transaction(transaction)
        return self._ledger.accounts()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        # Rejections are logged by the processor
        result = self._ledger.apply(transaction)
        if result.is_success:
            self._stats.record_success()
        else:
            self._stats.record_failure(result)
        return result
