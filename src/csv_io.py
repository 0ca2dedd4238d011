import csv
import logging
from decimal import Context, Decimal, InvalidOperation, getcontext
from typing import Dict, Iterator, Mapping, Optional, TextIO

from models import Transaction, TransactionType, ClientAccount, ProcessingResult, MalformedRecordError

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
DEFAULT_PRECISION = 4

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


def read_csv_rows(filepath: str) -> Iterator[Dict[Optional[str], Optional[str]]]:
    """Yield raw CSV rows one at a time; the file is never read into memory whole."""
    with open(filepath, "r", newline="") as f:
        reader = csv.DictReader(f)
        yield from reader


def _parse_id(value: str, name: str, upper: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise MalformedRecordError(f"{name} {value!r} is not an integer")
    if not 0 <= parsed <= upper:
        raise MalformedRecordError(f"{name} {parsed} out of range 0..{upper}")
    return parsed


def parse_csv_row(row: Mapping[Optional[str], Optional[str]]) -> Transaction:
    """
    Parse CSV row into Transaction.

    Header and value whitespace is ignored and a missing trailing amount column
    is treated as an empty amount. Raises MalformedRecordError for anything
    that cannot be represented as a Transaction.
    """
    # csv.DictReader files surplus fields under the None key
    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

    try:
        type_str = normalized["type"]
        client_str = normalized["client"]
        transaction_str = normalized["tx"]
    except KeyError as e:
        raise MalformedRecordError(f"missing column {e}")

    try:
        transaction_type = TransactionType.parse(type_str)
    except ValueError:
        raise MalformedRecordError(
            f"unknown transaction type {type_str!r}",
            reason=ProcessingResult.UNKNOWN_TRANSACTION_TYPE,
        )

    client_id = _parse_id(client_str, "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(transaction_str, "tx", MAX_TRANSACTION_ID)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str and transaction_type.carries_amount:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise MalformedRecordError(f"amount {amount_str!r} is not a decimal")
        if not amount.is_finite():
            raise MalformedRecordError(f"amount {amount_str!r} is not a finite decimal")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def format_decimal(value: Decimal, precision: int = DEFAULT_PRECISION) -> str:
    """
    Format decimal with at least `precision` decimal places.
    Values stored with more places are printed in full rather than rounded.
    """
    if value.is_zero():
        value = abs(value)

    exponent = value.as_tuple().exponent
    if isinstance(exponent, int) and exponent < -precision:
        return f"{value:f}"

    digits_needed = max(value.adjusted(), 0) + precision + 2
    context = Context(prec=max(getcontext().prec, digits_needed))
    return f"{value.quantize(Decimal(1).scaleb(-precision), context=context):f}"


def write_accounts(accounts: Mapping[int, ClientAccount], stream: TextIO, precision: int = DEFAULT_PRECISION) -> None:
    """Write accounts as CSV, one row per client in ascending client id order."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        writer.writerow([
            client_id,
            format_decimal(account.available, precision),
            format_decimal(account.held, precision),
            format_decimal(account.total, precision),
            str(account.locked).lower(),
        ])
