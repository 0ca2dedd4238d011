import argparse
import logging
import sys

from csv_io import DEFAULT_PRECISION, write_accounts
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Replay a CSV of client transactions and print final account balances.",
    )
    parser.add_argument("input", help="CSV file with columns type, client, tx, amount")
    parser.add_argument(
        "--precision",
        type=int,
        default=DEFAULT_PRECISION,
        help=f"minimum decimal places in the output (default {DEFAULT_PRECISION})",
    )
    parser.add_argument(
        "--enforce-locked",
        action="store_true",
        help="reject every transaction for a client whose account is locked",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log rejected transactions")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.precision < 0:
        parser.error("--precision must not be negative")

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(enforce_locked=args.enforce_locked)
    try:
        accounts = engine.process_file(args.input)
    except OSError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return 1

    write_accounts(accounts, sys.stdout, precision=args.precision)
    print(engine.stats.summary(), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
