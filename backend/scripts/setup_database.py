#!/usr/bin/env python
"""Create ledger tables, seed the asset catalog and optionally set prices.

Prices normally come from an external feed; ``--price`` lets you seed the
cache by hand for local testing.

Usage:
    cd backend
    uv run python -m scripts.setup_database
    uv run python -m scripts.setup_database --price BTC=65000 --price AAPL=190.25
"""

import argparse
import sys
from decimal import Decimal, InvalidOperation

from database import init_db, session_scope
from logging_config import setup_logging
from services.asset_service import AssetService
from services.exceptions import LedgerError


def _parse_price(text: str) -> tuple[str, Decimal]:
    """Parse ``SYMBOL=PRICE`` into a (symbol, Decimal) pair."""
    symbol, sep, price = text.partition("=")
    if not sep or not symbol.strip():
        raise argparse.ArgumentTypeError(f"expected SYMBOL=PRICE, got {text!r}")
    try:
        return symbol.strip().upper(), Decimal(price.strip())
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid price in {text!r}") from None


def setup_database(prices: dict[str, Decimal] | None = None) -> int:
    """Ensure tables exist, seed assets and apply prices. Returns assets added."""
    init_db()
    with session_scope() as db:
        added = AssetService.seed_default_assets(db)
        if prices:
            AssetService.update_prices(db, prices)
    return added


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--price",
        action="append",
        type=_parse_price,
        default=[],
        metavar="SYMBOL=PRICE",
        help="USD price to cache (repeatable)",
    )
    args = parser.parse_args(argv)
    setup_logging()

    try:
        added = setup_database(dict(args.price))
    except LedgerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Database ready ({added} assets added)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
