"""Read-side queries over the Purchase/Trade ledger.

Holdings are never stored. Every balance here is derived from the
append-only Purchase and Trade rows plus the user's starting BTC grant.
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Purchase, Trade, User
from services.lot_engine import SaleRecord
from utils.units import BTC_SYMBOL

logger = logging.getLogger(__name__)


class LedgerService:
    """Derives holdings and lot inputs from the ledger."""

    @staticmethod
    def get_purchases(db: Session, user_id: str, symbol: str) -> list[Purchase]:
        """Purchases of one asset, oldest first (ties broken by insertion order)."""
        return (
            db.query(Purchase)
            .filter_by(user_id=user_id, asset_symbol=symbol)
            .order_by(Purchase.created_at.asc(), Purchase.id.asc())
            .all()
        )

    @staticmethod
    def get_sales(db: Session, user_id: str, symbol: str) -> list[Trade]:
        """Asset -> BTC trades for one asset, oldest first."""
        return (
            db.query(Trade)
            .filter_by(user_id=user_id, from_asset=symbol, to_asset=BTC_SYMBOL)
            .order_by(Trade.created_at.asc(), Trade.id.asc())
            .all()
        )

    @staticmethod
    def get_sale_records(db: Session, user_id: str, symbol: str) -> list[SaleRecord]:
        """``(amount, sold_at)`` of each sale of ``symbol``, oldest first, for FIFO replay."""
        return [(s.from_amount, s.created_at) for s in LedgerService.get_sales(db, user_id, symbol)]

    @staticmethod
    def get_sold_amount(db: Session, user_id: str, symbol: str) -> int:
        """Total units of ``symbol`` converted back to BTC."""
        total = (
            db.query(func.coalesce(func.sum(Trade.from_amount), 0))
            .filter(
                Trade.user_id == user_id,
                Trade.from_asset == symbol,
                Trade.to_asset == BTC_SYMBOL,
            )
            .scalar()
        )
        return int(total)

    @staticmethod
    def get_btc_balance(db: Session, user: User) -> int:
        """Starting grant, minus sats spent on buys, plus sats received from sales."""
        spent = (
            db.query(func.coalesce(func.sum(Trade.from_amount), 0))
            .filter(Trade.user_id == user.id, Trade.from_asset == BTC_SYMBOL)
            .scalar()
        )
        received = (
            db.query(func.coalesce(func.sum(Trade.to_amount), 0))
            .filter(Trade.user_id == user.id, Trade.to_asset == BTC_SYMBOL)
            .scalar()
        )
        return int(user.initial_sats) - int(spent) + int(received)

    @staticmethod
    def get_holding_amount(db: Session, user: User, symbol: str) -> int:
        """Derived holding of one asset, in base units."""
        if symbol == BTC_SYMBOL:
            return LedgerService.get_btc_balance(db, user)
        bought = (
            db.query(func.coalesce(func.sum(Purchase.amount), 0))
            .filter(Purchase.user_id == user.id, Purchase.asset_symbol == symbol)
            .scalar()
        )
        return int(bought) - LedgerService.get_sold_amount(db, user.id, symbol)

    @staticmethod
    def get_holdings(db: Session, user: User) -> dict[str, int]:
        """All positive holdings keyed by symbol, BTC first.

        An asset sold past what was bought is logged and left out.
        """
        bought = dict(
            db.query(Purchase.asset_symbol, func.sum(Purchase.amount))
            .filter(Purchase.user_id == user.id)
            .group_by(Purchase.asset_symbol)
            .all()
        )
        sold = dict(
            db.query(Trade.from_asset, func.sum(Trade.from_amount))
            .filter(Trade.user_id == user.id, Trade.to_asset == BTC_SYMBOL)
            .group_by(Trade.from_asset)
            .all()
        )

        holdings: dict[str, int] = {}
        btc = LedgerService.get_btc_balance(db, user)
        if btc:
            holdings[BTC_SYMBOL] = btc
        for symbol in sorted(bought):
            amount = int(bought[symbol]) - int(sold.get(symbol) or 0)
            if amount < 0:
                logger.warning(
                    "Ledger for user %s sells more %s than it bought (%d), skipping",
                    user.id[:8], symbol, amount,
                )
            elif amount:
                holdings[symbol] = amount
        return holdings
