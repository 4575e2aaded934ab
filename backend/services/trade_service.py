"""Trade execution - converts BTC into assets and back.

Every trade reads the ledger, validates it against the lock engine, and
appends rows. Nothing is committed here: the caller's transaction (see
``database.session_scope``) commits once or rolls everything back.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from config import settings
from models import Purchase, Trade, utcnow
from schemas.trade import TradeRequest, TradeResult
from services import lot_engine
from services.asset_service import AssetService
from services.exceptions import (
    BelowMinimumTradeSizeError,
    InsufficientBalanceError,
    InvalidAmountError,
    UnsupportedTradeError,
)
from services.ledger_service import LedgerService
from services.user_service import UserService
from utils.units import BTC_SYMBOL, format_units, to_base_units

logger = logging.getLogger(__name__)


class TradeService:
    """Executes trades and reads trade history."""

    @staticmethod
    def validate_request(request: TradeRequest) -> int:
        """Check trade direction and size. Returns the amount in base units.

        Raises:
            UnsupportedTradeError: Same asset, or neither side is BTC.
            InvalidAmountError: Amount is not a positive whole number of base units.
            BelowMinimumTradeSizeError: A BTC -> asset trade below ``MIN_TRADE_SATS``.
        """
        if request.from_asset == request.to_asset:
            raise UnsupportedTradeError("Cannot trade asset to itself")
        if BTC_SYMBOL not in (request.from_asset, request.to_asset):
            raise UnsupportedTradeError("One asset must be BTC")

        amount = to_base_units(request.amount, request.unit)

        if request.from_asset == BTC_SYMBOL and amount < settings.MIN_TRADE_SATS:
            raise BelowMinimumTradeSizeError(amount, settings.MIN_TRADE_SATS)
        return amount

    @staticmethod
    def execute_trade(
        db: Session,
        user_id: str,
        request: TradeRequest,
        now: datetime | None = None,
    ) -> TradeResult:
        """Execute a BTC <-> asset conversion at cached prices.

        BTC -> asset creates a Purchase locked for ``ASSET_LOCK_HOURS``.
        Asset -> BTC may only consume unlocked purchases, FIFO. Both append
        a Trade row. On any error no rows are added.

        Raises:
            UnknownUserError: No such user.
            UnsupportedTradeError, InvalidAmountError, BelowMinimumTradeSizeError:
                Request fails validation.
            AssetPriceUnavailableError: BTC or the asset has no cached price.
            InsufficientBalanceError: Amount exceeds the holding.
            InsufficientUnlockedBalanceError: Asset sale exceeds the unlocked amount.
        """
        now = now or utcnow()
        amount = TradeService.validate_request(request)
        user = UserService.get_user(db, user_id)

        from_asset, to_asset = request.from_asset, request.to_asset
        asset_symbol = to_asset if from_asset == BTC_SYMBOL else from_asset
        prices = AssetService.get_prices(db, [BTC_SYMBOL, asset_symbol])
        btc_price = prices[BTC_SYMBOL]
        asset_price = prices[asset_symbol]

        holding = LedgerService.get_holding_amount(db, user, from_asset)
        if amount > holding:
            raise InsufficientBalanceError(
                f"Insufficient balance. You have {format_units(holding)} {from_asset}, "
                f"but tried to sell {format_units(amount)} {from_asset}",
                symbol=from_asset,
                requested=amount,
                available=holding,
            )

        fifo = None
        if from_asset != BTC_SYMBOL:
            purchases = LedgerService.get_purchases(db, user.id, from_asset)
            past_sales = LedgerService.get_sale_records(db, user.id, from_asset)
            fifo = lot_engine.compute_fifo_cost_basis(purchases, amount, now, past_sales)

        to_amount = lot_engine.convert_amount(from_asset, to_asset, amount, asset_price, btc_price)
        if to_amount <= 0:
            raise InvalidAmountError(
                f"Trade of {amount} {from_asset} converts to nothing at current prices", amount
            )

        locked_until = None
        if to_asset != BTC_SYMBOL:
            locked_until = now + timedelta(hours=settings.ASSET_LOCK_HOURS)
            db.add(
                Purchase(
                    user_id=user.id,
                    asset_symbol=to_asset,
                    amount=to_amount,
                    btc_spent=amount,
                    purchase_price_usd=asset_price,
                    btc_price_usd=btc_price,
                    locked_until=locked_until,
                    created_at=now,
                )
            )

        trade = Trade(
            user_id=user.id,
            from_asset=from_asset,
            to_asset=to_asset,
            from_amount=amount,
            to_amount=to_amount,
            btc_price_usd=btc_price,
            asset_price_usd=asset_price,
            created_at=now,
        )
        db.add(trade)
        db.flush()

        logger.info(
            "Trade %s: user %s %s %s -> %s %s",
            trade.id,
            user.id[:8],
            format_units(amount),
            from_asset,
            format_units(to_amount),
            to_asset,
        )

        return TradeResult(
            trade_id=trade.id,
            from_asset=from_asset,
            to_asset=to_asset,
            from_amount=amount,
            to_amount=to_amount,
            btc_price_usd=btc_price,
            asset_price_usd=asset_price,
            locked_until=locked_until,
            cost_basis_sats=fifo.cost_basis_sats if fifo else None,
            realized_gain_sats=to_amount - fifo.cost_basis_sats if fifo else None,
            created_at=now,
        )

    @staticmethod
    def get_trade_history(db: Session, user_id: str, limit: int | None = None) -> list[Trade]:
        """Most recent trades first.

        ``limit`` defaults to ``TRADE_HISTORY_LIMIT`` and is clamped to
        ``[1, MAX_TRADE_HISTORY_LIMIT]``.
        """
        if limit is None:
            limit = settings.TRADE_HISTORY_LIMIT
        limit = max(1, min(limit, settings.MAX_TRADE_HISTORY_LIMIT))
        return (
            db.query(Trade)
            .filter_by(user_id=user_id)
            .order_by(Trade.created_at.desc(), Trade.id.desc())
            .limit(limit)
            .all()
        )
