"""Portfolio valuation - holdings, cost basis and lock state in sats."""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from models import Purchase, Trade, utcnow
from schemas.portfolio import (
    AssetDetail,
    HoldingSummary,
    PortfolioSummary,
    PurchaseDetail,
    SaleDetail,
)
from services import lot_engine
from services.asset_service import AssetService
from services.ledger_service import LedgerService
from services.user_service import UserService
from utils.units import BTC_SYMBOL

logger = logging.getLogger(__name__)


def _lock_state(amount: int, locked: int) -> str:
    if locked <= 0:
        return "unlocked"
    if locked >= amount:
        return "locked"
    return "partial"


class PortfolioService:
    """Values a user's derived holdings against the price cache."""

    @staticmethod
    def get_portfolio(db: Session, user_id: str, now: datetime | None = None) -> PortfolioSummary:
        """Build the portfolio summary for a user.

        BTC is valued at its own amount and is its own cost basis. Other
        assets are valued at the cached USD price converted to sats; their
        cost basis is the FIFO cost of the units not yet sold. An asset with
        no cached price (or no BTC price) is valued at zero.

        Raises:
            UnknownUserError: No such user.
        """
        now = now or utcnow()
        user = UserService.get_user(db, user_id)
        assets = AssetService.get_assets_by_symbol(db)
        btc_asset = assets.get(BTC_SYMBOL)
        btc_price = btc_asset.current_price_usd if btc_asset else None

        summaries = []
        for symbol, amount in LedgerService.get_holdings(db, user).items():
            asset = assets.get(symbol)
            if symbol == BTC_SYMBOL:
                summaries.append(
                    HoldingSummary(
                        asset_symbol=symbol,
                        asset_name=asset.name if asset else "Bitcoin",
                        amount=amount,
                        current_price_usd=btc_price,
                        current_value_sats=amount,
                        cost_basis_sats=amount,
                        unrealized_gain_sats=0,
                        sellable_amount=amount,
                    )
                )
                continue

            summaries.append(
                PortfolioService._summarize_asset(
                    db, user.id, symbol, amount,
                    asset.name if asset else None,
                    asset.current_price_usd if asset else None,
                    btc_price, now,
                )
            )

        return PortfolioSummary(
            user_id=user.id,
            holdings=summaries,
            total_value_sats=sum(h.current_value_sats for h in summaries),
            total_cost_sats=sum(h.cost_basis_sats for h in summaries),
            btc_price_usd=btc_price,
            valued_at=now,
        )

    @staticmethod
    def _summarize_asset(
        db: Session,
        user_id: str,
        symbol: str,
        amount: int,
        name: str | None,
        price_usd: Decimal | None,
        btc_price_usd: Decimal | None,
        now: datetime,
    ) -> HoldingSummary:
        purchases = LedgerService.get_purchases(db, user_id, symbol)
        sales = LedgerService.get_sales(db, user_id, symbol)
        records = _sale_records(sales)

        statuses = lot_engine.lock_status(purchases, now, records)
        locked = sum(s.remaining for s in statuses if s.is_locked)
        cost_basis = sum(s.remaining_cost_sats for s in statuses)
        unlock_times = [
            lot_engine.as_utc(s.purchase.locked_until)
            for s in statuses
            if s.is_locked and s.remaining > 0
        ]

        allocations = lot_engine.allocate_sales(purchases, records)
        realized = sum(
            sale.to_amount - alloc.cost_basis_sats
            for sale, alloc in zip(sales, allocations)
        )

        if price_usd is not None and btc_price_usd is not None:
            price_sats = lot_engine.price_in_sats(price_usd, btc_price_usd)
            value = lot_engine.current_value(amount, price_sats)
        else:
            logger.warning("No cached price for %s, valuing holding at 0 sats", symbol)
            value = 0

        return HoldingSummary(
            asset_symbol=symbol,
            asset_name=name,
            amount=amount,
            current_price_usd=price_usd,
            current_value_sats=value,
            cost_basis_sats=cost_basis,
            unrealized_gain_sats=value - cost_basis,
            realized_gain_sats=realized,
            locked_amount=locked,
            sellable_amount=amount - locked,
            lock_status=_lock_state(amount, locked),
            next_unlock_at=min(unlock_times) if unlock_times else None,
            purchase_count=len(purchases),
            last_purchase_date=(
                lot_engine.as_utc(purchases[-1].created_at) if purchases else None
            ),
        )

    @staticmethod
    def get_asset_detail(
        db: Session, user_id: str, symbol: str, now: datetime | None = None
    ) -> AssetDetail:
        """Purchases (with lock flags) and sales (with FIFO cost) for one asset.

        Raises:
            UnknownUserError: No such user.
        """
        now = now or utcnow()
        user = UserService.get_user(db, user_id)
        symbol = symbol.upper()

        purchases = LedgerService.get_purchases(db, user.id, symbol)
        sales = LedgerService.get_sales(db, user.id, symbol)
        records = _sale_records(sales)

        statuses = lot_engine.lock_status(purchases, now, records)
        allocations = lot_engine.allocate_sales(purchases, records)

        purchase_details = [
            _purchase_detail(status.purchase, status)
            for status in reversed(statuses)
        ]
        sale_details = [
            _sale_detail(sale, alloc.cost_basis_sats)
            for sale, alloc in reversed(list(zip(sales, allocations)))
        ]
        return AssetDetail(asset_symbol=symbol, purchases=purchase_details, sales=sale_details)


def _sale_records(sales: list[Trade]) -> list[lot_engine.SaleRecord]:
    return [(s.from_amount, s.created_at) for s in sales]


def _purchase_detail(purchase: Purchase, status: lot_engine.LotStatus) -> PurchaseDetail:
    return PurchaseDetail(
        id=purchase.id,
        amount=purchase.amount,
        btc_spent=purchase.btc_spent,
        purchase_price_usd=purchase.purchase_price_usd,
        btc_price_usd=purchase.btc_price_usd,
        locked_until=lot_engine.as_utc(purchase.locked_until),
        created_at=lot_engine.as_utc(purchase.created_at),
        is_locked=status.is_locked,
        remaining_amount=status.remaining,
        remaining_cost_sats=status.remaining_cost_sats,
    )


def _sale_detail(sale: Trade, cost_basis_sats: int) -> SaleDetail:
    return SaleDetail(
        id=sale.id,
        from_amount=sale.from_amount,
        to_amount=sale.to_amount,
        btc_price_usd=sale.btc_price_usd,
        asset_price_usd=sale.asset_price_usd,
        cost_basis_sats=cost_basis_sats,
        realized_gain_sats=sale.to_amount - cost_basis_sats,
        created_at=lot_engine.as_utc(sale.created_at),
    )
