"""Pydantic schemas for portfolio valuation."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

LockState = Literal["locked", "partial", "unlocked"]


class HoldingSummary(BaseModel):
    """One asset's derived holding, valued in sats."""

    asset_symbol: str
    asset_name: str | None = None
    amount: int
    current_price_usd: Decimal | None = None
    current_value_sats: int
    cost_basis_sats: int
    unrealized_gain_sats: int
    realized_gain_sats: int = 0
    locked_amount: int = 0
    sellable_amount: int
    lock_status: LockState = "unlocked"
    next_unlock_at: datetime | None = None
    purchase_count: int = 0
    last_purchase_date: datetime | None = None


class PortfolioSummary(BaseModel):
    """Aggregated portfolio for a user."""

    user_id: str
    holdings: list[HoldingSummary]
    total_value_sats: int
    total_cost_sats: int
    btc_price_usd: Decimal | None = None
    valued_at: datetime


class PurchaseDetail(BaseModel):
    """A Purchase row with its lock flag and what is left of it."""

    id: int
    amount: int
    btc_spent: int
    purchase_price_usd: Decimal | None = None
    btc_price_usd: Decimal | None = None
    locked_until: datetime
    created_at: datetime
    is_locked: bool
    remaining_amount: int
    remaining_cost_sats: int

    model_config = ConfigDict(from_attributes=True)


class SaleDetail(BaseModel):
    """An asset -> BTC trade with its FIFO cost basis."""

    id: int
    from_amount: int
    to_amount: int
    btc_price_usd: Decimal | None = None
    asset_price_usd: Decimal | None = None
    cost_basis_sats: int
    realized_gain_sats: int
    created_at: datetime


class AssetDetail(BaseModel):
    """Purchase and sale history for one asset, newest first."""

    asset_symbol: str
    purchases: list[PurchaseDetail]
    sales: list[SaleDetail]
