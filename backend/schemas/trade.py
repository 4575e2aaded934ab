"""Pydantic schemas for trade requests and results."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator


class TradeRequest(BaseModel):
    """Schema for a BTC <-> asset conversion request.

    ``amount`` is expressed in ``unit`` and converted to integer base units
    by the trade service (``sat`` is already base units).
    """

    from_asset: str
    to_asset: str
    amount: int | Decimal
    unit: str = "sat"

    @field_validator("from_asset", "to_asset")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        """Symbols are stored upper-case."""
        return v.strip().upper()

    @field_validator("unit")
    @classmethod
    def normalize_unit(cls, v: str) -> str:
        return v.strip().lower()


class TradeResult(BaseModel):
    """Schema for an executed trade."""

    trade_id: int
    from_asset: str
    to_asset: str
    from_amount: int
    to_amount: int
    btc_price_usd: Decimal
    asset_price_usd: Decimal
    locked_until: datetime | None = None

    # Sales only: FIFO cost of the units sold and the gain against it
    cost_basis_sats: int | None = None
    realized_gain_sats: int | None = None

    created_at: datetime


class TradeResponse(BaseModel):
    """Schema for a Trade row in trade history."""

    id: int
    user_id: str
    from_asset: str
    to_asset: str
    from_amount: int
    to_amount: int
    btc_price_usd: Decimal | None = None
    asset_price_usd: Decimal | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
