"""Trade model - append-only record of every conversion."""

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import utcnow


class Trade(Base):
    """A conversion between BTC and another asset, in either direction.

    ``from_amount`` and ``to_amount`` are base units (x10^8): sats on the
    BTC side, asset units on the other.
    """

    __tablename__ = "trades"
    __table_args__ = (
        CheckConstraint("from_amount > 0", name="ck_trade_from_amount_positive"),
        CheckConstraint("to_amount > 0", name="ck_trade_to_amount_positive"),
        CheckConstraint("from_asset != to_asset", name="ck_trade_distinct_assets"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    from_asset = Column(String(10), nullable=False, index=True)
    to_asset = Column(String(10), nullable=False, index=True)
    from_amount = Column(BigInteger, nullable=False)
    to_amount = Column(BigInteger, nullable=False)
    btc_price_usd = Column(Numeric(20, 2), nullable=True)
    asset_price_usd = Column(Numeric(20, 8), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="trades")
