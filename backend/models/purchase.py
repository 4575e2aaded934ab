"""Purchase model - one lot acquired by converting BTC into an asset."""

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import utcnow


class Purchase(Base):
    """A lot created by a BTC -> asset trade.

    Rows are never updated or deleted. Sales consume lots virtually (FIFO
    replay over the ledger) and the lock expires purely by time.
    """

    __tablename__ = "purchases"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_purchase_amount_positive"),
        CheckConstraint("btc_spent > 0", name="ck_purchase_btc_spent_positive"),
    )

    # Integer ids keep insertion order as the FIFO tie-break
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    asset_symbol = Column(String(10), ForeignKey("assets.symbol"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    btc_spent = Column(BigInteger, nullable=False)
    purchase_price_usd = Column(Numeric(20, 8), nullable=True)
    btc_price_usd = Column(Numeric(20, 2), nullable=True)
    locked_until = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="purchases")
    asset = relationship("Asset")
