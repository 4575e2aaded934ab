"""Asset model - reference data and cached USD price per symbol."""

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String

from database import Base
from models.utils import utcnow


class Asset(Base):
    """A tradable asset and its last known USD price."""

    __tablename__ = "assets"
    __table_args__ = (
        CheckConstraint(
            "current_price_usd IS NULL OR current_price_usd > 0",
            name="ck_asset_price_positive",
        ),
    )

    symbol = Column(String(10), primary_key=True)
    name = Column(String, nullable=True)
    asset_type = Column(String(20), nullable=False)  # "crypto" / "stock" / "commodity"
    category = Column(String, nullable=True)
    current_price_usd = Column(Numeric(20, 8), nullable=True)
    last_updated = Column(DateTime(timezone=True), default=utcnow)
