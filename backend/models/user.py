"""User model - owner of a simulated portfolio."""

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class User(Base):
    """A portfolio owner.

    ``initial_sats`` is the starting BTC grant. The BTC holding is never
    stored; it is derived from this grant and the user's trades.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("initial_sats >= 0", name="ck_user_initial_sats_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    initial_sats = Column(BigInteger, nullable=False, default=100_000_000)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    purchases = relationship("Purchase", back_populates="user", cascade="all, delete-orphan")
    trades = relationship("Trade", back_populates="user", cascade="all, delete-orphan")
