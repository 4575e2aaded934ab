"""SQLAlchemy ORM models."""

from .asset import Asset
from .purchase import Purchase
from .trade import Trade
from .user import User
from .utils import generate_uuid, utcnow

__all__ = ["Asset", "Purchase", "Trade", "User", "generate_uuid", "utcnow"]
