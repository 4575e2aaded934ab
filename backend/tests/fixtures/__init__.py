"""Test fixtures and sample data."""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from models import Asset, Purchase, Trade, User
from sqlalchemy.orm import Session

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


def make_purchase(
    db: Session,
    user: User,
    symbol: str,
    amount: int,
    btc_spent: int,
    created_at: datetime = T0,
    lock_hours: int = 24,
) -> Purchase:
    """Create a Purchase row and its matching BTC -> asset Trade.

    This is a helper function (not a fixture) so a test can lay down any
    ledger history it needs without going through price conversion.
    """
    purchase = Purchase(
        user_id=user.id,
        asset_symbol=symbol,
        amount=amount,
        btc_spent=btc_spent,
        purchase_price_usd=Decimal("200.00"),
        btc_price_usd=Decimal("100000.00"),
        locked_until=created_at + timedelta(hours=lock_hours),
        created_at=created_at,
    )
    db.add(purchase)
    db.add(
        Trade(
            user_id=user.id,
            from_asset="BTC",
            to_asset=symbol,
            from_amount=btc_spent,
            to_amount=amount,
            btc_price_usd=Decimal("100000.00"),
            asset_price_usd=Decimal("200.00"),
            created_at=created_at,
        )
    )
    db.flush()
    return purchase


def make_sale(
    db: Session,
    user: User,
    symbol: str,
    amount: int,
    sats_received: int,
    created_at: datetime,
) -> Trade:
    """Create an asset -> BTC Trade row."""
    trade = Trade(
        user_id=user.id,
        from_asset=symbol,
        to_asset="BTC",
        from_amount=amount,
        to_amount=sats_received,
        btc_price_usd=Decimal("100000.00"),
        asset_price_usd=Decimal("200.00"),
        created_at=created_at,
    )
    db.add(trade)
    db.flush()
    return trade


@pytest.fixture
def user(db: Session) -> User:
    """Create a test user holding the standard 1 BTC grant."""
    u = User(username="alice", email="alice@example.com", initial_sats=100_000_000)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def second_user(db: Session) -> User:
    """Create a second user to check ledger isolation."""
    u = User(username="bob", email="bob@example.com", initial_sats=100_000_000)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def priced_assets(db: Session) -> dict[str, Asset]:
    """BTC at $100,000, AAPL at $200, XAU at $2,500 and an unpriced TSLA."""
    rows = [
        Asset(symbol="BTC", name="Bitcoin", asset_type="crypto",
              category="Cryptocurrency", current_price_usd=Decimal("100000")),
        Asset(symbol="AAPL", name="Apple Inc.", asset_type="stock",
              category="Technology", current_price_usd=Decimal("200")),
        Asset(symbol="XAU", name="Gold", asset_type="commodity",
              category="Precious Metals", current_price_usd=Decimal("2500")),
        Asset(symbol="TSLA", name="Tesla Inc.", asset_type="stock",
              category="Technology", current_price_usd=None),
    ]
    db.add_all(rows)
    db.commit()
    return {a.symbol: a for a in rows}
