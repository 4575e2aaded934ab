"""Unit tests for SQLAlchemy models."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from models import Purchase, Trade, User
from tests.fixtures import T0, make_purchase


def test_user_creation(user):
    """Test User model creation."""
    assert len(user.id) == 36
    assert user.username == "alice"
    assert user.initial_sats == 100_000_000
    assert user.created_at is not None


def test_user_default_grant(db):
    """initial_sats defaults to one BTC."""
    u = User(username="carol", email="carol@example.com")
    db.add(u)
    db.commit()
    assert u.initial_sats == 100_000_000


def test_duplicate_username_rejected(db, user):
    db.add(User(username="alice", email="other@example.com"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_asset_creation(priced_assets):
    """Test Asset model creation."""
    aapl = priced_assets["AAPL"]
    assert aapl.name == "Apple Inc."
    assert aapl.asset_type == "stock"
    assert aapl.last_updated is not None


def test_purchase_relationships(db, user, priced_assets):
    purchase = make_purchase(db, user, "AAPL", 500_000_000, 1_000_000)
    db.commit()

    assert purchase.user.username == "alice"
    assert purchase.asset.symbol == "AAPL"
    assert user.purchases == [purchase]
    assert len(user.trades) == 1


def test_purchase_amount_must_be_positive(db, user, priced_assets):
    db.add(
        Purchase(
            user_id=user.id,
            asset_symbol="AAPL",
            amount=0,
            btc_spent=1_000,
            locked_until=T0 + timedelta(hours=24),
        )
    )
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_trade_assets_must_differ(db, user):
    db.add(
        Trade(
            user_id=user.id,
            from_asset="BTC",
            to_asset="BTC",
            from_amount=1,
            to_amount=1,
        )
    )
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_trade_ids_increase(db, user, priced_assets):
    """Integer ids preserve insertion order for FIFO tie-breaks."""
    first = make_purchase(db, user, "AAPL", 100, 100_000)
    second = make_purchase(db, user, "AAPL", 100, 100_000)
    assert second.id > first.id
