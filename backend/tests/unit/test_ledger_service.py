"""Tests for LedgerService derived balances."""

import logging

from services.ledger_service import LedgerService
from services.lot_engine import as_utc
from tests.fixtures import HOUR, T0, make_purchase, make_sale


class TestGetPurchases:
    def test_oldest_first(self, db, user, priced_assets):
        newer = make_purchase(db, user, "AAPL", 100, 100_000, created_at=T0 + HOUR)
        older = make_purchase(db, user, "AAPL", 200, 100_000, created_at=T0)

        assert LedgerService.get_purchases(db, user.id, "AAPL") == [older, newer]

    def test_ties_ordered_by_id(self, db, user, priced_assets):
        first = make_purchase(db, user, "AAPL", 100, 100_000, created_at=T0)
        second = make_purchase(db, user, "AAPL", 200, 100_000, created_at=T0)

        assert LedgerService.get_purchases(db, user.id, "AAPL") == [first, second]

    def test_filtered_by_asset_and_user(self, db, user, second_user, priced_assets):
        make_purchase(db, user, "AAPL", 100, 100_000)
        make_purchase(db, user, "XAU", 100, 100_000)
        make_purchase(db, second_user, "AAPL", 100, 100_000)

        assert len(LedgerService.get_purchases(db, user.id, "AAPL")) == 1


class TestBalances:
    def test_btc_balance_starts_at_grant(self, db, user):
        assert LedgerService.get_btc_balance(db, user) == 100_000_000

    def test_btc_balance_after_trades(self, db, user, priced_assets):
        make_purchase(db, user, "AAPL", 500_000_000, 10_000_000)
        make_sale(db, user, "AAPL", 100_000_000, 3_000_000, created_at=T0 + 30 * HOUR)

        assert LedgerService.get_btc_balance(db, user) == 100_000_000 - 10_000_000 + 3_000_000

    def test_sold_amount(self, db, user, priced_assets):
        make_purchase(db, user, "AAPL", 500_000_000, 10_000_000)
        make_sale(db, user, "AAPL", 100_000_000, 3_000_000, created_at=T0 + 30 * HOUR)
        make_sale(db, user, "AAPL", 50_000_000, 1_000_000, created_at=T0 + 31 * HOUR)

        assert LedgerService.get_sold_amount(db, user.id, "AAPL") == 150_000_000
        assert LedgerService.get_sold_amount(db, user.id, "XAU") == 0
        assert [s.from_amount for s in LedgerService.get_sales(db, user.id, "AAPL")] == [
            100_000_000,
            50_000_000,
        ]

    def test_sale_records(self, db, user, priced_assets):
        make_purchase(db, user, "AAPL", 500_000_000, 10_000_000)
        make_sale(db, user, "AAPL", 50_000_000, 1_000_000, created_at=T0 + 31 * HOUR)
        make_sale(db, user, "AAPL", 100_000_000, 3_000_000, created_at=T0 + 30 * HOUR)

        records = LedgerService.get_sale_records(db, user.id, "AAPL")

        assert [amount for amount, _ in records] == [100_000_000, 50_000_000]
        assert [as_utc(sold_at) for _, sold_at in records] == [T0 + 30 * HOUR, T0 + 31 * HOUR]

    def test_holding_amount(self, db, user, priced_assets):
        make_purchase(db, user, "AAPL", 500_000_000, 10_000_000)
        make_sale(db, user, "AAPL", 100_000_000, 3_000_000, created_at=T0 + 30 * HOUR)

        assert LedgerService.get_holding_amount(db, user, "AAPL") == 400_000_000
        assert LedgerService.get_holding_amount(db, user, "BTC") == 93_000_000
        assert LedgerService.get_holding_amount(db, user, "XAU") == 0


class TestGetHoldings:
    def test_btc_then_sorted_symbols(self, db, user, priced_assets):
        make_purchase(db, user, "XAU", 100, 200_000)
        make_purchase(db, user, "AAPL", 100, 200_000)

        assert list(LedgerService.get_holdings(db, user)) == ["BTC", "AAPL", "XAU"]

    def test_zero_holdings_omitted(self, db, user, priced_assets):
        make_purchase(db, user, "AAPL", 100, 100_000_000)
        make_sale(db, user, "AAPL", 100, 1, created_at=T0 + 30 * HOUR)

        # BTC balance is 1 sat, AAPL fully sold
        assert LedgerService.get_holdings(db, user) == {"BTC": 1}

    def test_oversold_holding_logged_and_skipped(self, db, user, priced_assets, caplog):
        make_purchase(db, user, "AAPL", 100, 100_000)
        make_sale(db, user, "AAPL", 150, 1, created_at=T0 + 30 * HOUR)

        with caplog.at_level(logging.WARNING, logger="services.ledger_service"):
            holdings = LedgerService.get_holdings(db, user)

        assert "AAPL" not in holdings
        assert "sells more AAPL" in caplog.text
