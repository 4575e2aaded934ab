#!/usr/bin/env python
"""Print a user's portfolio and per-lot lock state from the ledger.

Usage:
    cd backend
    uv run python -m scripts.debug_portfolio alice
    uv run python -m scripts.debug_portfolio alice@example.com --asset AAPL
    uv run python -m scripts.debug_portfolio alice --trades 20
"""

import argparse
import sys

from database import get_session_local
from logging_config import setup_logging
from schemas.portfolio import AssetDetail, PortfolioSummary
from schemas.trade import TradeResponse
from services.exceptions import LedgerError
from services.portfolio_service import PortfolioService
from services.trade_service import TradeService
from services.user_service import UserService
from utils.units import format_units


def _fmt_sats(val: int) -> str:
    """Format sats with a thousands separator."""
    return f"{val:,}"


def render_portfolio(summary: PortfolioSummary) -> list[str]:
    """Render a portfolio summary as table lines."""
    lines = [
        f"Portfolio for {summary.user_id} at {summary.valued_at:%Y-%m-%d %H:%M} UTC",
        "=" * 96,
        f"{'Asset':<8} {'Amount':>20} {'Value (sats)':>16} {'Cost (sats)':>16} "
        f"{'Locked':>20} {'Status':>9}",
        f"{'-' * 8} {'-' * 20} {'-' * 16} {'-' * 16} {'-' * 20} {'-' * 9}",
    ]
    for h in summary.holdings:
        lines.append(
            f"{h.asset_symbol:<8} "
            f"{format_units(h.amount):>20} "
            f"{_fmt_sats(h.current_value_sats):>16} "
            f"{_fmt_sats(h.cost_basis_sats):>16} "
            f"{format_units(h.locked_amount):>20} "
            f"{h.lock_status:>9}"
        )
    lines.append("")
    lines.append(f"Total value: {_fmt_sats(summary.total_value_sats)} sats")
    lines.append(f"Total cost:  {_fmt_sats(summary.total_cost_sats)} sats")
    if summary.btc_price_usd is not None:
        lines.append(f"BTC price:   ${summary.btc_price_usd:,.2f}")
    return lines


def render_asset_detail(detail: AssetDetail) -> list[str]:
    """Render purchases and sales for one asset as table lines."""
    lines = [f"{detail.asset_symbol} purchases (newest first)"]
    if not detail.purchases:
        lines.append("  (none)")
    for p in detail.purchases:
        flag = "LOCKED" if p.is_locked else "open"
        lines.append(
            f"  #{p.id:<5} {p.created_at:%Y-%m-%d %H:%M} "
            f"amount={format_units(p.amount)} remaining={format_units(p.remaining_amount)} "
            f"spent={_fmt_sats(p.btc_spent)} {flag} until {p.locked_until:%Y-%m-%d %H:%M}"
        )
    lines.append(f"{detail.asset_symbol} sales (newest first)")
    if not detail.sales:
        lines.append("  (none)")
    for s in detail.sales:
        lines.append(
            f"  #{s.id:<5} {s.created_at:%Y-%m-%d %H:%M} "
            f"sold={format_units(s.from_amount)} received={_fmt_sats(s.to_amount)} "
            f"cost={_fmt_sats(s.cost_basis_sats)} gain={_fmt_sats(s.realized_gain_sats)}"
        )
    return lines


def render_trade_history(trades: list[TradeResponse]) -> list[str]:
    """Render trades (already newest first) as table lines."""
    lines = [
        f"{'#':>6} {'When':<16} {'From':<6} {'Amount':>20} {'To':<6} {'Amount':>20}",
        f"{'-' * 6} {'-' * 16} {'-' * 6} {'-' * 20} {'-' * 6} {'-' * 20}",
    ]
    for t in trades:
        lines.append(
            f"{t.id:>6} {t.created_at:%Y-%m-%d %H:%M} "
            f"{t.from_asset:<6} {format_units(t.from_amount):>20} "
            f"{t.to_asset:<6} {format_units(t.to_amount):>20}"
        )
    if not trades:
        lines.append("(no trades)")
    return lines


def debug_portfolio(identifier: str, asset: str | None = None, trades: int | None = None) -> int:
    """Print the portfolio, one asset's lots, or recent trades for a user."""
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        user = UserService.find_user(db, identifier)
        if user is None:
            print(f"No user matching '{identifier}'")
            return 1

        if trades is not None:
            history = TradeService.get_trade_history(db, user.id, limit=trades)
            rows = [TradeResponse.model_validate(t) for t in history]
            print("\n".join(render_trade_history(rows)))
        elif asset:
            detail = PortfolioService.get_asset_detail(db, user.id, asset)
            print("\n".join(render_asset_detail(detail)))
        else:
            summary = PortfolioService.get_portfolio(db, user.id)
            print("\n".join(render_portfolio(summary)))
        return 0
    finally:
        db.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("user", help="User id, username or email")
    parser.add_argument("--asset", help="Show purchase/sale lots for one asset")
    parser.add_argument("--trades", type=int, metavar="N", help="Show the N most recent trades")
    args = parser.parse_args(argv)
    setup_logging()

    try:
        return debug_portfolio(args.user, args.asset, args.trades)
    except LedgerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
