"""FIFO cost-basis and lock engine.

Pure functions over a snapshot of a user's Purchase rows for one asset.
Nothing here touches the database; callers load the ledger, call these
functions, and write whatever rows the result implies.

Conventions:
- All amounts are integer base units (x10^8). BTC cost is in sats.
- A purchase is either entirely locked (``now < locked_until``) or entirely
  unlocked. There is no partial unlock.
- Consumption by past sales is never stored. It is recomputed by replaying
  each past sale, in time order, against the purchases that were unlocked
  when it happened, oldest first.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Protocol

from services.exceptions import (
    InsufficientBalanceError,
    InsufficientUnlockedBalanceError,
    InvalidAmountError,
    UnsupportedTradeError,
)
from utils.units import BTC_SYMBOL, SATS_PER_BTC

# A past sale as (units sold, when it was sold)
SaleRecord = tuple[int, datetime]


class PurchaseLike(Protocol):
    """The fields of a Purchase the engine reads."""

    amount: int
    btc_spent: int
    locked_until: datetime
    created_at: datetime


@dataclass
class LotPosition:
    """A purchase after past sales have been replayed against it."""

    purchase: PurchaseLike
    consumed: int
    remaining: int


@dataclass
class LotConsumption:
    """The part of one purchase taken by a single sale."""

    purchase: PurchaseLike
    amount: int
    cost_basis_sats: int


@dataclass
class FifoResult:
    """Outcome of allocating one sale across purchases."""

    sale_amount: int
    cost_basis_sats: int
    consumptions: list[LotConsumption] = field(default_factory=list)


@dataclass
class LotStatus:
    """Per-purchase lock flag and what is left of it, for display."""

    purchase: PurchaseLike
    is_locked: bool
    remaining: int
    remaining_cost_sats: int


def _check_amount(value: object, name: str) -> int:
    """Reject negative and non-integer amounts."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{name} must be an integer, got {value!r}", value)
    if value < 0:
        raise InvalidAmountError(f"{name} must not be negative, got {value}", value)
    return value


def _round_div(numerator: int, denominator: int) -> int:
    """Integer division rounding half up, for non-negative numerators."""
    return (2 * numerator + denominator) // (2 * denominator)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_locked(purchase: PurchaseLike, now: datetime) -> bool:
    """True while the purchase is inside its reflection period."""
    return as_utc(now) < as_utc(purchase.locked_until)


def _chronological(purchases: list[PurchaseLike]) -> list[PurchaseLike]:
    """Validate purchases and order them oldest first.

    The sort is stable, so rows sharing a ``created_at`` keep the order the
    caller supplied (the ledger query orders ties by id).
    """
    for purchase in purchases:
        amount = _check_amount(purchase.amount, "purchase amount")
        if amount == 0:
            raise InvalidAmountError("purchase amount must be positive", amount)
        _check_amount(purchase.btc_spent, "purchase btc_spent")
    return sorted(purchases, key=lambda p: as_utc(p.created_at))


def _cost_of_range(purchase: PurchaseLike, start: int, end: int) -> int:
    """BTC cost of the slice ``[start, end)`` of a purchase's units.

    Each boundary is rounded independently, so a lot consumed in any number
    of slices is charged exactly its ``btc_spent`` in total.
    """
    spent = purchase.btc_spent
    amount = purchase.amount
    return _round_div(spent * end, amount) - _round_div(spent * start, amount)


def _take_unlocked(
    ordered: list[PurchaseLike],
    consumed: list[int],
    sale_amount: int,
    at: datetime,
) -> tuple[FifoResult, int]:
    """Consume ``sale_amount`` from lots unlocked at ``at``, oldest first.

    Mutates ``consumed`` and returns the allocation with the amount that
    could not be filled.
    """
    result = FifoResult(sale_amount=sale_amount, cost_basis_sats=0)
    left = sale_amount
    for i, purchase in enumerate(ordered):
        if left == 0:
            break
        if is_locked(purchase, at):
            continue
        take = min(purchase.amount - consumed[i], left)
        if take <= 0:
            continue
        cost = _cost_of_range(purchase, consumed[i], consumed[i] + take)
        result.consumptions.append(
            LotConsumption(purchase=purchase, amount=take, cost_basis_sats=cost)
        )
        result.cost_basis_sats += cost
        consumed[i] += take
        left -= take
    return result, left


def _replay(
    purchases: list[PurchaseLike], sales: Sequence[SaleRecord]
) -> tuple[list[PurchaseLike], list[int], list[FifoResult]]:
    """Re-run past sales in time order, each against the lots unlocked when it happened.

    Returns the purchases oldest first, the units each has given up, and one
    allocation per sale in the order ``sales`` was supplied.
    """
    ordered = _chronological(purchases)
    consumed = [0] * len(ordered)
    results: list[FifoResult | None] = [None] * len(sales)

    for idx in sorted(range(len(sales)), key=lambda k: as_utc(sales[k][1])):
        amount, sold_at = sales[idx]
        _check_amount(amount, "sale amount")
        result, left = _take_unlocked(ordered, consumed, amount, sold_at)
        if left > 0:
            raise InsufficientBalanceError(
                f"Ledger sale of {amount} units at {as_utc(sold_at):%Y-%m-%d %H:%M} "
                f"exceeds the {amount - left} units unlocked at that time",
                requested=amount,
                available=amount - left,
            )
        results[idx] = result
    return ordered, consumed, results


def build_positions(
    purchases: list[PurchaseLike], sales: Sequence[SaleRecord] = ()
) -> list[LotPosition]:
    """Replay past sales over the purchases and report what each lot has left.

    Each sale consumes the lots that were unlocked at its own time, oldest
    first, exactly as it did when it was executed.

    Raises:
        InvalidAmountError: If any amount is negative or not an integer.
        InsufficientBalanceError: If a recorded sale exceeds what was unlocked
            when it happened.
    """
    ordered, consumed, _ = _replay(purchases, sales)
    return [
        LotPosition(purchase=purchase, consumed=used, remaining=purchase.amount - used)
        for purchase, used in zip(ordered, consumed)
    ]


def sellable_amount(
    purchases: list[PurchaseLike], now: datetime, sales: Sequence[SaleRecord] = ()
) -> int:
    """Units that may be sold right now.

    With no prior sales this is the sum of amounts whose ``locked_until`` is
    at or before ``now``. A purchase still locked contributes nothing.
    """
    return sum(
        pos.remaining
        for pos in build_positions(purchases, sales)
        if not is_locked(pos.purchase, now)
    )


def locked_amount(
    purchases: list[PurchaseLike], now: datetime, sales: Sequence[SaleRecord] = ()
) -> int:
    """Units still inside their reflection period."""
    return sum(
        pos.remaining
        for pos in build_positions(purchases, sales)
        if is_locked(pos.purchase, now)
    )


def compute_fifo_cost_basis(
    purchases: list[PurchaseLike],
    sale_amount: int,
    now: datetime,
    sales: Sequence[SaleRecord] = (),
) -> FifoResult:
    """Allocate a sale across unlocked purchases, oldest first.

    Each purchase contributes ``btc_spent * consumed / amount`` sats of cost
    basis. The sale is all-or-nothing: if it exceeds the unlocked remaining
    amount nothing is allocated.

    Args:
        purchases: The user's Purchase rows for one asset.
        sale_amount: Units to sell.
        now: Time used for the lock check.
        sales: Earlier sales of this asset as ``(amount, sold_at)`` pairs.

    Raises:
        InvalidAmountError: Negative or non-integer amounts.
        InsufficientUnlockedBalanceError: ``sale_amount`` exceeds what is sellable.
    """
    _check_amount(sale_amount, "sale_amount")
    ordered, consumed, _ = _replay(purchases, sales)

    available = sum(
        p.amount - used for p, used in zip(ordered, consumed) if not is_locked(p, now)
    )
    if sale_amount > available:
        locked = sum(p.amount - used for p, used in zip(ordered, consumed)) - available
        raise InsufficientUnlockedBalanceError(
            f"Cannot sell {sale_amount} units: {available} unlocked, {locked} locked",
            requested=sale_amount,
            available=available,
            locked=locked,
        )

    result, _ = _take_unlocked(ordered, consumed, sale_amount, now)
    return result


def allocate_sales(purchases: list[PurchaseLike], sales: Sequence[SaleRecord]) -> list[FifoResult]:
    """FIFO cost basis of each past sale, in the order given.

    Raises:
        InsufficientBalanceError: If a sale exceeds what was unlocked when it happened.
    """
    _, _, results = _replay(purchases, sales)
    return results


def lock_status(
    purchases: list[PurchaseLike], now: datetime, sales: Sequence[SaleRecord] = ()
) -> list[LotStatus]:
    """Per-purchase lock flag and remaining amount/cost, oldest first."""
    return [
        LotStatus(
            purchase=pos.purchase,
            is_locked=is_locked(pos.purchase, now),
            remaining=pos.remaining,
            remaining_cost_sats=_cost_of_range(pos.purchase, pos.consumed, pos.purchase.amount),
        )
        for pos in build_positions(purchases, sales)
    ]


def current_value(holding_amount: int, current_price_sats: int) -> int:
    """Value in sats of ``holding_amount`` base units at ``current_price_sats`` per unit.

    Multiplies before dividing by 10^8 and rounds half up.
    """
    _check_amount(holding_amount, "holding_amount")
    _check_amount(current_price_sats, "current_price_sats")
    return _round_div(holding_amount * current_price_sats, SATS_PER_BTC)


def _to_decimal(value: Decimal | int | str, name: str) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        price = Decimal(value)
    except (InvalidOperation, TypeError):
        raise InvalidAmountError(f"{name} must be a number, got {value!r}", value) from None
    if not price.is_finite() or price <= 0:
        raise InvalidAmountError(f"{name} must be a positive price, got {value!r}", value)
    return price


def _round_decimal(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def price_in_sats(asset_price_usd: Decimal | int | str, btc_price_usd: Decimal | int | str) -> int:
    """Price of one whole unit of an asset, in sats."""
    asset_usd = _to_decimal(asset_price_usd, "asset_price_usd")
    btc_usd = _to_decimal(btc_price_usd, "btc_price_usd")
    with localcontext() as ctx:
        ctx.prec = 50
        return _round_decimal(asset_usd * SATS_PER_BTC / btc_usd)


def convert_amount(
    from_asset: str,
    to_asset: str,
    amount: int,
    asset_price_usd: Decimal | int | str,
    btc_price_usd: Decimal | int | str,
) -> int:
    """Convert base units across a BTC <-> asset trade at USD prices.

    BTC -> asset: ``sats * btc_usd / asset_usd`` asset units.
    asset -> BTC: ``units * asset_usd / btc_usd`` sats.
    Both sides use the same x10^8 scale, so no rescaling is needed.

    Raises:
        UnsupportedTradeError: Same asset, or neither side is BTC.
    """
    _check_amount(amount, "amount")
    asset_usd = _to_decimal(asset_price_usd, "asset_price_usd")
    btc_usd = _to_decimal(btc_price_usd, "btc_price_usd")

    if from_asset == to_asset:
        raise UnsupportedTradeError("Cannot trade asset to itself")

    with localcontext() as ctx:
        ctx.prec = 50
        if from_asset == BTC_SYMBOL:
            return _round_decimal(amount * btc_usd / asset_usd)
        if to_asset == BTC_SYMBOL:
            return _round_decimal(amount * asset_usd / btc_usd)
    raise UnsupportedTradeError("One asset must be BTC")
