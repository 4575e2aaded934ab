"""Fixed-point unit helpers.

Every amount in the ledger is an integer count of base units: sats for BTC,
and 10^-8 of a share/ounce/barrel for every other asset.
"""

from decimal import Decimal, InvalidOperation

from services.exceptions import InvalidAmountError

SATS_PER_BTC = 100_000_000
BASE_UNITS_PER_ASSET = SATS_PER_BTC
BTC_SYMBOL = "BTC"

# Base units per one input unit
UNIT_MULTIPLIERS: dict[str, Decimal] = {
    "btc": Decimal(SATS_PER_BTC),
    "sat": Decimal(1),
    "ksat": Decimal(1000),
    "msat": Decimal("0.001"),
    "asset": Decimal(BASE_UNITS_PER_ASSET),
}


def to_base_units(amount: int | str | Decimal, unit: str = "sat") -> int:
    """Convert a user-entered amount in ``unit`` to integer base units.

    Raises InvalidAmountError for unknown units, unparseable or non-positive
    amounts, and amounts that do not land on a whole base unit (e.g.
    ``1500 msat``). Floats are refused outright.
    """
    multiplier = UNIT_MULTIPLIERS.get(unit.lower())
    if multiplier is None:
        raise InvalidAmountError(
            f"Invalid unit {unit!r}; expected one of {sorted(UNIT_MULTIPLIERS)}",
            amount,
        )
    if isinstance(amount, (bool, float)):
        raise InvalidAmountError(f"Amount must be an int, str or Decimal, got {type(amount).__name__}", amount)

    try:
        value = Decimal(str(amount)) * multiplier
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid amount: {amount!r}", amount) from None

    if not value.is_finite() or value <= 0:
        raise InvalidAmountError("Amount must be a positive number", amount)
    if value != value.to_integral_value():
        raise InvalidAmountError(
            f"{amount} {unit} is not a whole number of base units", amount
        )
    return int(value)


def format_units(amount: int, places: int = 8) -> str:
    """Render base units as a decimal string, e.g. 150000000 -> '1.50000000'."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), SATS_PER_BTC)
    text = f"{sign}{whole}.{frac:08d}"
    if places < 8:
        text = text[: len(text) - (8 - places)].rstrip(".")
    return text
