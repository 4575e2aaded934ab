"""Typed exception hierarchy for ledger and trade errors.

All errors derive from ``ValueError`` so callers that already treat bad
input as ``ValueError`` keep working, while new callers can branch on the
specific subclass.
"""


class LedgerError(ValueError):
    """Base exception for all ledger-related errors."""

    pass


class InvalidAmountError(LedgerError):
    """Amount is negative, zero where a positive value is required, or not an integer."""

    def __init__(self, message: str, amount: object = None):
        self.amount = amount
        super().__init__(message)


class BelowMinimumTradeSizeError(LedgerError):
    """BTC side of a trade is smaller than the configured minimum."""

    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(
            f"Minimum trade amount is {minimum:,} sats, got {amount:,} sats"
        )


class InsufficientBalanceError(LedgerError):
    """Requested amount exceeds the current holding."""

    def __init__(self, message: str, symbol: str = "", requested: int = 0, available: int = 0):
        self.symbol = symbol
        self.requested = requested
        self.available = available
        super().__init__(message)


class InsufficientUnlockedBalanceError(InsufficientBalanceError):
    """Requested sale exceeds the unlocked (sellable) amount.

    ``available`` is the sellable amount; ``locked`` is the amount still
    inside its reflection period.
    """

    def __init__(self, message: str, symbol: str = "", requested: int = 0, available: int = 0, locked: int = 0):
        self.locked = locked
        super().__init__(message, symbol=symbol, requested=requested, available=available)


class UnsupportedTradeError(LedgerError):
    """Trade direction is not allowed (same asset, or neither side is BTC)."""

    pass


class AssetPriceUnavailableError(LedgerError):
    """One or more assets have no cached USD price."""

    def __init__(self, symbols: list[str]):
        self.symbols = symbols
        super().__init__(f"Price not available for: {', '.join(symbols)}")


class UnknownUserError(LedgerError):
    """No user exists with the given id."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")
