"""Service for the asset catalog and its cached USD prices."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from models import Asset, utcnow
from services.exceptions import AssetPriceUnavailableError, InvalidAmountError

logger = logging.getLogger(__name__)

# symbol -> (name, asset_type, category)
DEFAULT_ASSETS: dict[str, tuple[str, str, str]] = {
    "BTC": ("Bitcoin", "crypto", "Cryptocurrency"),
    # Technology
    "AAPL": ("Apple Inc.", "stock", "Technology"),
    "MSFT": ("Microsoft Corp.", "stock", "Technology"),
    "GOOGL": ("Alphabet Inc.", "stock", "Technology"),
    "AMZN": ("Amazon.com Inc.", "stock", "Technology"),
    "NVDA": ("NVIDIA Corp.", "stock", "Technology"),
    "TSLA": ("Tesla Inc.", "stock", "Technology"),
    "META": ("Meta Platforms Inc.", "stock", "Technology"),
    # Finance
    "JPM": ("JPMorgan Chase & Co.", "stock", "Finance"),
    "V": ("Visa Inc.", "stock", "Finance"),
    "BRK-B": ("Berkshire Hathaway Inc.", "stock", "Finance"),
    # Healthcare / consumer
    "JNJ": ("Johnson & Johnson", "stock", "Healthcare"),
    "WMT": ("Walmart Inc.", "stock", "Consumer Goods"),
    # Index funds
    "SPY": ("SPDR S&P 500 ETF", "stock", "Stock Indices"),
    "QQQ": ("Invesco QQQ Trust", "stock", "Stock Indices"),
    "VTI": ("Vanguard Total Stock Market ETF", "stock", "Stock Indices"),
    # Real estate / bonds
    "VNQ": ("Vanguard Real Estate ETF", "stock", "Real Estate"),
    "TLT": ("iShares 20+ Year Treasury Bond ETF", "stock", "Bonds"),
    # Commodities
    "XAU": ("Gold", "commodity", "Precious Metals"),
    "XAG": ("Silver", "commodity", "Precious Metals"),
    "WTI": ("Crude Oil WTI", "commodity", "Energy"),
    "CPER": ("United States Copper Index Fund", "commodity", "Industrial Metals"),
}


class AssetService:
    """Manages Asset reference rows and the price cache."""

    @staticmethod
    def seed_default_assets(db: Session) -> int:
        """Insert catalog assets that are missing. Returns how many were added.

        Existing rows (and their prices) are left alone.
        """
        existing = {symbol for (symbol,) in db.query(Asset.symbol).all()}
        added = 0
        for symbol, (name, asset_type, category) in DEFAULT_ASSETS.items():
            if symbol in existing:
                continue
            db.add(Asset(symbol=symbol, name=name, asset_type=asset_type, category=category))
            added += 1
        db.flush()
        if added:
            logger.info("Seeded %d default assets", added)
        else:
            logger.info("Asset catalog already seeded, nothing to add")
        return added

    @staticmethod
    def update_prices(
        db: Session,
        prices: dict[str, Decimal],
        now: datetime | None = None,
    ) -> list[Asset]:
        """Write fresh USD prices into the cache.

        Unknown symbols are created as ``stock`` rows so a feed can introduce
        new tickers. Every price must be positive; on a bad price nothing is
        written.

        Raises:
            InvalidAmountError: If any price is missing or not positive.
        """
        now = now or utcnow()
        parsed: dict[str, Decimal] = {}
        for symbol, price in prices.items():
            try:
                value = Decimal(str(price)) if price is not None else None
            except InvalidOperation:
                value = None
            if value is None or not value.is_finite() or value <= 0:
                raise InvalidAmountError(f"Invalid price for {symbol}: {price!r}", price)
            parsed[symbol.upper()] = value

        updated = []
        for symbol, price in parsed.items():
            asset = db.query(Asset).filter_by(symbol=symbol).first()
            if asset is None:
                asset = Asset(symbol=symbol, name=symbol, asset_type="stock")
                db.add(asset)
                logger.info("Created asset from price feed: %s", symbol)
            asset.current_price_usd = price
            asset.last_updated = now
            updated.append(asset)
        db.flush()
        logger.info("Updated prices for %d assets", len(updated))
        return updated

    @staticmethod
    def get_prices(db: Session, symbols: list[str]) -> dict[str, Decimal]:
        """Cached USD prices for ``symbols``.

        Raises:
            AssetPriceUnavailableError: If any symbol is unknown or unpriced.
        """
        assets = db.query(Asset).filter(Asset.symbol.in_(symbols)).all()
        prices = {
            a.symbol: a.current_price_usd
            for a in assets
            if a.current_price_usd is not None
        }
        missing = [s for s in symbols if s not in prices]
        if missing:
            raise AssetPriceUnavailableError(missing)
        return prices

    @staticmethod
    def get_assets_by_symbol(db: Session) -> dict[str, Asset]:
        """All assets keyed by symbol, priced or not."""
        return {a.symbol: a for a in db.query(Asset).all()}
