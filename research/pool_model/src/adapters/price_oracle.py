"""Oracle adapter normalizing two USD price feeds to the internal scale"""
import logging
from dataclasses import dataclass

from .interfaces import PriceFeed
from ..constants import DEFAULT_FEED_ATTEMPTS, PRICE_DECIMALS
from ..errors import InvalidPriceError, PriceFeedError
from ..fixed_point import checked_mul

logger = logging.getLogger(__name__)


def normalize_price(price: int, decimals: int) -> int:
    """Rescale a feed answer to PRICE_DECIMALS.

    price * 10^(PRICE_DECIMALS - decimals); feeds with more precision than the
    internal scale are truncated.
    """
    if price <= 0:
        raise InvalidPriceError(f"Non-positive price {price}")
    if decimals < 0:
        raise InvalidPriceError(f"Negative feed decimals {decimals}")
    if decimals <= PRICE_DECIMALS:
        return checked_mul(price, 10 ** (PRICE_DECIMALS - decimals))
    return price // 10 ** (decimals - PRICE_DECIMALS)


@dataclass
class ExchangeRateOracle:
    """Reads the collateral and underlying USD feeds.

    Nothing is cached: each call goes to the feed. A feed raising
    PriceFeedError is retried up to max_attempts times, then the error
    propagates.
    """
    collateral_feed: PriceFeed
    underlying_feed: PriceFeed
    max_attempts: int = DEFAULT_FEED_ATTEMPTS

    def _read(self, feed: PriceFeed, name: str) -> int:
        for attempt in range(self.max_attempts):
            try:
                price, decimals = feed.latest_price()
            except PriceFeedError as e:
                if attempt < self.max_attempts - 1:
                    logger.warning("%s feed read failed, retrying... (attempt %s/%s): %s", name, attempt + 2, self.max_attempts, e)
                    continue
                raise
            return normalize_price(price, decimals)
        raise PriceFeedError(f"{name} feed configured with max_attempts={self.max_attempts}")

    def collateral_price(self) -> int:
        return self._read(self.collateral_feed, "collateral")

    def underlying_price(self) -> int:
        return self._read(self.underlying_feed, "underlying")
