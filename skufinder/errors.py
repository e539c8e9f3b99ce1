"""Exception types raised across the SKU finder."""
from __future__ import annotations


class SkuFinderError(Exception):
    """Base class for every error raised by this package."""


class FeedError(SkuFinderError):
    """A feed page could not be fetched or decoded."""

    def __init__(self, feed: str, message: str):
        super().__init__(f"{feed}: {message}")
        self.feed = feed


class PriceFeedError(FeedError):
    """The retail price feed produced nothing; no records can be built."""

    def __init__(self, message: str):
        super().__init__("retail_prices", message)


class AuthenticationError(SkuFinderError):
    """The token exchange was rejected or returned no token."""


class CacheStorageError(SkuFinderError):
    """A cache store could not read or write an entry."""


__all__ = [
    "SkuFinderError",
    "FeedError",
    "PriceFeedError",
    "AuthenticationError",
    "CacheStorageError",
]
