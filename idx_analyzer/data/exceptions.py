"""Errors raised while loading IDX bars and broker flows.

Services catch ``DataFetchError`` per ticker (or per trading day for broker
flows), record a skipped unit and carry on with the rest of the universe.
"""

from __future__ import annotations

from datetime import date


class DataFetchError(Exception):
    """A bar or broker-flow source could not supply data for one unit."""

    def __init__(
        self, provider: str, ticker: str, message: str, day: date | None = None,
    ) -> None:
        self.provider = provider
        self.ticker = ticker
        self.day = day
        unit = f"{ticker} on {day.isoformat()}" if day is not None else ticker
        super().__init__(f"[{provider}] {unit}: {message}")


class InvalidTickerError(ValueError):
    """Not an IDX stock code (2-6 letters or digits once ``.JK`` is dropped)."""

    def __init__(self, provider: str, ticker: str) -> None:
        self.provider = provider
        self.ticker = ticker
        super().__init__(f"[{provider}] {ticker!r} is not an IDX stock code")


class CacheError(Exception):
    """Parquet bar store could not be read or written."""


class NoProviderError(Exception):
    """Nothing registered that can serve the requested data type."""

    def __init__(self, data_type: str) -> None:
        self.data_type = data_type
        super().__init__(f"No source registered for {data_type} data")
