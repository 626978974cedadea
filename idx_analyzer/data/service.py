"""DataService: ordered provider fallback for daily bars."""

from __future__ import annotations

import logging
from datetime import date, timedelta

import pandas as pd

from idx_analyzer.data.exceptions import CacheError, DataFetchError, InvalidTickerError
from idx_analyzer.data.providers.base import DataProvider
from idx_analyzer.data.providers.parquet_store import ParquetBarStore
from idx_analyzer.data.providers.yfinance import YFinanceProvider
from idx_analyzer.data.registry import ProviderRegistry
from idx_analyzer.data.throttle import RateLimiter
from idx_analyzer.models.data import (
    DataRequest,
    DataType,
    PriceBar,
    ProviderType,
    clean_ohlcv,
    frame_to_bars,
    is_valid_ticker,
    normalize_ticker,
)

logger = logging.getLogger(__name__)


class DataService:
    """Entry point for all historical bar access.

    Providers are tried in registration order (bulk parquet store first, then
    live Yahoo Finance). The first one returning at least ``min_bars`` bars
    wins; bars from a live provider are written through into the store.
    Live providers are paced by a per-provider ``RateLimiter``.
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        store: ParquetBarStore | None = None,
        limiters: dict[ProviderType, RateLimiter] | None = None,
        today: date | None = None,
    ) -> None:
        from idx_analyzer.config import get_settings

        self._settings = get_settings().data
        if registry is None:
            store = store or ParquetBarStore()
            registry = self._default_registry(store)
        self._registry = registry
        self._store = store
        if limiters is None:
            limiters = {
                ProviderType.YFINANCE: RateLimiter(self._settings.bar_interval_seconds),
            }
        self._limiters = limiters
        self._today = today

    @staticmethod
    def _default_registry(store: ParquetBarStore) -> ProviderRegistry:
        reg = ProviderRegistry()
        reg.register(store)
        reg.register(YFinanceProvider())
        return reg

    def _end_date(self) -> date:
        return self._today or date.today()

    def _fetch_from(self, provider: DataProvider, request: DataRequest) -> pd.DataFrame:
        limiter = self._limiters.get(provider.provider_type)
        if limiter is not None:
            limiter.wait()
        return clean_ohlcv(provider.fetch(request))

    def _write_through(self, ticker: str, df: pd.DataFrame) -> None:
        if self._store is None:
            return
        try:
            self._store.write(ticker, df)
        except CacheError as e:
            logger.warning("Could not store bars for %s: %s", ticker, e)

    def get_ohlcv(
        self,
        ticker: str,
        days_back: int = 120,
        min_bars: int = 0,
    ) -> pd.DataFrame:
        """Last ``days_back`` bars for a ticker as an OHLCV DataFrame.

        Args:
            ticker: IDX code, with or without the ``.JK`` suffix.
            days_back: Number of trading-day bars wanted.
            min_bars: A provider returning fewer bars is treated as a miss
                and the next provider is tried.

        Raises:
            InvalidTickerError: If the ticker is not a well-formed IDX code.
            DataFetchError: If no provider could supply enough bars.
        """
        code = normalize_ticker(ticker, self._settings.idx_suffix)
        if not is_valid_ticker(code):
            raise InvalidTickerError("data_service", ticker)

        end = self._end_date()
        # Calendar-day window wide enough to cover weekends and holidays
        start = end - timedelta(days=int(days_back * self._settings.calendar_buffer) + 1)
        request = DataRequest(
            ticker=code, data_type=DataType.OHLCV, start_date=start, end_date=end,
        )

        errors: list[str] = []
        for provider in self._registry.candidates(DataType.OHLCV):
            try:
                df = self._fetch_from(provider, request)
            except DataFetchError as e:
                logger.debug("%s", e)
                errors.append(str(e))
                continue
            if len(df) < max(min_bars, 1):
                errors.append(
                    f"[{provider.provider_type}] only {len(df)} bars, need {min_bars}"
                )
                continue
            if provider is not self._store:
                self._write_through(code, df)
            return df.iloc[-days_back:] if days_back > 0 else df

        raise DataFetchError("data_service", code, "; ".join(errors) or "no provider")

    def get_bars(self, ticker: str, days_back: int = 120) -> list[PriceBar]:
        """Same as ``get_ohlcv`` but as a list of ``PriceBar``."""
        return frame_to_bars(self.get_ohlcv(ticker, days_back))
