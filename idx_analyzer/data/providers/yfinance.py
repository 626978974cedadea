"""YFinanceProvider: IDX daily bars via yfinance."""

from __future__ import annotations

from datetime import timedelta

import pandas as pd
import yfinance as yf

from idx_analyzer.data.exceptions import DataFetchError
from idx_analyzer.data.providers.base import DataProvider
from idx_analyzer.models.data import (
    OHLCV_COLUMNS,
    DataRequest,
    DataType,
    ProviderType,
    is_valid_ticker,
    normalize_ticker,
)


class YFinanceProvider(DataProvider):
    """Fetches IDX OHLCV bars from Yahoo Finance (``BBCA`` -> ``BBCA.JK``)."""

    def __init__(self, suffix: str | None = None, timeout: float | None = None) -> None:
        from idx_analyzer.config import get_settings

        cfg = get_settings().data
        self.suffix = suffix if suffix is not None else cfg.idx_suffix
        self.timeout = timeout if timeout is not None else cfg.fetch_timeout_seconds

    def _resolve_ticker(self, ticker: str) -> str:
        """Translate an IDX code to its Yahoo symbol."""
        return f"{normalize_ticker(ticker, self.suffix)}{self.suffix}"

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.YFINANCE

    @property
    def supported_data_types(self) -> list[DataType]:
        return [DataType.OHLCV]

    def fetch(self, request: DataRequest) -> pd.DataFrame:
        """Fetch OHLCV data from yfinance.

        Returns DataFrame with columns [Open, High, Low, Close, Volume]
        and a DatetimeIndex sorted ascending. Raises DataFetchError on failure.
        """
        try:
            # yfinance end_date is exclusive, add 1 day to include it
            end = request.end_date + timedelta(days=1) if request.end_date else None
            df = yf.download(
                self._resolve_ticker(request.ticker),
                start=request.start_date,
                end=end,
                progress=False,
                auto_adjust=True,
                timeout=self.timeout,
            )
        except Exception as e:
            raise DataFetchError("yfinance", request.ticker, str(e)) from e

        if df is None or df.empty:
            raise DataFetchError(
                "yfinance", request.ticker, "No data returned (empty DataFrame)"
            )

        # yfinance may return MultiIndex columns for single ticker; flatten
        if isinstance(df.columns, pd.MultiIndex):
            df.columns = df.columns.get_level_values(0)

        missing = set(OHLCV_COLUMNS) - set(df.columns)
        if missing:
            raise DataFetchError(
                "yfinance", request.ticker, f"Missing columns: {missing}"
            )

        df = df[OHLCV_COLUMNS].copy()
        df.index = pd.DatetimeIndex(df.index)
        if df.index.tz is not None:
            df.index = df.index.tz_localize(None)
        df.sort_index(inplace=True)
        df.dropna(subset=["Open", "High", "Low", "Close"], inplace=True)

        if df.empty:
            raise DataFetchError(
                "yfinance", request.ticker, "All rows had NaN values after cleaning"
            )
        return df

    def validate_ticker(self, ticker: str) -> bool:
        return is_valid_ticker(normalize_ticker(ticker, self.suffix))
