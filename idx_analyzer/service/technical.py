"""TechnicalService: indicator snapshots for a single instrument."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from idx_analyzer.features.technicals import compute_atr, compute_technicals
from idx_analyzer.models.data import PriceBar, to_ohlcv_frame
from idx_analyzer.models.technicals import IndicatorSnapshot

if TYPE_CHECKING:
    from idx_analyzer.data.service import DataService

# Enough bars for SMA(200) plus the MA200 trend lookback
DEFAULT_DAYS_BACK = 300


class TechnicalService:
    """Compute technical indicators from supplied or fetched bars."""

    def __init__(self, data_service: DataService | None = None) -> None:
        self.data_service = data_service

    def get_ohlcv(
        self,
        ticker: str,
        ohlcv: pd.DataFrame | list[PriceBar] | None,
        days_back: int = DEFAULT_DAYS_BACK,
    ) -> pd.DataFrame:
        """Supplied bars as a clean OHLCV frame, else ``days_back`` fetched bars."""
        if ohlcv is not None:
            return to_ohlcv_frame(ohlcv)
        if self.data_service is None:
            raise ValueError(
                "Either provide ohlcv bars or initialize TechnicalService with a DataService"
            )
        return self.data_service.get_ohlcv(ticker, days_back)

    def snapshot(
        self, ticker: str, ohlcv: pd.DataFrame | list[PriceBar] | None = None
    ) -> IndicatorSnapshot:
        """Compute the indicator snapshot for a single instrument."""
        return compute_technicals(self.get_ohlcv(ticker, ohlcv), ticker)

    def atr(
        self,
        ticker: str,
        ohlcv: pd.DataFrame | list[PriceBar] | None = None,
        period: int = 14,
    ) -> float | None:
        """Latest ATR, or None when there are not enough bars."""
        df = self.get_ohlcv(ticker, ohlcv)
        series = compute_atr(df["High"], df["Low"], df["Close"], period)
        if series.empty or pd.isna(series.iloc[-1]):
            return None
        return float(series.iloc[-1])
