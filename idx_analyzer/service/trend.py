"""TrendService: trend template and stage analysis for a single instrument."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from idx_analyzer.features.trend import classify_stage, evaluate_criteria
from idx_analyzer.models.data import PriceBar
from idx_analyzer.models.technicals import IndicatorSnapshot
from idx_analyzer.models.trend import StageClassification, TrendTemplateResult
from idx_analyzer.service.technical import TechnicalService

if TYPE_CHECKING:
    from idx_analyzer.data.sectors import SectorProvider
    from idx_analyzer.data.service import DataService


class TrendService:
    """Evaluate the eight-criterion trend template and the market-cycle stage."""

    def __init__(
        self,
        technical_service: TechnicalService | None = None,
        sector_provider: SectorProvider | None = None,
        data_service: DataService | None = None,
    ) -> None:
        self.technical_service = technical_service or TechnicalService(data_service)
        self.sector_provider = sector_provider
        self.data_service = data_service

    def check(
        self,
        ticker: str,
        sector_rs: float,
        ohlcv: pd.DataFrame | list[PriceBar] | None = None,
    ) -> TrendTemplateResult | None:
        """Trend template result, or None with less than a year of bars."""
        df = self.technical_service.get_ohlcv(ticker, ohlcv)
        if df.empty:
            return None
        sector = (
            self.sector_provider.get_sector(ticker)
            if self.sector_provider is not None else "Unknown"
        )
        snapshot = self.technical_service.snapshot(ticker, df)
        return evaluate_criteria(df, sector_rs, ticker=ticker, sector=sector, snapshot=snapshot)

    def stage(
        self,
        ticker: str,
        ohlcv: pd.DataFrame | list[PriceBar] | None = None,
        snapshot: IndicatorSnapshot | None = None,
    ) -> StageClassification:
        """Market-cycle stage; Transition with zero confidence on short history."""
        df = self.technical_service.get_ohlcv(ticker, ohlcv)
        if df.empty:
            return classify_stage(df, None)
        snapshot = snapshot or self.technical_service.snapshot(ticker, df)
        return classify_stage(df, snapshot)