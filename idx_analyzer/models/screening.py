"""Screener result models."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel

from idx_analyzer.models.data import SkippedUnit
from idx_analyzer.models.technicals import SignalDirection, TradeSignal, TrendLabel
from idx_analyzer.models.trend import TrendTemplateResult


class ScreenerPreset(StrEnum):
    OVERSOLD = "oversold"
    OVERBOUGHT = "overbought"
    BULLISH = "bullish"
    BEARISH = "bearish"
    BREAKOUT = "breakout"
    MOMENTUM = "momentum"
    UNDERVALUED = "undervalued"
    RSI_EXTREME = "rsi_extreme"


class ScreenedStock(BaseModel):
    """A single preset-screen hit."""

    ticker: str
    price: float
    rsi: float | None
    macd_signal: SignalDirection
    trend: TrendLabel
    signal: TradeSignal
    score: int  # heuristic: base + bonuses, not a statistical measure


class ScreeningResult(BaseModel):
    """Preset screen over a universe. ``stocks`` is sorted best first."""

    as_of_date: date
    preset: ScreenerPreset
    tickers_scanned: int
    stocks: list[ScreenedStock]
    skipped: list[SkippedUnit] = []
    summary: str


class TrendScreenResult(BaseModel):
    """Trend-template scan over a universe, sorted by (score, rs) descending."""

    as_of_date: date
    min_score: int
    tickers_scanned: int
    results: list[TrendTemplateResult]
    sector_counts: dict[str, int]
    skipped: list[SkippedUnit] = []
    summary: str
