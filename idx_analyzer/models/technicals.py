"""Pydantic models for technical indicators."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel


class SignalDirection(StrEnum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class RSISignal(StrEnum):
    OVERSOLD = "oversold"
    OVERBOUGHT = "overbought"
    NEUTRAL = "neutral"


class BandPosition(StrEnum):
    ABOVE = "above"
    BELOW = "below"
    MIDDLE = "middle"


class TrendLabel(StrEnum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    SIDEWAYS = "sideways"


class TradeSignal(StrEnum):
    BUY = "buy"
    SELL = "sell"
    NEUTRAL = "neutral"


class RSIData(BaseModel):
    value: float
    signal: RSISignal


class MovingAverages(BaseModel):
    """Simple moving averages; None where the series is shorter than the window."""

    sma_5: float | None = None
    sma_10: float | None = None
    sma_20: float | None = None
    sma_50: float | None = None
    sma_100: float | None = None
    sma_150: float | None = None
    sma_200: float | None = None


class MACDData(BaseModel):
    macd_line: float
    signal_line: float
    histogram: float


class BollingerBands(BaseModel):
    upper: float
    middle: float
    lower: float
    bandwidth: float


class SupportResistance(BaseModel):
    support: float
    resistance: float


class IndicatorSnapshot(BaseModel):
    """All technical indicators for one ticker as of its last bar."""

    ticker: str
    as_of_date: date | None
    current_price: float | None
    rsi: RSIData | None
    moving_averages: MovingAverages
    macd: MACDData | None
    macd_signal: SignalDirection
    bollinger: BollingerBands | None
    price_vs_bollinger: BandPosition
    atr: float | None
    support_resistance: SupportResistance | None
    trend: TrendLabel
    signal: TradeSignal

    @property
    def rsi_signal(self) -> RSISignal:
        return self.rsi.signal if self.rsi is not None else RSISignal.NEUTRAL
