"""Preset screen predicates and scoring: pure computation, no data fetching."""

from __future__ import annotations

from collections.abc import Callable

from idx_analyzer.config import ScreeningSettings, get_settings
from idx_analyzer.models.screening import ScreenedStock, ScreenerPreset
from idx_analyzer.models.technicals import (
    BandPosition,
    IndicatorSnapshot,
    RSISignal,
    SignalDirection,
    TradeSignal,
    TrendLabel,
)


def _rsi(snapshot: IndicatorSnapshot) -> float | None:
    return snapshot.rsi.value if snapshot.rsi is not None else None


def _oversold(s: IndicatorSnapshot) -> bool:
    rsi = _rsi(s)
    return rsi is not None and rsi < 30


def _overbought(s: IndicatorSnapshot) -> bool:
    rsi = _rsi(s)
    return rsi is not None and rsi > 70


def _bullish(s: IndicatorSnapshot) -> bool:
    return (
        s.macd_signal == SignalDirection.BULLISH
        and s.moving_averages.sma_20 is not None
        and s.trend == TrendLabel.BULLISH
    )


def _bearish(s: IndicatorSnapshot) -> bool:
    return (
        s.macd_signal == SignalDirection.BEARISH
        and s.moving_averages.sma_20 is not None
        and s.trend == TrendLabel.BEARISH
    )


def _breakout(s: IndicatorSnapshot) -> bool:
    rsi = _rsi(s)
    return (
        s.price_vs_bollinger == BandPosition.ABOVE
        and s.trend == TrendLabel.BULLISH
        and (rsi if rsi is not None else 50.0) < 80
    )


def _momentum(s: IndicatorSnapshot) -> bool:
    rsi = _rsi(s)
    return (
        rsi is not None
        and 45 <= rsi <= 75
        and s.macd_signal == SignalDirection.BULLISH
        and s.trend in (TrendLabel.BULLISH, TrendLabel.SIDEWAYS)
    )


def _undervalued(s: IndicatorSnapshot) -> bool:
    rsi = _rsi(s)
    return s.rsi_signal == RSISignal.OVERSOLD or (rsi is not None and rsi < 40)


def _rsi_extreme(s: IndicatorSnapshot) -> bool:
    return _oversold(s) or _overbought(s)


PRESET_CRITERIA: dict[ScreenerPreset, Callable[[IndicatorSnapshot], bool]] = {
    ScreenerPreset.OVERSOLD: _oversold,
    ScreenerPreset.OVERBOUGHT: _overbought,
    ScreenerPreset.BULLISH: _bullish,
    ScreenerPreset.BEARISH: _bearish,
    ScreenerPreset.BREAKOUT: _breakout,
    ScreenerPreset.MOMENTUM: _momentum,
    ScreenerPreset.UNDERVALUED: _undervalued,
    ScreenerPreset.RSI_EXTREME: _rsi_extreme,
}


def score_snapshot(
    snapshot: IndicatorSnapshot,
    preset: ScreenerPreset,
    settings: ScreeningSettings | None = None,
) -> int:
    """Heuristic ranking score: base plus signal/trend/oversold bonuses."""
    settings = settings or get_settings().screening
    score = settings.base_score
    if snapshot.signal == TradeSignal.BUY:
        score += settings.buy_signal_bonus
    if snapshot.trend == TrendLabel.BULLISH:
        score += settings.bullish_trend_bonus
    if snapshot.rsi_signal == RSISignal.OVERSOLD and preset == ScreenerPreset.OVERSOLD:
        score += settings.oversold_bonus
    return score


def screen_snapshot(
    snapshot: IndicatorSnapshot,
    preset: ScreenerPreset,
    settings: ScreeningSettings | None = None,
) -> ScreenedStock | None:
    """Apply a preset to one snapshot.

    Returns:
        The scored hit, or None when the preset's predicate fails.
    """
    if not PRESET_CRITERIA[preset](snapshot):
        return None
    return ScreenedStock(
        ticker=snapshot.ticker,
        price=snapshot.current_price,
        rsi=_rsi(snapshot),
        macd_signal=snapshot.macd_signal,
        trend=snapshot.trend,
        signal=snapshot.signal,
        score=score_snapshot(snapshot, preset, settings),
    )
