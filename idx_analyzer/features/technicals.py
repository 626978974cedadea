"""Technical indicator computation from OHLCV DataFrames.

Every ``compute_*`` function returns a Series aligned with its input. Bars
without enough lookback hold NaN, so a short series simply yields NaN at the
last bar and the snapshot reports ``None`` for that indicator.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from idx_analyzer.config import TechnicalsSettings, get_settings
from idx_analyzer.models.technicals import (
    BandPosition,
    BollingerBands,
    IndicatorSnapshot,
    MACDData,
    MovingAverages,
    RSIData,
    RSISignal,
    SignalDirection,
    SupportResistance,
    TradeSignal,
    TrendLabel,
)


def _windows(values: pd.Series, window: int) -> np.ndarray | None:
    """Rolling windows as a 2-D view (one row per complete window)."""
    arr = values.to_numpy(dtype=float)
    if window <= 0 or len(arr) < window:
        return None
    return sliding_window_view(arr, window)


def _rolling(values: pd.Series, window: int, reducer) -> pd.Series:
    out = np.full(len(values), np.nan)
    windows = _windows(values, window)
    if windows is not None:
        out[window - 1:] = reducer(windows, axis=1)
    return pd.Series(out, index=values.index)


def _seeded_ema(values: np.ndarray, span: int) -> np.ndarray:
    """EMA seeded with the simple average of the first ``span`` values."""
    out = np.full(len(values), np.nan)
    if span <= 0 or len(values) < span:
        return out
    multiplier = 2.0 / (span + 1)
    ema = float(values[:span].mean())
    out[span - 1] = ema
    for i in range(span, len(values)):
        ema = (values[i] - ema) * multiplier + ema
        out[i] = ema
    return out


def compute_sma(close: pd.Series, window: int) -> pd.Series:
    """Simple moving average."""
    return _rolling(close, window, np.mean)


def compute_ema(close: pd.Series, span: int) -> pd.Series:
    """Exponential moving average, seeded from SMA(span)."""
    return pd.Series(_seeded_ema(close.to_numpy(dtype=float), span), index=close.index)


def compute_rsi(close: pd.Series, period: int) -> pd.Series:
    """RSI from the average gain and loss over the last ``period`` changes.

    All gains and no losses saturates at 100. A window with no movement at
    all sits at the neutral 50.
    """
    delta = close.diff()
    gain = delta.clip(lower=0.0)
    loss = (-delta).clip(lower=0.0)
    avg_gain = _rolling(gain.iloc[1:], period, np.mean).reindex(close.index)
    avg_loss = _rolling(loss.iloc[1:], period, np.mean).reindex(close.index)

    rs = avg_gain / avg_loss.replace(0, np.nan)
    rsi = 100.0 - (100.0 / (1.0 + rs))
    rsi = rsi.mask(avg_loss == 0, 100.0)
    rsi = rsi.mask((avg_loss == 0) & (avg_gain == 0), 50.0)
    return rsi.where(avg_gain.notna())


def compute_bollinger(
    close: pd.Series, window: int, num_std: float
) -> tuple[pd.Series, pd.Series, pd.Series]:
    """Bollinger Bands: (upper, middle, lower), population standard deviation."""
    middle = _rolling(close, window, np.mean)
    std = _rolling(close, window, np.std)
    upper = middle + num_std * std
    lower = middle - num_std * std
    return upper, middle, lower


def compute_macd(
    close: pd.Series, fast: int, slow: int, signal: int
) -> tuple[pd.Series, pd.Series, pd.Series]:
    """MACD: (macd_line, signal_line, histogram).

    Values are only reported once ``slow + signal`` closes are available.
    """
    values = close.to_numpy(dtype=float)
    macd_line = _seeded_ema(values, fast) - _seeded_ema(values, slow)
    signal_line = np.full(len(values), np.nan)
    first = slow - 1
    if len(values) > first:
        signal_line[first:] = _seeded_ema(macd_line[first:], signal)

    warmup = min(len(values), slow + signal - 1)
    macd_line[:warmup] = np.nan
    signal_line[:warmup] = np.nan
    histogram = macd_line - signal_line
    return (
        pd.Series(macd_line, index=close.index),
        pd.Series(signal_line, index=close.index),
        pd.Series(histogram, index=close.index),
    )


def compute_atr(
    high: pd.Series, low: pd.Series, close: pd.Series, period: int
) -> pd.Series:
    """Average True Range over the last ``period`` true ranges."""
    tr = pd.concat(
        [
            high - low,
            (high - close.shift(1)).abs(),
            (low - close.shift(1)).abs(),
        ],
        axis=1,
    ).max(axis=1)
    # The first bar has no previous close
    tr = tr.iloc[1:]
    return _rolling(tr, period, np.mean).reindex(close.index)


def compute_support_resistance(
    high: pd.Series, low: pd.Series, lookback: int
) -> tuple[pd.Series, pd.Series]:
    """Support/resistance: (lowest low, highest high) over ``lookback`` bars."""
    return _rolling(low, lookback, np.min), _rolling(high, lookback, np.max)


def _last(series: pd.Series) -> float | None:
    if series.empty:
        return None
    value = series.iloc[-1]
    if pd.isna(value):
        return None
    return float(value)


def _classify_trend(
    price: float, ma: MovingAverages, settings: TechnicalsSettings
) -> TrendLabel:
    if ma.sma_20 is None or ma.sma_50 is None:
        return TrendLabel.SIDEWAYS
    if settings.trend_requires_sma_200 and ma.sma_200 is None:
        return TrendLabel.SIDEWAYS
    if price > ma.sma_20 > ma.sma_50:
        return TrendLabel.BULLISH
    if price < ma.sma_20 < ma.sma_50:
        return TrendLabel.BEARISH
    return TrendLabel.SIDEWAYS


def _aggregate_signal(
    rsi_signal: RSISignal,
    macd_signal: SignalDirection,
    band: BandPosition,
    trend: TrendLabel,
    threshold: int,
) -> TradeSignal:
    """Majority vote of the four directional sub-signals."""
    buy = sum([
        rsi_signal == RSISignal.OVERSOLD,
        macd_signal == SignalDirection.BULLISH,
        band == BandPosition.BELOW,
        trend == TrendLabel.BULLISH,
    ])
    sell = sum([
        rsi_signal == RSISignal.OVERBOUGHT,
        macd_signal == SignalDirection.BEARISH,
        band == BandPosition.ABOVE,
        trend == TrendLabel.BEARISH,
    ])
    if buy >= threshold:
        return TradeSignal.BUY
    if sell >= threshold:
        return TradeSignal.SELL
    return TradeSignal.NEUTRAL


def compute_technicals(
    ohlcv: pd.DataFrame,
    ticker: str,
    settings: TechnicalsSettings | None = None,
) -> IndicatorSnapshot:
    """Compute the full indicator snapshot as of the last bar.

    Args:
        ohlcv: DataFrame with Open/High/Low/Close/Volume, ascending DatetimeIndex.
        ticker: Instrument ticker.
        settings: Indicator settings; defaults to the loaded config.

    An empty frame gives a snapshot with every value None, a sideways
    trend and a neutral signal.
    """
    if ohlcv.empty:
        return IndicatorSnapshot(
            ticker=ticker,
            as_of_date=None,
            current_price=None,
            rsi=None,
            moving_averages=MovingAverages(),
            macd=None,
            macd_signal=SignalDirection.NEUTRAL,
            bollinger=None,
            price_vs_bollinger=BandPosition.MIDDLE,
            atr=None,
            support_resistance=None,
            trend=TrendLabel.SIDEWAYS,
            signal=TradeSignal.NEUTRAL,
        )
    settings = settings or get_settings().technicals

    close = ohlcv["Close"].astype(float)
    high = ohlcv["High"].astype(float)
    low = ohlcv["Low"].astype(float)
    price = float(close.iloc[-1])

    # RSI
    rsi: RSIData | None = None
    rsi_val = _last(compute_rsi(close, settings.rsi_period))
    if rsi_val is not None:
        if rsi_val < settings.rsi_oversold:
            rsi_sig = RSISignal.OVERSOLD
        elif rsi_val > settings.rsi_overbought:
            rsi_sig = RSISignal.OVERBOUGHT
        else:
            rsi_sig = RSISignal.NEUTRAL
        rsi = RSIData(value=rsi_val, signal=rsi_sig)

    # Moving averages
    smas = {
        f"sma_{w}": _last(compute_sma(close, w))
        for w in settings.sma_windows
        if f"sma_{w}" in MovingAverages.model_fields
    }
    moving_averages = MovingAverages(**smas)

    # MACD
    macd: MACDData | None = None
    macd_signal = SignalDirection.NEUTRAL
    macd_line, signal_line, histogram = compute_macd(
        close, settings.macd_fast, settings.macd_slow, settings.macd_signal
    )
    hist_val = _last(histogram)
    if hist_val is not None:
        macd = MACDData(
            macd_line=float(macd_line.iloc[-1]),
            signal_line=float(signal_line.iloc[-1]),
            histogram=hist_val,
        )
        if hist_val > 0:
            macd_signal = SignalDirection.BULLISH
        elif hist_val < 0:
            macd_signal = SignalDirection.BEARISH

    # Bollinger
    bollinger: BollingerBands | None = None
    band = BandPosition.MIDDLE
    upper, middle, lower = compute_bollinger(
        close, settings.bollinger_window, settings.bollinger_std
    )
    mid_val = _last(middle)
    if mid_val is not None:
        up_val = float(upper.iloc[-1])
        low_val = float(lower.iloc[-1])
        bandwidth = (up_val - low_val) / mid_val * 100 if mid_val > 0 else 0.0
        bollinger = BollingerBands(
            upper=up_val, middle=mid_val, lower=low_val, bandwidth=bandwidth,
        )
        if price > up_val:
            band = BandPosition.ABOVE
        elif price < low_val:
            band = BandPosition.BELOW

    atr = _last(compute_atr(high, low, close, settings.atr_period))

    support, resistance = compute_support_resistance(
        high, low, settings.support_resistance_lookback
    )
    sr: SupportResistance | None = None
    sup_val = _last(support)
    if sup_val is not None:
        sr = SupportResistance(support=sup_val, resistance=float(resistance.iloc[-1]))

    trend = _classify_trend(price, moving_averages, settings)
    signal = _aggregate_signal(
        rsi.signal if rsi is not None else RSISignal.NEUTRAL,
        macd_signal,
        band,
        trend,
        settings.signal_vote_threshold,
    )

    return IndicatorSnapshot(
        ticker=ticker,
        as_of_date=pd.Timestamp(ohlcv.index[-1]).date(),
        current_price=price,
        rsi=rsi,
        moving_averages=moving_averages,
        macd=macd,
        macd_signal=macd_signal,
        bollinger=bollinger,
        price_vs_bollinger=band,
        atr=atr,
        support_resistance=sr,
        trend=trend,
        signal=signal,
    )
