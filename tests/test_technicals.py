"""Tests for technical indicators module."""

import numpy as np
import pandas as pd
import pytest

from conftest import _flat, _from_closes, _linear, _rsi_25_closes, _rsi_55_closes
from idx_analyzer.config import TechnicalsSettings
from idx_analyzer.features.technicals import (
    _aggregate_signal,
    compute_atr,
    compute_bollinger,
    compute_ema,
    compute_macd,
    compute_rsi,
    compute_sma,
    compute_support_resistance,
    compute_technicals,
)
from idx_analyzer.models.technicals import (
    BandPosition,
    IndicatorSnapshot,
    RSISignal,
    SignalDirection,
    TradeSignal,
    TrendLabel,
)


class TestMovingAverages:
    def test_sma_correctness(self, sample_ohlcv_trending: pd.DataFrame):
        close = sample_ohlcv_trending["Close"]
        sma = compute_sma(close, 20)
        expected = close.iloc[-20:].mean()
        assert abs(sma.iloc[-1] - expected) < 1e-9

    def test_sma_short_series_is_nan(self):
        close = pd.Series([1.0, 2.0, 3.0])
        assert compute_sma(close, 5).isna().all()

    def test_sma_warmup(self):
        close = pd.Series(np.arange(1.0, 11.0))
        sma = compute_sma(close, 5)
        assert sma.iloc[:4].isna().all()
        assert sma.iloc[4] == 3.0
        assert sma.iloc[-1] == 8.0

    def test_ema_seeded_from_sma(self):
        close = pd.Series(np.arange(1.0, 11.0))
        ema = compute_ema(close, 3)
        assert ema.iloc[:2].isna().all()
        assert ema.iloc[2] == 2.0
        # multiplier 2/(3+1) = 0.5: (4 - 2) * 0.5 + 2
        assert ema.iloc[3] == 3.0

    def test_flat_series_stays_flat(self, flat_ohlcv: pd.DataFrame):
        sma = compute_sma(flat_ohlcv["Close"], 200)
        assert sma.iloc[-1] == 1000.0


class TestRSI:
    def test_rsi_bounds(self, sample_ohlcv_choppy: pd.DataFrame):
        rsi = compute_rsi(sample_ohlcv_choppy["Close"], 14).dropna()
        assert (rsi >= 0).all()
        assert (rsi <= 100).all()

    def test_rsi_all_gains_is_100(self):
        rsi = compute_rsi(pd.Series(np.arange(100.0, 130.0)), 14)
        assert rsi.iloc[-1] == 100.0

    def test_rsi_all_losses_is_0(self):
        rsi = compute_rsi(pd.Series(np.arange(130.0, 100.0, -1.0)), 14)
        assert rsi.iloc[-1] == pytest.approx(0.0)

    def test_rsi_no_movement_is_neutral(self):
        rsi = compute_rsi(pd.Series([1000.0] * 30), 14)
        assert rsi.iloc[-1] == 50.0

    def test_rsi_needs_period_plus_one_closes(self):
        assert pd.isna(compute_rsi(pd.Series(np.arange(14.0)), 14).iloc[-1])
        assert not pd.isna(compute_rsi(pd.Series(np.arange(15.0)), 14).iloc[-1])

    def test_rsi_simple_average_of_last_changes(self):
        rsi = compute_rsi(pd.Series(_rsi_25_closes()), 14)
        assert rsi.iloc[-1] == pytest.approx(25.0)

    def test_rsi_55(self):
        rsi = compute_rsi(pd.Series(_rsi_55_closes()), 14)
        assert rsi.iloc[-1] == pytest.approx(55.0)


class TestBollinger:
    def test_bands_ordered(self, sample_ohlcv_choppy: pd.DataFrame):
        upper, middle, lower = compute_bollinger(sample_ohlcv_choppy["Close"], 20, 2.0)
        assert upper.iloc[-1] > middle.iloc[-1] > lower.iloc[-1]

    def test_population_std(self):
        close = pd.Series([1.0, 3.0] * 10)
        upper, middle, lower = compute_bollinger(close, 20, 2.0)
        assert middle.iloc[-1] == 2.0
        # population std of alternating 1/3 is exactly 1
        assert upper.iloc[-1] == pytest.approx(4.0)
        assert lower.iloc[-1] == pytest.approx(0.0)

    def test_flat_bands_collapse(self, flat_ohlcv: pd.DataFrame):
        upper, middle, lower = compute_bollinger(flat_ohlcv["Close"], 20, 2.0)
        assert upper.iloc[-1] == middle.iloc[-1] == lower.iloc[-1] == 1000.0


class TestMACD:
    def test_undefined_before_slow_plus_signal(self):
        macd, signal, hist = compute_macd(pd.Series(np.arange(34.0)), 12, 26, 9)
        assert hist.isna().all()

    def test_defined_at_slow_plus_signal(self):
        macd, signal, hist = compute_macd(pd.Series(np.arange(35.0)), 12, 26, 9)
        assert not pd.isna(hist.iloc[-1])
        assert hist.iloc[:-1].isna().all()

    def test_histogram_is_macd_minus_signal(self, sample_ohlcv_choppy: pd.DataFrame):
        macd, signal, hist = compute_macd(sample_ohlcv_choppy["Close"], 12, 26, 9)
        assert hist.iloc[-1] == pytest.approx(macd.iloc[-1] - signal.iloc[-1])

    def test_flat_series_has_zero_histogram(self, flat_ohlcv: pd.DataFrame):
        _, _, hist = compute_macd(flat_ohlcv["Close"], 12, 26, 9)
        assert hist.iloc[-1] == 0.0


class TestATR:
    def test_constant_range(self):
        df = _linear(30)
        atr = compute_atr(df["High"], df["Low"], df["Close"], 14)
        # high - low = 2 and close moves 1 per bar: every true range is 2
        assert atr.iloc[-1] == pytest.approx(2.0)

    def test_needs_period_plus_one_bars(self):
        df = _linear(14)
        assert pd.isna(compute_atr(df["High"], df["Low"], df["Close"], 14).iloc[-1])
        df = _linear(15)
        assert not pd.isna(compute_atr(df["High"], df["Low"], df["Close"], 14).iloc[-1])

    def test_gap_counts_in_true_range(self):
        df = _from_closes([100.0] * 15 + [130.0], spread=1.0)
        atr = compute_atr(df["High"], df["Low"], df["Close"], 14)
        # 13 ranges of 2 plus one gap bar: |131 - 100| = 31
        assert atr.iloc[-1] == pytest.approx((13 * 2 + 31) / 14)


class TestSupportResistance:
    def test_lookback_extremes(self, rising_ohlcv: pd.DataFrame):
        support, resistance = compute_support_resistance(
            rising_ohlcv["High"], rising_ohlcv["Low"], 20
        )
        assert support.iloc[-1] == rising_ohlcv["Low"].iloc[-20]
        assert resistance.iloc[-1] == rising_ohlcv["High"].iloc[-1]


class TestAggregateSignal:
    def test_three_buy_votes(self):
        sig = _aggregate_signal(
            RSISignal.OVERSOLD, SignalDirection.BULLISH, BandPosition.BELOW,
            TrendLabel.SIDEWAYS, 3,
        )
        assert sig == TradeSignal.BUY

    def test_three_sell_votes(self):
        sig = _aggregate_signal(
            RSISignal.NEUTRAL, SignalDirection.BEARISH, BandPosition.ABOVE,
            TrendLabel.BEARISH, 3,
        )
        assert sig == TradeSignal.SELL

    def test_split_votes_neutral(self):
        sig = _aggregate_signal(
            RSISignal.OVERSOLD, SignalDirection.BULLISH, BandPosition.ABOVE,
            TrendLabel.BEARISH, 3,
        )
        assert sig == TradeSignal.NEUTRAL


class TestComputeTechnicals:
    def test_returns_snapshot(self, sample_ohlcv_trending: pd.DataFrame):
        snap = compute_technicals(sample_ohlcv_trending, "BBCA")
        assert isinstance(snap, IndicatorSnapshot)
        assert snap.ticker == "BBCA"
        assert snap.as_of_date == sample_ohlcv_trending.index[-1].date()
        assert snap.current_price == pytest.approx(sample_ohlcv_trending["Close"].iloc[-1])

    def test_flat_series(self, flat_ohlcv: pd.DataFrame):
        snap = compute_technicals(flat_ohlcv, "FLAT")
        assert snap.rsi.value == 50.0
        assert snap.rsi_signal == RSISignal.NEUTRAL
        assert snap.moving_averages.sma_20 == 1000.0
        assert snap.moving_averages.sma_50 == 1000.0
        assert snap.moving_averages.sma_200 == 1000.0
        assert snap.macd_signal == SignalDirection.NEUTRAL
        assert snap.price_vs_bollinger == BandPosition.MIDDLE
        assert snap.trend == TrendLabel.SIDEWAYS
        assert snap.signal == TradeSignal.NEUTRAL

    def test_short_series_reports_none(self):
        snap = compute_technicals(_linear(10), "SHRT")
        assert snap.rsi is None
        assert snap.macd is None
        assert snap.bollinger is None
        assert snap.atr is None
        assert snap.moving_averages.sma_5 is not None
        assert snap.moving_averages.sma_20 is None
        assert snap.trend == TrendLabel.SIDEWAYS
        assert snap.macd_signal == SignalDirection.NEUTRAL

    def test_single_bar(self):
        snap = compute_technicals(_linear(1), "ONE")
        assert snap.current_price == 100.0
        assert snap.signal == TradeSignal.NEUTRAL

    def test_empty_frame_gives_blank_snapshot(self):
        snap = compute_technicals(_linear(0), "NONE")
        assert snap.ticker == "NONE"
        assert snap.as_of_date is None
        assert snap.current_price is None
        assert snap.rsi is None
        assert snap.macd is None
        assert snap.bollinger is None
        assert snap.atr is None
        assert snap.support_resistance is None
        assert snap.moving_averages.sma_5 is None
        assert snap.trend == TrendLabel.SIDEWAYS
        assert snap.signal == TradeSignal.NEUTRAL
        assert snap.macd_signal == SignalDirection.NEUTRAL

    def test_uptrend_is_bullish(self, rising_ohlcv: pd.DataFrame):
        snap = compute_technicals(rising_ohlcv, "UP")
        assert snap.trend == TrendLabel.BULLISH
        assert snap.rsi.value == 100.0
        assert snap.rsi_signal == RSISignal.OVERBOUGHT

    def test_downtrend_is_bearish(self, declining_ohlcv: pd.DataFrame):
        snap = compute_technicals(declining_ohlcv, "DOWN")
        assert snap.trend == TrendLabel.BEARISH
        assert snap.rsi_signal == RSISignal.OVERSOLD

    def test_trend_without_sma_200(self):
        df = _linear(100)
        assert compute_technicals(df, "UP").trend == TrendLabel.BULLISH
        strict = TechnicalsSettings(trend_requires_sma_200=True)
        assert compute_technicals(df, "UP", strict).trend == TrendLabel.SIDEWAYS

    def test_oversold_flag(self):
        snap = compute_technicals(_from_closes(_rsi_25_closes()), "LOWR")
        assert snap.rsi.value == pytest.approx(25.0)
        assert snap.rsi_signal == RSISignal.OVERSOLD

    def test_custom_thresholds(self):
        settings = TechnicalsSettings(rsi_oversold=20.0)
        snap = compute_technicals(_from_closes(_rsi_25_closes()), "LOWR", settings)
        assert snap.rsi_signal == RSISignal.NEUTRAL
