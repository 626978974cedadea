"""Shared test fixtures for idx_analyzer tests."""

import numpy as np
import pandas as pd
import pytest

from idx_analyzer.config import load_settings, reset_settings
from idx_analyzer.data.brokers import default_classifier


def _make_ohlcv(
    start: str,
    periods: int,
    base_price: float = 1000.0,
    trend: float = 0.0,
    volatility: float = 0.01,
    seed: int = 42,
) -> pd.DataFrame:
    """Generate synthetic OHLCV data.

    Args:
        start: Start date string.
        periods: Number of trading days.
        base_price: Starting price (rupiah).
        trend: Daily drift (e.g., 0.001 for uptrend).
        volatility: Daily return std.
        seed: Random seed.
    """
    rng = np.random.default_rng(seed)
    dates = pd.bdate_range(start=start, periods=periods)
    returns = rng.normal(trend, volatility, periods)
    prices = base_price * np.exp(np.cumsum(returns))

    daily_range = prices * volatility * rng.uniform(0.5, 2.0, periods)
    high = prices + daily_range / 2
    low = prices - daily_range / 2
    open_prices = prices + rng.normal(0, volatility * prices * 0.3, periods)
    volume = rng.integers(100_000, 5_000_000, periods).astype(float)

    return pd.DataFrame(
        {
            "Open": open_prices,
            "High": high,
            "Low": low,
            "Close": prices,
            "Volume": volume,
        },
        index=dates,
    )


def _from_closes(closes, start: str = "2024-01-01", spread: float = 1.0) -> pd.DataFrame:
    """OHLCV frame from explicit closes; high/low sit ``spread`` around close."""
    closes = np.asarray(closes, dtype=float)
    dates = pd.bdate_range(start=start, periods=len(closes))
    return pd.DataFrame(
        {
            "Open": closes,
            "High": closes + spread,
            "Low": closes - spread,
            "Close": closes,
            "Volume": np.full(len(closes), 1_000_000.0),
        },
        index=dates,
    )


def _linear(periods: int, start_price: float = 100.0, step: float = 1.0) -> pd.DataFrame:
    """Straight-line series: close = start_price + i * step."""
    return _from_closes(start_price + step * np.arange(periods))


def _flat(periods: int, price: float = 1000.0) -> pd.DataFrame:
    """Series that never moves: open = high = low = close."""
    return _from_closes(np.full(periods, price), spread=0.0)


def _rsi_25_closes() -> list[float]:
    """40 closes whose last 14 changes give RSI(14) = 25 exactly."""
    closes = [1000.0] * 26
    for _ in range(4):
        closes.append(closes[-1] + 2.5)
    for _ in range(10):
        closes.append(closes[-1] - 3.0)
    return closes


def _rsi_55_closes() -> list[float]:
    """44 closes whose last 14 changes give RSI(14) = 55 exactly."""
    closes = [1000.0] * 30
    closes += [1011.0, 1002.0]
    closes += [1002.0] * 12
    return closes


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path):
    """Package defaults only: never pick up a developer's ~/.idx_analyzer/config.yaml."""
    reset_settings()
    default_classifier.cache_clear()
    load_settings(user_config_path=tmp_path / "no_user_config.yaml", _force_reload=True)
    yield
    reset_settings()
    default_classifier.cache_clear()


@pytest.fixture
def sample_ohlcv_trending() -> pd.DataFrame:
    """300 rows uptrend, low volatility."""
    return _make_ohlcv("2024-01-01", 300, trend=0.002, volatility=0.008, seed=42)


@pytest.fixture
def sample_ohlcv_choppy() -> pd.DataFrame:
    """300 rows range-bound, high volatility."""
    return _make_ohlcv("2024-01-01", 300, trend=0.0, volatility=0.025, seed=99)


@pytest.fixture
def rising_ohlcv() -> pd.DataFrame:
    """300 bars, close = 100 + i."""
    return _linear(300)


@pytest.fixture
def declining_ohlcv() -> pd.DataFrame:
    """300 bars, close = 400 - i."""
    return _linear(300, start_price=400.0, step=-1.0)


@pytest.fixture
def flat_ohlcv() -> pd.DataFrame:
    """300 bars pinned at 1000."""
    return _flat(300)
