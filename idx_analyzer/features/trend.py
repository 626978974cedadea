"""Trend template and stage analysis: pure computation, no data fetching.

Stage analysis scores four market-cycle stages independently:
  Stage 1  base building after a decline
  Stage 2  advancing uptrend (the trend template's target)
  Stage 3  topping / distribution
  Stage 4  declining downtrend
The highest score wins; below ``stage_min_score`` the stock is in transition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from idx_analyzer.config import TrendSettings, get_settings
from idx_analyzer.features.technicals import compute_sma, compute_technicals
from idx_analyzer.models.trend import (
    StageClassification,
    StageID,
    TrendCriteria,
    TrendTemplateResult,
)

if TYPE_CHECKING:
    from idx_analyzer.models.technicals import IndicatorSnapshot

# Equal scores resolve in this order.
STAGE_PRIORITY = [StageID.STAGE_2, StageID.STAGE_4, StageID.STAGE_1, StageID.STAGE_3]

_DESCRIPTION_KEYS = {
    StageID.STAGE_1: "stage_1",
    StageID.STAGE_2: "stage_2",
    StageID.STAGE_3: "stage_3",
    StageID.STAGE_4: "stage_4",
    StageID.TRANSITION: "transition",
}


def compute_52_week_range(
    ohlcv: pd.DataFrame, year_bars: int = 252
) -> tuple[float, float]:
    """(high, low) over the trailing year of bars; (0, 0) with no bars."""
    year = ohlcv.iloc[-year_bars:]
    if year.empty:
        return 0.0, 0.0
    return float(year["High"].max()), float(year["Low"].min())


def is_ma200_trending_up(
    close: pd.Series, lookback: int = 20, min_bars: int = 220
) -> bool:
    """SMA(200) now is above SMA(200) ``lookback`` bars ago."""
    if len(close) < min_bars:
        return False
    current = compute_sma(close, 200).iloc[-1]
    prior = compute_sma(close.iloc[:-lookback], 200).iloc[-1]
    if pd.isna(current) or pd.isna(prior):
        return False
    return bool(current > prior)


def sector_relative_strength(stock_return: float, sector_returns: list[float]) -> float:
    """Percentile of sector returns strictly below the stock's return (0-100).

    An empty sector sample is neutral (50).
    """
    if not sector_returns:
        return 50.0
    below = sum(1 for r in sector_returns if r < stock_return)
    return below / len(sector_returns) * 100


def year_return(ohlcv: pd.DataFrame) -> float:
    """Percent change from the first to the last close of the window."""
    if len(ohlcv) < 2:
        return 0.0
    first = float(ohlcv["Close"].iloc[0])
    last = float(ohlcv["Close"].iloc[-1])
    if first == 0:
        return 0.0
    return (last - first) / first * 100


def build_sector_returns(
    ohlcv_map: dict[str, pd.DataFrame],
    sector_map: dict[str, str],
) -> dict[str, list[float]]:
    """Group each ticker's period return under its sector."""
    sector_returns: dict[str, list[float]] = {}
    for ticker, df in ohlcv_map.items():
        sector = sector_map.get(ticker, "Unknown")
        sector_returns.setdefault(sector, []).append(year_return(df))
    return sector_returns


def resolve_stage(scores: dict[StageID, int], min_score: int = 30) -> StageID:
    """Pick the winning stage; ties follow STAGE_PRIORITY."""
    best = max(scores.values(), default=0)
    if best < min_score:
        return StageID.TRANSITION
    for stage in STAGE_PRIORITY:
        if scores.get(stage, 0) == best:
            return stage
    return StageID.TRANSITION


def classify_stage(
    ohlcv: pd.DataFrame,
    snapshot: IndicatorSnapshot | None,
    settings: TrendSettings | None = None,
) -> StageClassification:
    """Classify the market-cycle stage from moving averages and 52-week range.

    Without a snapshot or without SMA 50/150/200 the stock is reported in
    Transition with zero confidence.
    """
    settings = settings or get_settings().trend
    ma = snapshot.moving_averages if snapshot is not None else None
    empty_scores = {s: 0 for s in STAGE_PRIORITY}

    if ohlcv.empty or ma is None or ma.sma_50 is None or ma.sma_150 is None or ma.sma_200 is None:
        return StageClassification(
            stage=StageID.TRANSITION,
            confidence=0,
            description=settings.descriptions["insufficient"],
            signals=[],
            scores=empty_scores,
        )

    close = ohlcv["Close"].astype(float)
    price = float(close.iloc[-1])
    sma50, sma150, sma200 = ma.sma_50, ma.sma_150, ma.sma_200

    high, low = compute_52_week_range(ohlcv, settings.year_bars)
    # Undefined when the year traded flat
    range_pct: float | None = None
    if high > low:
        range_pct = (price - low) / (high - low) * 100

    aligned = sma50 > sma150 > sma200
    reversed_ = sma50 < sma150 < sma200
    ma200_up = is_ma200_trending_up(
        close, settings.ma200_trend_lookback, settings.ma200_trend_min_bars
    )
    ma200_down = not ma200_up and len(close) >= settings.ma200_trend_min_bars
    above_all = price > sma50 and price > sma150 and price > sma200
    below_all = price < sma50 and price < sma150 and price < sma200
    near_high = range_pct is not None and range_pct >= settings.range_high_pct
    near_low = range_pct is not None and range_pct <= settings.range_low_pct

    scores = dict(empty_scores)
    signals: list[str] = []

    def award(stage: StageID, points: int, signal: str) -> None:
        scores[stage] += points
        signals.append(signal)

    # Stage 2: advancing
    if aligned:
        award(StageID.STAGE_2, 30, "Bullish MA alignment (50>150>200)")
    if above_all:
        award(StageID.STAGE_2, 25, "Price above all major MAs")
    if ma200_up:
        award(StageID.STAGE_2, 20, "MA200 trending up")
    if near_high:
        award(StageID.STAGE_2, 25, f"Price near 52W high ({range_pct:.0f}%)")

    # Stage 4: declining
    if reversed_:
        award(StageID.STAGE_4, 30, "Bearish MA alignment (50<150<200)")
    if below_all:
        award(StageID.STAGE_4, 25, "Price below all major MAs")
    if ma200_down:
        award(StageID.STAGE_4, 20, "MA200 trending down")
    if near_low:
        award(StageID.STAGE_4, 25, f"Price near 52W low ({range_pct:.0f}%)")

    # Stage 1: base building
    if below_all and not reversed_:
        award(StageID.STAGE_1, 20, "Potential base building")
    if not ma200_up and not ma200_down:
        award(StageID.STAGE_1, 20, "MA200 flattening")
    if range_pct is not None and settings.range_low_pct <= range_pct <= settings.range_base_high_pct:
        award(StageID.STAGE_1, 20, "Price in middle range (consolidation zone)")
    if sma200 * settings.ma200_support_band <= price <= sma200:
        award(StageID.STAGE_1, 20, "Price near MA200 support")

    # Stage 3: topping
    if above_all and not aligned:
        award(StageID.STAGE_3, 25, "Price high but MAs not aligned")
    if near_high and not ma200_up:
        award(StageID.STAGE_3, 25, "Near highs but MA200 not rising")
    if sma150 < price < sma50:
        award(StageID.STAGE_3, 25, "Price broke below MA50 (potential distribution)")
    if aligned and price < sma50:
        award(StageID.STAGE_3, 25, "Weakness despite bullish setup")

    stage = resolve_stage(scores, settings.stage_min_score)
    return StageClassification(
        stage=stage,
        confidence=max(scores.values()),
        description=settings.descriptions[_DESCRIPTION_KEYS[stage]],
        signals=signals[: settings.max_stage_signals],
        scores=scores,
    )


def evaluate_criteria(
    ohlcv: pd.DataFrame,
    sector_rs: float,
    ticker: str = "",
    sector: str = "Unknown",
    snapshot: IndicatorSnapshot | None = None,
    settings: TrendSettings | None = None,
) -> TrendTemplateResult | None:
    """Check the eight trend-template criteria.

    Returns None when fewer than a year of bars is available.
    """
    settings = settings or get_settings().trend
    if len(ohlcv) < settings.year_bars:
        return None

    snapshot = snapshot or compute_technicals(ohlcv, ticker)
    close = ohlcv["Close"].astype(float)
    price = float(close.iloc[-1])
    high, low = compute_52_week_range(ohlcv, settings.year_bars)
    ma = snapshot.moving_averages
    sma50, sma150, sma200 = ma.sma_50, ma.sma_150, ma.sma_200
    have_long = sma150 is not None and sma200 is not None

    criteria = TrendCriteria(
        c1_price_above_ma150_ma200=have_long and price > sma150 and price > sma200,
        c2_ma150_above_ma200=have_long and sma150 > sma200,
        c3_ma200_trending_up=is_ma200_trending_up(
            close, settings.ma200_trend_lookback, settings.ma200_trend_min_bars
        ),
        c4_ma50_above_ma150_ma200=(
            have_long and sma50 is not None and sma50 > sma150 and sma50 > sma200
        ),
        c5_price_above_ma50=sma50 is not None and price > sma50,
        c6_price_30pct_above_low=low > 0 and price > low * settings.low_multiple,
        c7_price_within_25pct_of_high=high > 0 and price >= high * settings.high_fraction,
        c8_relative_strength_above_70=sector_rs > settings.rs_threshold,
    )

    return TrendTemplateResult(
        ticker=ticker,
        sector=sector,
        price=price,
        criteria=criteria,
        score=criteria.score,
        rs=sector_rs,
        week_52_high=high,
        week_52_low=low,
        sma_50=sma50,
        sma_150=sma150,
        sma_200=sma200,
        stage=classify_stage(ohlcv, snapshot, settings),
    )
