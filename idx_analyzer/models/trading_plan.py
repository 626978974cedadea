"""Pydantic models for single-stock trading plans and broker-based targets."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from idx_analyzer.models.data import PriceBar
from idx_analyzer.models.technicals import TradeSignal, TrendLabel


class RRQuality(StrEnum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class TradingPlanInput(BaseModel):
    ticker: str
    current_price: float = Field(gt=0)
    target_realistic: float
    target_max: float
    atr: float | None = None
    history: list[PriceBar] | None = None  # used for ATR when atr is not given
    account_size: float | None = None      # None = configured default
    risk_percent: float | None = None      # None = configured default


class EntryPlan(BaseModel):
    price: float
    order_type: str = "market"
    trend: TrendLabel = TrendLabel.BULLISH
    signal: TradeSignal = TradeSignal.BUY


class TakeProfitLevel(BaseModel):
    price: float
    percent_gain: float
    label: str


class StopLoss(BaseModel):
    price: float
    percent_loss: float
    method: str  # "ATR-based (2x)" or "Percentage-based"


class RiskReward(BaseModel):
    risk_per_share: float
    reward_tp1: float
    reward_tp2: float
    rr_to_tp1: float
    rr_to_tp2: float
    quality: RRQuality


class PositionSizing(BaseModel):
    account_size: float
    max_risk_amount: float
    suggested_lots: int
    suggested_shares: int
    position_value: float
    percent_of_account: float


class TradingPlanResult(BaseModel):
    ticker: str
    tick_size: int
    atr: float | None
    entry: EntryPlan
    take_profit: list[TakeProfitLevel]  # TP1 conservative, TP2 moderate, TP3 aggressive
    stop_loss: StopLoss
    risk_reward: RiskReward
    position_sizing: PositionSizing | None
    execution_strategy: list[str]


class BrokerTargets(BaseModel):
    """Price targets derived from the dominant broker's average and holdings."""

    tick_size: int
    total_boards: int       # price levels between the auto-reject bounds
    avg_bid_offer: int      # queued lots per board
    markup: int             # 5% of the broker average
    boards_to_absorb: int   # broker holdings over avg_bid_offer
    target_realistic: int
    target_max: int
