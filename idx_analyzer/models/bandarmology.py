"""Multi-day broker flow (bandarmology) result models."""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel

from idx_analyzer.models.data import BrokerCategory, DailyBrokerFlow, SkippedUnit
from idx_analyzer.models.technicals import TradeSignal


class FlowPhase(StrEnum):
    EARLY_ACCUMULATION = "early_accumulation"
    MID_ACCUMULATION = "mid_accumulation"
    LATE_ACCUMULATION = "late_accumulation"
    MARKUP_READY = "markup_ready"
    DISTRIBUTION = "distribution"
    NEUTRAL = "neutral"


class FlowPeriod(BaseModel):
    start: date | None
    end: date | None
    days: int  # days actually retrieved, not days requested


class BandarmologyResult(BaseModel):
    ticker: str
    period: FlowPeriod
    momentum_score: float  # 0-100, 50 = balanced
    momentum_signal: TradeSignal
    phase: FlowPhase
    accumulation_days: int
    smart_money_net: float
    retail_net: float
    total_volume: float
    broker_composition: dict[BrokerCategory, float]  # percent of total traded value
    pattern_alerts: list[str]
    recommendation: str
    daily_flows: list[DailyBrokerFlow]
    skipped_days: list[SkippedUnit] = []
