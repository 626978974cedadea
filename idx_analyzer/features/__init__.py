"""Indicator, trend, flow and trading-plan computation: pure functions."""

from idx_analyzer.features.bandarmology import aggregate_flows
from idx_analyzer.features.screening import screen_snapshot
from idx_analyzer.features.technicals import compute_technicals
from idx_analyzer.features.trading_plan import build_trading_plan, compute_broker_targets, tick_size
from idx_analyzer.features.trend import classify_stage, evaluate_criteria

__all__ = [
    "aggregate_flows",
    "screen_snapshot",
    "compute_technicals",
    "build_trading_plan",
    "compute_broker_targets",
    "tick_size",
    "classify_stage",
    "evaluate_criteria",
]
