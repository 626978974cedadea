"""TradingPlanService: entry/stop/take-profit plans for a single stock."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from idx_analyzer.config import get_settings
from idx_analyzer.data.exceptions import DataFetchError, InvalidTickerError
from idx_analyzer.features.technicals import compute_atr
from idx_analyzer.features.trading_plan import build_trading_plan, compute_broker_targets
from idx_analyzer.models.data import bars_to_frame
from idx_analyzer.models.trading_plan import BrokerTargets, TradingPlanInput, TradingPlanResult

if TYPE_CHECKING:
    import pandas as pd

    from idx_analyzer.data.service import DataService

logger = logging.getLogger(__name__)


def _latest_atr(df: pd.DataFrame, period: int) -> float | None:
    series = compute_atr(df["High"], df["Low"], df["Close"], period)
    if series.empty or series.isna().iloc[-1]:
        return None
    return float(series.iloc[-1])


class TradingPlanService:
    """Generate trading plans, enriching them with ATR when it can be had.

    ATR comes from the input, else from the supplied history, else from a
    fetch of recent bars. A plan without ATR falls back to a percentage stop.
    """

    def __init__(self, data_service: DataService | None = None) -> None:
        self.data_service = data_service

    def _resolve_atr(self, plan_input: TradingPlanInput) -> float | None:
        if plan_input.atr:
            return plan_input.atr
        cfg = get_settings().trading_plan
        period = get_settings().technicals.atr_period

        if plan_input.history is not None:
            df = bars_to_frame(plan_input.history)
            if len(df) >= cfg.min_atr_bars:
                return _latest_atr(df, period)
            return None

        if self.data_service is None:
            return None
        try:
            df = self.data_service.get_ohlcv(
                plan_input.ticker, cfg.atr_history_days, cfg.min_atr_bars,
            )
        except (DataFetchError, InvalidTickerError) as e:
            logger.warning("No ATR for %s, using percentage stop: %s", plan_input.ticker, e)
            return None
        return _latest_atr(df, period)

    def generate(self, plan_input: TradingPlanInput) -> TradingPlanResult:
        """Build the plan for ``plan_input``."""
        atr = self._resolve_atr(plan_input)
        return build_trading_plan(
            ticker=plan_input.ticker.upper(),
            price=plan_input.current_price,
            target_realistic=plan_input.target_realistic,
            target_max=plan_input.target_max,
            atr=atr,
            account_size=plan_input.account_size,
            risk_percent=plan_input.risk_percent,
        )

    def broker_targets(
        self,
        broker_avg_price: float,
        broker_volume: float,
        ara: float,
        arb: float,
        total_bid: float,
        total_offer: float,
        price: float,
    ) -> BrokerTargets:
        """Realistic and max targets from the dominant broker's position."""
        return compute_broker_targets(
            broker_avg_price, broker_volume, ara, arb, total_bid, total_offer, price,
        )
