"""IDXAnalyzer: top-level facade composing all services."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from idx_analyzer.features.trend import classify_stage
from idx_analyzer.models.data import PriceBar, to_ohlcv_frame
from idx_analyzer.models.screening import ScreenerPreset, ScreeningResult, TrendScreenResult
from idx_analyzer.models.technicals import IndicatorSnapshot
from idx_analyzer.models.trading_plan import BrokerTargets, TradingPlanInput, TradingPlanResult
from idx_analyzer.models.trend import StageClassification, TrendTemplateResult
from idx_analyzer.service.bandarmology import BandarmologyService
from idx_analyzer.service.screening import ScreeningService
from idx_analyzer.service.technical import TechnicalService
from idx_analyzer.service.trading_plan import TradingPlanService
from idx_analyzer.service.trend import TrendService

if TYPE_CHECKING:
    from idx_analyzer.broker.base import BrokerFlowProvider
    from idx_analyzer.data.brokers import BrokerClassifier
    from idx_analyzer.data.sectors import SectorProvider
    from idx_analyzer.data.service import DataService
    from idx_analyzer.models.bandarmology import BandarmologyResult

Bars = pd.DataFrame | list[PriceBar]


class IDXAnalyzer:
    """Top-level facade composing all IDX analysis services.

    Usage::

        from idx_analyzer import IDXAnalyzer, DataService, StaticSectorProvider

        ia = IDXAnalyzer(
            data_service=DataService(),
            sector_provider=StaticSectorProvider.from_yaml(),
            flow_provider=my_broker_flow_source,
        )

        snap = ia.technicals.snapshot("BBCA")
        hits = ia.run_screener(get_universe("lq45"), "oversold")
        leaders = ia.scan_trend_template(get_universe("idx80"), min_score=7)
        flow = ia.analyze_bandarmology("BBRI", days=10)
        plan = ia.generate_trading_plan(TradingPlanInput(
            ticker="BBRI", current_price=4500, target_realistic=4900, target_max=5300,
        ))
    """

    def __init__(
        self,
        data_service: DataService | None = None,
        sector_provider: SectorProvider | None = None,
        flow_provider: BrokerFlowProvider | None = None,
        broker_classifier: BrokerClassifier | None = None,
    ) -> None:
        self.data = data_service
        self.technicals = TechnicalService(data_service=data_service)
        self.trend = TrendService(
            technical_service=self.technicals,
            sector_provider=sector_provider,
            data_service=data_service,
        )
        self.bandarmology = BandarmologyService(
            flow_provider=flow_provider, classifier=broker_classifier,
        )
        self.screening = ScreeningService(
            data_service=data_service, sector_provider=sector_provider,
        )
        self.trading_plan = TradingPlanService(data_service=data_service)

    def analyze_technical(self, bars: Bars, ticker: str = "") -> IndicatorSnapshot:
        return self.technicals.snapshot(ticker, to_ohlcv_frame(bars))

    def check_trend_criteria(
        self, bars: Bars, sector_rs: float, ticker: str = ""
    ) -> TrendTemplateResult | None:
        return self.trend.check(ticker, sector_rs, to_ohlcv_frame(bars))

    def classify_stage(
        self, bars: Bars, snapshot: IndicatorSnapshot | None = None
    ) -> StageClassification:
        df = to_ohlcv_frame(bars)
        if snapshot is None and not df.empty:
            snapshot = self.technicals.snapshot("", df)
        return classify_stage(df, snapshot)

    def analyze_bandarmology(self, ticker: str, days: int | None = None) -> BandarmologyResult:
        return self.bandarmology.analyze(ticker, days)

    def run_screener(
        self,
        tickers: list[str],
        preset: ScreenerPreset | str,
        ohlcv_map: dict[str, pd.DataFrame] | None = None,
    ) -> ScreeningResult:
        return self.screening.run(tickers, preset, ohlcv_map)

    def scan_trend_template(
        self,
        tickers: list[str],
        min_score: int | None = None,
        ohlcv_map: dict[str, pd.DataFrame] | None = None,
    ) -> TrendScreenResult:
        return self.screening.scan_trend_template(tickers, min_score, ohlcv_map)

    def generate_trading_plan(self, plan_input: TradingPlanInput) -> TradingPlanResult:
        return self.trading_plan.generate(plan_input)

    def compute_broker_targets(
        self,
        broker_avg_price: float,
        broker_volume: float,
        ara: float,
        arb: float,
        total_bid: float,
        total_offer: float,
        price: float,
    ) -> BrokerTargets:
        return self.trading_plan.broker_targets(
            broker_avg_price, broker_volume, ara, arb, total_bid, total_offer, price,
        )
