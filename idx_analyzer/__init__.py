"""IDX equities analytics: technicals, trend template, bandarmology, screening, trading plans."""

# Config
from idx_analyzer.config import Settings, get_settings, get_universe

# Models
from idx_analyzer.models.data import (
    BrokerBuy,
    BrokerCategory,
    BrokerSell,
    DailyBrokerFlow,
    DataRequest,
    DataType,
    PriceBar,
    ProviderType,
    SkippedUnit,
    SkipReason,
)
from idx_analyzer.models.technicals import (
    BandPosition,
    IndicatorSnapshot,
    RSISignal,
    SignalDirection,
    TradeSignal,
    TrendLabel,
)
from idx_analyzer.models.trend import (
    StageClassification,
    StageID,
    TrendCriteria,
    TrendTemplateResult,
)
from idx_analyzer.models.bandarmology import BandarmologyResult, FlowPeriod, FlowPhase
from idx_analyzer.models.screening import (
    ScreenedStock,
    ScreenerPreset,
    ScreeningResult,
    TrendScreenResult,
)
from idx_analyzer.models.trading_plan import (
    BrokerTargets,
    RRQuality,
    TradingPlanInput,
    TradingPlanResult,
)

# Data
from idx_analyzer.broker.base import BrokerFlowProvider, StaticBrokerFlowProvider
from idx_analyzer.data.brokers import BrokerClassifier
from idx_analyzer.data.exceptions import DataFetchError, InvalidTickerError
from idx_analyzer.data.sectors import SectorProvider, StaticSectorProvider
from idx_analyzer.data.service import DataService
from idx_analyzer.data.throttle import RateLimiter

# Services
from idx_analyzer.service.analyzer import IDXAnalyzer
from idx_analyzer.service.bandarmology import BandarmologyService
from idx_analyzer.service.screening import ScreeningService
from idx_analyzer.service.technical import TechnicalService
from idx_analyzer.service.trading_plan import TradingPlanService
from idx_analyzer.service.trend import TrendService

# Features
from idx_analyzer.features.bandarmology import aggregate_flows
from idx_analyzer.features.technicals import compute_technicals
from idx_analyzer.features.trading_plan import build_trading_plan, compute_broker_targets, tick_size
from idx_analyzer.features.trend import classify_stage, evaluate_criteria

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_universe",
    # Facade
    "IDXAnalyzer",
    # Services
    "BandarmologyService",
    "ScreeningService",
    "TechnicalService",
    "TradingPlanService",
    "TrendService",
    # Data
    "BrokerClassifier",
    "BrokerFlowProvider",
    "StaticBrokerFlowProvider",
    "DataFetchError",
    "InvalidTickerError",
    "DataService",
    "RateLimiter",
    "SectorProvider",
    "StaticSectorProvider",
    # Data models
    "BrokerBuy",
    "BrokerCategory",
    "BrokerSell",
    "DailyBrokerFlow",
    "DataRequest",
    "DataType",
    "PriceBar",
    "ProviderType",
    "SkippedUnit",
    "SkipReason",
    # Technical models
    "BandPosition",
    "IndicatorSnapshot",
    "RSISignal",
    "SignalDirection",
    "TradeSignal",
    "TrendLabel",
    # Trend models
    "StageClassification",
    "StageID",
    "TrendCriteria",
    "TrendTemplateResult",
    # Bandarmology models
    "BandarmologyResult",
    "FlowPeriod",
    "FlowPhase",
    # Screening models
    "ScreenedStock",
    "ScreenerPreset",
    "ScreeningResult",
    "TrendScreenResult",
    # Trading plan models
    "BrokerTargets",
    "RRQuality",
    "TradingPlanInput",
    "TradingPlanResult",
    # Functions
    "aggregate_flows",
    "build_trading_plan",
    "classify_stage",
    "compute_broker_targets",
    "compute_technicals",
    "evaluate_criteria",
    "tick_size",
]
