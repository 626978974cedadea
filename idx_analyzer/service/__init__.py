"""IDX analysis services."""

from idx_analyzer.service.analyzer import IDXAnalyzer
from idx_analyzer.service.bandarmology import BandarmologyService
from idx_analyzer.service.screening import ScreeningService
from idx_analyzer.service.technical import TechnicalService
from idx_analyzer.service.trading_plan import TradingPlanService
from idx_analyzer.service.trend import TrendService

__all__ = [
    "IDXAnalyzer",
    "BandarmologyService",
    "ScreeningService",
    "TechnicalService",
    "TradingPlanService",
    "TrendService",
]
