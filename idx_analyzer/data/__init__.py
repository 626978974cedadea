"""Data access: bar providers, broker and sector reference tables, pacing."""

from idx_analyzer.data.brokers import BrokerClassifier, default_classifier
from idx_analyzer.data.exceptions import (
    CacheError,
    DataFetchError,
    InvalidTickerError,
    NoProviderError,
)
from idx_analyzer.data.registry import ProviderRegistry
from idx_analyzer.data.sectors import UNKNOWN_SECTOR, SectorProvider, StaticSectorProvider
from idx_analyzer.data.service import DataService
from idx_analyzer.data.throttle import RateLimiter

__all__ = [
    "BrokerClassifier",
    "default_classifier",
    "CacheError",
    "DataFetchError",
    "InvalidTickerError",
    "NoProviderError",
    "ProviderRegistry",
    "UNKNOWN_SECTOR",
    "SectorProvider",
    "StaticSectorProvider",
    "DataService",
    "RateLimiter",
]
