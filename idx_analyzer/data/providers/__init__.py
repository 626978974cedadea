"""Daily bar providers: local parquet store and Yahoo Finance."""

from idx_analyzer.data.providers.base import DataProvider
from idx_analyzer.data.providers.parquet_store import ParquetBarStore
from idx_analyzer.data.providers.yfinance import YFinanceProvider

__all__ = ["DataProvider", "ParquetBarStore", "YFinanceProvider"]
