"""DataProvider abstract base class."""

from abc import ABC, abstractmethod

import pandas as pd

from idx_analyzer.models.data import DataRequest, DataType, ProviderType


class DataProvider(ABC):
    """Base class for all daily bar providers."""

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType: ...

    @property
    @abstractmethod
    def supported_data_types(self) -> list[DataType]: ...

    @abstractmethod
    def fetch(self, request: DataRequest) -> pd.DataFrame:
        """Fetch OHLCV bars (ascending DatetimeIndex). Raises DataFetchError on failure."""
        ...

    @abstractmethod
    def validate_ticker(self, ticker: str) -> bool:
        """Check if ticker is valid for this provider."""
        ...
