"""Tests for data providers (contract tests, yfinance mocked)."""

from datetime import date, timedelta
from unittest.mock import patch

import pandas as pd
import pytest

from idx_analyzer.data.exceptions import DataFetchError
from idx_analyzer.data.providers.yfinance import YFinanceProvider
from idx_analyzer.models.data import DataRequest, DataType, ProviderType

DOWNLOAD = "idx_analyzer.data.providers.yfinance.yf.download"


@pytest.fixture
def provider() -> YFinanceProvider:
    return YFinanceProvider()


@pytest.fixture
def sample_yf_df() -> pd.DataFrame:
    """DataFrame mimicking yfinance output."""
    dates = pd.date_range("2025-01-02", periods=5, freq="B")
    return pd.DataFrame(
        {
            "Open": [9000.0, 9025.0, 9050.0, 9075.0, 9100.0],
            "High": [9050.0, 9075.0, 9100.0, 9125.0, 9150.0],
            "Low": [8975.0, 9000.0, 9025.0, 9050.0, 9075.0],
            "Close": [9025.0, 9050.0, 9075.0, 9100.0, 9125.0],
            "Volume": [1000, 1100, 1200, 1300, 1400],
        },
        index=dates,
    )


class TestYFinanceFetch:
    def test_fetch_returns_ohlcv(self, provider: YFinanceProvider, sample_yf_df: pd.DataFrame) -> None:
        request = DataRequest(
            ticker="BBCA",
            data_type=DataType.OHLCV,
            start_date=date(2025, 1, 2),
            end_date=date(2025, 1, 8),
        )

        with patch(DOWNLOAD, return_value=sample_yf_df) as download:
            result = provider.fetch(request)

        assert list(result.columns) == ["Open", "High", "Low", "Close", "Volume"]
        assert isinstance(result.index, pd.DatetimeIndex)
        assert result.index.is_monotonic_increasing
        assert len(result) == 5

        args, kwargs = download.call_args
        assert args[0] == "BBCA.JK"
        # end is exclusive in yfinance
        assert kwargs["end"] == date(2025, 1, 8) + timedelta(days=1)
        assert kwargs["progress"] is False

    def test_suffix_not_doubled(self, provider: YFinanceProvider, sample_yf_df: pd.DataFrame) -> None:
        request = DataRequest(ticker="bbca.jk", data_type=DataType.OHLCV)
        with patch(DOWNLOAD, return_value=sample_yf_df) as download:
            provider.fetch(request)
        assert download.call_args.args[0] == "BBCA.JK"

    def test_fetch_empty_raises(self, provider: YFinanceProvider) -> None:
        request = DataRequest(ticker="ZZZZ", data_type=DataType.OHLCV)

        with patch(DOWNLOAD, return_value=pd.DataFrame()):
            with pytest.raises(DataFetchError, match="No data returned"):
                provider.fetch(request)

    def test_fetch_exception_raises(self, provider: YFinanceProvider) -> None:
        request = DataRequest(ticker="BBCA", data_type=DataType.OHLCV)

        with patch(DOWNLOAD, side_effect=Exception("network error")):
            with pytest.raises(DataFetchError, match="network error"):
                provider.fetch(request)

    def test_fetch_flattens_multiindex(self, provider: YFinanceProvider) -> None:
        """yfinance sometimes returns MultiIndex columns for single ticker."""
        dates = pd.date_range("2025-01-02", periods=3, freq="B")
        index = pd.MultiIndex.from_tuples(
            [(col, "BBCA.JK") for col in ["Open", "High", "Low", "Close", "Volume"]]
        )
        df = pd.DataFrame(
            [[9000, 9050, 8975, 9025, 1000],
             [9025, 9075, 9000, 9050, 1100],
             [9050, 9100, 9025, 9075, 1200]],
            index=dates,
            columns=index,
        )

        request = DataRequest(ticker="BBCA", data_type=DataType.OHLCV)
        with patch(DOWNLOAD, return_value=df):
            result = provider.fetch(request)

        assert list(result.columns) == ["Open", "High", "Low", "Close", "Volume"]

    def test_fetch_strips_timezone(self, provider: YFinanceProvider, sample_yf_df: pd.DataFrame) -> None:
        sample_yf_df.index = sample_yf_df.index.tz_localize("Asia/Jakarta")
        request = DataRequest(ticker="BBCA", data_type=DataType.OHLCV)
        with patch(DOWNLOAD, return_value=sample_yf_df):
            result = provider.fetch(request)
        assert result.index.tz is None

    def test_missing_columns(self, provider: YFinanceProvider, sample_yf_df: pd.DataFrame) -> None:
        request = DataRequest(ticker="BBCA", data_type=DataType.OHLCV)
        with patch(DOWNLOAD, return_value=sample_yf_df.drop(columns=["Volume"])):
            with pytest.raises(DataFetchError, match="Missing columns"):
                provider.fetch(request)


class TestProviderContract:
    def test_provider_type(self, provider: YFinanceProvider) -> None:
        assert provider.provider_type == ProviderType.YFINANCE

    def test_supported_data_types(self, provider: YFinanceProvider) -> None:
        assert provider.supported_data_types == [DataType.OHLCV]

    def test_validate_ticker(self, provider: YFinanceProvider) -> None:
        assert provider.validate_ticker("BBCA")
        assert provider.validate_ticker("bbca.jk")
        assert not provider.validate_ticker("B")
