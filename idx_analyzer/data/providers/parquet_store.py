"""ParquetBarStore: bulk local store of daily bars, one parquet file per ticker."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import pandas as pd

from idx_analyzer.data.exceptions import CacheError, DataFetchError
from idx_analyzer.data.providers.base import DataProvider
from idx_analyzer.models.data import (
    DataRequest,
    DataType,
    ProviderType,
    clean_ohlcv,
    is_valid_ticker,
    normalize_ticker,
)

logger = logging.getLogger(__name__)


class ParquetBarStore(DataProvider):
    """Reads and writes ``<store_dir>/<TICKER>.parquet``.

    Acts as the primary bar source: it is local, so it is never throttled.
    Live providers write through into it via ``DataService``.
    """

    def __init__(self, store_dir: Path | None = None) -> None:
        from idx_analyzer.config import get_settings

        if store_dir is None:
            configured = get_settings().data.store_dir
            store_dir = Path(configured) if configured else None
        self.store_dir = store_dir or Path.home() / ".idx_analyzer" / "bars"

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.PARQUET

    @property
    def supported_data_types(self) -> list[DataType]:
        return [DataType.OHLCV]

    def _parquet_path(self, ticker: str) -> Path:
        return self.store_dir / f"{normalize_ticker(ticker)}.parquet"

    def read(self, ticker: str) -> pd.DataFrame | None:
        """All stored bars for a ticker. Returns None when nothing is stored."""
        path = self._parquet_path(ticker)
        if not path.exists():
            return None
        try:
            return pd.read_parquet(path)
        except Exception as e:
            raise CacheError(f"Failed to read {path}: {e}") from e

    def write(self, ticker: str, df: pd.DataFrame) -> None:
        """Merge ``df`` into the stored bars (atomic: temp file + rename)."""
        path = self._parquet_path(ticker)
        path.parent.mkdir(parents=True, exist_ok=True)

        existing = self.read(ticker)
        if existing is not None and not existing.empty:
            df = pd.concat([existing, df])
        df = clean_ohlcv(df)

        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        os.close(fd)
        try:
            df.to_parquet(tmp, engine="pyarrow")
            os.replace(tmp, path)
        except Exception as e:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise CacheError(f"Failed to write {path}: {e}") from e
        logger.debug("Stored %d bars for %s", len(df), normalize_ticker(ticker))

    def fetch(self, request: DataRequest) -> pd.DataFrame:
        try:
            df = self.read(request.ticker)
        except CacheError as e:
            raise DataFetchError("parquet", request.ticker, str(e)) from e
        if df is None or df.empty:
            raise DataFetchError("parquet", request.ticker, "Ticker not in store")

        df = clean_ohlcv(df)
        if request.start_date is not None:
            df = df[df.index >= pd.Timestamp(request.start_date)]
        if request.end_date is not None:
            df = df[df.index <= pd.Timestamp(request.end_date)]
        if df.empty:
            raise DataFetchError(
                "parquet", request.ticker, "No stored rows in the requested date range"
            )
        return df

    def validate_ticker(self, ticker: str) -> bool:
        return is_valid_ticker(normalize_ticker(ticker))

    def tickers(self) -> list[str]:
        """Tickers with a stored parquet file."""
        if not self.store_dir.exists():
            return []
        return sorted(p.stem for p in self.store_dir.glob("*.parquet"))
