"""Data-layer models: price bars, broker flow snapshots, skip diagnostics."""

from __future__ import annotations

import math
import re
from datetime import date
from enum import StrEnum

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict

OHLCV_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]

# IDX equity codes: 4 letters in practice, allow 2-6 alphanumerics
TICKER_PATTERN = re.compile(r"^[A-Z0-9]{2,6}$")


class DataType(StrEnum):
    OHLCV = "ohlcv"
    BROKER_FLOW = "broker_flow"


class ProviderType(StrEnum):
    PARQUET = "parquet"
    YFINANCE = "yfinance"


class DataRequest(BaseModel):
    ticker: str
    data_type: DataType
    start_date: date | None = None
    end_date: date | None = None


class PriceBar(BaseModel):
    """One daily OHLCV bar. Immutable once fetched."""

    model_config = ConfigDict(frozen=True)

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float | None = None

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.open, self.high, self.low, self.close))


class SkipReason(StrEnum):
    FETCH_FAILED = "fetch_failed"
    NO_DATA = "no_data"
    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_INPUT = "invalid_input"


class SkippedUnit(BaseModel):
    """A ticker or a day left out of a best-effort batch, and why."""

    unit: str
    reason: SkipReason
    detail: str = ""


class BrokerCategory(StrEnum):
    SMARTMONEY = "Smartmoney"
    WHALE = "Whale"
    RETAIL = "Retail"
    MIX = "Mix"
    UNKNOWN = "Unknown"


class BrokerBuy(BaseModel):
    broker_code: str
    buy_value: float
    buy_lots: float = 0.0
    category: BrokerCategory = BrokerCategory.UNKNOWN


class BrokerSell(BaseModel):
    broker_code: str
    sell_value: float
    sell_lots: float = 0.0
    category: BrokerCategory = BrokerCategory.UNKNOWN


class DailyBrokerFlow(BaseModel):
    """Top buying/selling brokers for one ticker on one trading day."""

    date: date
    top_buyers: list[BrokerBuy]
    top_sellers: list[BrokerSell]
    acc_dist_tag: str = "-"      # top-1 broker tag: "Big Acc", "Acc", "Neutral", "Dist", ...
    broker_acc_dist: str = "-"   # aggregate tag over all brokers


def bars_to_frame(bars: list[PriceBar]) -> pd.DataFrame:
    """Convert bars to an OHLCV DataFrame: ascending, de-duplicated, finite rows only."""
    rows = [b for b in bars if b.is_finite]
    if not rows:
        return pd.DataFrame(columns=OHLCV_COLUMNS, index=pd.DatetimeIndex([]), dtype=float)
    df = pd.DataFrame(
        {
            "Open": [b.open for b in rows],
            "High": [b.high for b in rows],
            "Low": [b.low for b in rows],
            "Close": [b.close for b in rows],
            "Volume": [b.volume if b.volume is not None else float("nan") for b in rows],
        },
        index=pd.DatetimeIndex([pd.Timestamp(b.date) for b in rows]),
    )
    df = df[~df.index.duplicated(keep="last")]
    df.sort_index(inplace=True)
    return df


def frame_to_bars(df: pd.DataFrame) -> list[PriceBar]:
    """Convert an OHLCV DataFrame back to a list of PriceBar."""
    bars: list[PriceBar] = []
    for ts, row in df.iterrows():
        volume = row.get("Volume")
        bars.append(PriceBar(
            date=pd.Timestamp(ts).date(),
            open=float(row["Open"]),
            high=float(row["High"]),
            low=float(row["Low"]),
            close=float(row["Close"]),
            volume=None if volume is None or pd.isna(volume) else float(volume),
        ))
    return bars


def clean_ohlcv(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize a provider frame: OHLCV columns, ascending unique index, finite OHLC."""
    if df.empty:
        return df
    out = df.reindex(columns=OHLCV_COLUMNS).astype(float)
    out.index = pd.DatetimeIndex(out.index)
    out = out[~out.index.duplicated(keep="last")]
    out.sort_index(inplace=True)
    ohlc = ["Open", "High", "Low", "Close"]
    finite = np.isfinite(out[ohlc].to_numpy()).all(axis=1)
    return out[finite]


def normalize_ticker(ticker: str, suffix: str = ".JK") -> str:
    """Upper-case a ticker and drop the exchange suffix: ``"bbca.jk"`` -> ``"BBCA"``."""
    cleaned = (ticker or "").strip().upper()
    if suffix and cleaned.endswith(suffix.upper()):
        cleaned = cleaned[: -len(suffix)]
    return cleaned


def is_valid_ticker(ticker: str) -> bool:
    """True for an already-normalized IDX ticker code."""
    return bool(TICKER_PATTERN.match(ticker))


def to_ohlcv_frame(bars: pd.DataFrame | list[PriceBar]) -> pd.DataFrame:
    """Accept either a bar list or a provider frame; return a clean OHLCV frame."""
    if isinstance(bars, pd.DataFrame):
        return clean_ohlcv(bars)
    return bars_to_frame(list(bars))
