"""Ticker -> sector lookup.

``SectorProvider`` is the interface the screeners consume;
``StaticSectorProvider`` serves the packaged ``sectors.yaml`` table (or any
mapping handed to it). Unmapped tickers resolve to ``UNKNOWN_SECTOR``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import Counter
from pathlib import Path

from idx_analyzer.config import SECTORS_PATH, get_settings, load_yaml
from idx_analyzer.models.data import normalize_ticker

logger = logging.getLogger(__name__)

UNKNOWN_SECTOR = "Unknown"


class SectorProvider(ABC):
    """Resolves the sector a ticker belongs to."""

    @abstractmethod
    def get_sector(self, ticker: str) -> str:
        """Sector name, ``UNKNOWN_SECTOR`` when unmapped."""
        ...

    def sector_map(self, tickers: list[str]) -> dict[str, str]:
        return {t: self.get_sector(t) for t in tickers}


class StaticSectorProvider(SectorProvider):
    """Sector lookup over a fixed ticker -> sector table."""

    def __init__(self, table: dict[str, str], version: str = "") -> None:
        self._table = {normalize_ticker(t): s for t, s in table.items()}
        self.version = version

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> StaticSectorProvider:
        if path is None:
            configured = get_settings().data.sector_table
            path = Path(configured) if configured else SECTORS_PATH
        raw = load_yaml(path)
        table = {str(t): str(s) for t, s in (raw.get("sectors") or {}).items()}
        provider = cls(table, version=str(raw.get("version", "")))
        logger.debug("Loaded sector table v%s (%d tickers)", provider.version, len(table))
        return provider

    def get_sector(self, ticker: str) -> str:
        return self._table.get(normalize_ticker(ticker), UNKNOWN_SECTOR)

    def has_mapping(self, ticker: str) -> bool:
        return normalize_ticker(ticker) in self._table

    def stocks_in_sector(self, sector: str) -> list[str]:
        return [t for t, s in self._table.items() if s == sector]

    def sectors(self) -> list[str]:
        return sorted(set(self._table.values()))

    def sector_statistics(self) -> dict[str, int]:
        """Number of mapped tickers per sector."""
        return dict(Counter(self._table.values()))

    def missing_mappings(self, tickers: list[str]) -> list[str]:
        """Normalized tickers from ``tickers`` that have no sector."""
        return [
            normalize_ticker(t) for t in tickers if not self.has_mapping(t)
        ]
