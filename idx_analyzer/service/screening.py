"""ScreeningService: preset and trend-template screens across a ticker universe."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import TYPE_CHECKING

import pandas as pd

from idx_analyzer.config import get_settings
from idx_analyzer.data.exceptions import DataFetchError
from idx_analyzer.data.sectors import UNKNOWN_SECTOR
from idx_analyzer.features.screening import screen_snapshot
from idx_analyzer.features.technicals import compute_technicals
from idx_analyzer.features.trend import (
    build_sector_returns,
    evaluate_criteria,
    sector_relative_strength,
    year_return,
)
from idx_analyzer.models.data import (
    SkippedUnit,
    SkipReason,
    is_valid_ticker,
    normalize_ticker,
    to_ohlcv_frame,
)
from idx_analyzer.models.screening import (
    ScreenedStock,
    ScreenerPreset,
    ScreeningResult,
    TrendScreenResult,
)
from idx_analyzer.models.trend import TrendTemplateResult

if TYPE_CHECKING:
    from idx_analyzer.data.sectors import SectorProvider
    from idx_analyzer.data.service import DataService

logger = logging.getLogger(__name__)


def _dedupe(tickers: list[str]) -> list[str]:
    """Drop repeats of the same normalized code, first spelling wins."""
    seen: set[str] = set()
    ordered = []
    for t in tickers:
        key = normalize_ticker(str(t))
        if key not in seen:
            seen.add(key)
            ordered.append(t)
    return ordered


class ScreeningService:
    """Scan a universe of tickers, best effort.

    A ticker that is malformed, fails to fetch or has too little history is
    left out of the results and listed in ``skipped``; it never aborts the run.
    Result order is deterministic: ties keep the input ticker order.
    """

    def __init__(
        self,
        data_service: DataService | None = None,
        sector_provider: SectorProvider | None = None,
    ) -> None:
        self.data_service = data_service
        self.sector_provider = sector_provider

    def _load(
        self,
        tickers: list[str],
        ohlcv_map: dict[str, pd.DataFrame] | None,
        days_back: int,
        min_bars: int,
        skipped: list[SkippedUnit],
    ) -> dict[str, pd.DataFrame]:
        """Bars per valid ticker with at least ``min_bars`` rows, input order kept."""
        if ohlcv_map is None and self.data_service is None:
            raise ValueError(
                "Either provide ohlcv_map or initialize ScreeningService with a DataService"
            )
        supplied = (
            {normalize_ticker(k): v for k, v in ohlcv_map.items()}
            if ohlcv_map is not None else None
        )

        loaded: dict[str, pd.DataFrame] = {}
        for raw in tickers:
            code = normalize_ticker(raw)
            if not is_valid_ticker(code):
                logger.warning("Skipping malformed ticker %r", raw)
                skipped.append(SkippedUnit(unit=str(raw), reason=SkipReason.INVALID_INPUT))
                continue
            if supplied is not None:
                if code not in supplied:
                    skipped.append(SkippedUnit(unit=code, reason=SkipReason.NO_DATA))
                    continue
                df = to_ohlcv_frame(supplied[code])
            else:
                try:
                    df = self.data_service.get_ohlcv(code, days_back, min_bars)
                except DataFetchError as e:
                    logger.warning("Skipping %s: %s", code, e)
                    skipped.append(SkippedUnit(
                        unit=code, reason=SkipReason.FETCH_FAILED, detail=str(e),
                    ))
                    continue

            if len(df) < min_bars:
                logger.debug("Skipping %s: %d bars, need %d", code, len(df), min_bars)
                skipped.append(SkippedUnit(
                    unit=code,
                    reason=SkipReason.INSUFFICIENT_DATA,
                    detail=f"{len(df)} bars, need {min_bars}",
                ))
                continue
            loaded[code] = df
        return loaded

    def run(
        self,
        tickers: list[str],
        preset: ScreenerPreset | str,
        ohlcv_map: dict[str, pd.DataFrame] | None = None,
    ) -> ScreeningResult:
        """Run a preset screen; hits sorted by score descending.

        Args:
            tickers: Universe to scan.
            preset: One of ``ScreenerPreset``.
            ohlcv_map: Pre-fetched bars keyed by ticker. When given, nothing
                is fetched and tickers missing from it are skipped.

        Raises:
            ValueError: On an unknown preset name.
        """
        preset = ScreenerPreset(str(preset).strip().lower().replace("-", "_"))
        cfg = get_settings().screening
        universe = _dedupe(list(tickers))
        skipped: list[SkippedUnit] = []

        loaded = self._load(universe, ohlcv_map, cfg.days_back, cfg.min_bars, skipped)

        stocks: list[ScreenedStock] = []
        for code, df in loaded.items():
            hit = screen_snapshot(compute_technicals(df, code), preset, cfg)
            if hit is not None:
                stocks.append(hit)

        # Stable sort: equal scores keep input order
        stocks.sort(key=lambda s: s.score, reverse=True)

        summary = (
            f"Scanned {len(universe)} tickers | {len(stocks)} matched '{preset}'"
            f" | {len(skipped)} skipped"
        )
        logger.info(summary)
        return ScreeningResult(
            as_of_date=date.today(),
            preset=preset,
            tickers_scanned=len(universe),
            stocks=stocks,
            skipped=skipped,
            summary=summary,
        )

    def scan_trend_template(
        self,
        tickers: list[str],
        min_score: int | None = None,
        ohlcv_map: dict[str, pd.DataFrame] | None = None,
    ) -> TrendScreenResult:
        """Trend-template screen with sector-relative strength.

        Each ticker's trailing-year return is ranked against the returns of
        the other loaded tickers in its sector. Tickers scoring at least
        ``min_score`` are kept, sorted by (score, rs) descending.
        """
        cfg = get_settings().screening
        year_bars = get_settings().trend.year_bars
        min_score = cfg.min_trend_score if min_score is None else min_score
        universe = _dedupe(list(tickers))
        skipped: list[SkippedUnit] = []

        loaded = self._load(
            universe, ohlcv_map, cfg.trend_days_back, cfg.trend_template_bars, skipped,
        )
        years = {code: df.iloc[-year_bars:] for code, df in loaded.items()}

        sector_map = (
            self.sector_provider.sector_map(list(years))
            if self.sector_provider is not None
            else {code: UNKNOWN_SECTOR for code in years}
        )
        sector_returns = build_sector_returns(years, sector_map)

        results: list[TrendTemplateResult] = []
        for code, df in loaded.items():
            sector = sector_map.get(code, UNKNOWN_SECTOR)
            rs = sector_relative_strength(year_return(years[code]), sector_returns.get(sector, []))
            result = evaluate_criteria(df, rs, ticker=code, sector=sector)
            if result is None:
                skipped.append(SkippedUnit(unit=code, reason=SkipReason.INSUFFICIENT_DATA))
                continue
            logger.debug("%s scored %d/8 (RS %.1f)", code, result.score, rs)
            if result.score >= min_score:
                results.append(result)

        results.sort(key=lambda r: (r.score, r.rs), reverse=True)

        sector_counts = dict(Counter(r.sector for r in results))
        summary = (
            f"Scanned {len(universe)} tickers | {len(results)} scored >= {min_score}/8"
            f" | {len(skipped)} skipped"
        )
        logger.info(summary)
        return TrendScreenResult(
            as_of_date=date.today(),
            min_score=min_score,
            tickers_scanned=len(universe),
            results=results,
            sector_counts=sector_counts,
            skipped=skipped,
            summary=summary,
        )
