"""BandarmologyService: multi-day broker flow analysis for one ticker."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING

from idx_analyzer.config import get_settings
from idx_analyzer.data.brokers import BrokerClassifier, default_classifier
from idx_analyzer.data.exceptions import DataFetchError, InvalidTickerError
from idx_analyzer.data.throttle import RateLimiter
from idx_analyzer.features.bandarmology import aggregate_flows
from idx_analyzer.models.bandarmology import BandarmologyResult
from idx_analyzer.models.data import (
    DailyBrokerFlow,
    SkippedUnit,
    SkipReason,
    is_valid_ticker,
    normalize_ticker,
)

if TYPE_CHECKING:
    from idx_analyzer.broker.base import BrokerFlowProvider

logger = logging.getLogger(__name__)


class BandarmologyService:
    """Fetch daily broker leaderboards and classify accumulation/distribution.

    Days are requested one at a time, newest first, paced by a
    ``RateLimiter``. A day that fails or has no data is skipped and listed in
    ``skipped_days``; the reported period covers only the days retrieved.
    """

    def __init__(
        self,
        flow_provider: BrokerFlowProvider | None = None,
        classifier: BrokerClassifier | None = None,
        limiter: RateLimiter | None = None,
        today: date | None = None,
    ) -> None:
        self.flow_provider = flow_provider
        self._classifier = classifier
        self.limiter = limiter or RateLimiter(get_settings().data.flow_interval_seconds)
        self._today = today

    @property
    def classifier(self) -> BrokerClassifier:
        if self._classifier is None:
            self._classifier = default_classifier()
        return self._classifier

    def _fetch_day(
        self, ticker: str, day: date, skipped: list[SkippedUnit]
    ) -> DailyBrokerFlow | None:
        self.limiter.wait()
        try:
            flow = self.flow_provider.get_daily_broker_flow(ticker, day)
        except (DataFetchError, TimeoutError, OSError) as e:
            logger.warning("Skipping %s flow for %s: %s", ticker, day, e)
            skipped.append(SkippedUnit(
                unit=day.isoformat(), reason=SkipReason.FETCH_FAILED, detail=str(e),
            ))
            return None
        if flow is None:
            logger.debug("No broker flow for %s on %s", ticker, day)
            skipped.append(SkippedUnit(unit=day.isoformat(), reason=SkipReason.NO_DATA))
            return None
        return self.classifier.tag(flow)

    def analyze(
        self,
        ticker: str,
        days: int | None = None,
        end_date: date | None = None,
    ) -> BandarmologyResult:
        """Aggregate the last ``days`` calendar days of broker flow.

        Args:
            ticker: IDX code.
            days: Window length, capped at the configured maximum (30).
            end_date: Newest day requested; defaults to today.

        Raises:
            ValueError: If no flow provider is configured.
            InvalidTickerError: If the ticker is malformed.
        """
        if self.flow_provider is None:
            raise ValueError("BandarmologyService requires a BrokerFlowProvider")
        cfg = get_settings().bandarmology
        code = normalize_ticker(ticker)
        if not is_valid_ticker(code):
            raise InvalidTickerError("bandarmology", ticker)

        days = cfg.default_days if days is None else days
        days = max(1, min(days, cfg.max_days))
        end = end_date or self._today or date.today()

        flows: list[DailyBrokerFlow] = []
        skipped: list[SkippedUnit] = []
        for offset in range(days):
            flow = self._fetch_day(code, end - timedelta(days=offset), skipped)
            if flow is not None:
                flows.append(flow)

        logger.info(
            "Bandarmology %s: %d/%d days retrieved", code, len(flows), days,
        )
        return aggregate_flows(code, flows, skipped, cfg)
