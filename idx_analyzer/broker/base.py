"""Abstract broker flow interface: implement for each broker-summary source."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from idx_analyzer.models.data import DailyBrokerFlow


class BrokerFlowProvider(ABC):
    """Daily top buying/selling brokers for a ticker."""

    @abstractmethod
    def get_daily_broker_flow(self, ticker: str, day: date) -> DailyBrokerFlow | None:
        """Broker leaderboard for ``ticker`` on ``day``.

        Returns None when there was no trading (weekend, holiday, suspension).
        Raises ``DataFetchError`` when the source itself fails.
        """
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str: ...


class StaticBrokerFlowProvider(BrokerFlowProvider):
    """Serves pre-loaded flows, e.g. a vendor export or a replayed session."""

    def __init__(self, flows: dict[str, list[DailyBrokerFlow]]) -> None:
        self._flows = {
            ticker.upper(): {f.date: f for f in day_flows}
            for ticker, day_flows in flows.items()
        }

    @property
    def provider_name(self) -> str:
        return "static"

    def get_daily_broker_flow(self, ticker: str, day: date) -> DailyBrokerFlow | None:
        return self._flows.get(ticker.upper(), {}).get(day)
