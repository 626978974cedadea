"""Tests for broker flow provider contracts."""

from datetime import date

import pytest

from idx_analyzer.broker.base import BrokerFlowProvider, StaticBrokerFlowProvider
from idx_analyzer.models.data import BrokerBuy, BrokerSell, DailyBrokerFlow


class TestABCCannotInstantiate:
    def test_broker_flow_provider(self):
        with pytest.raises(TypeError, match="abstract"):
            BrokerFlowProvider()


class MockFlowProvider(BrokerFlowProvider):
    @property
    def provider_name(self) -> str:
        return "mock"

    def get_daily_broker_flow(self, ticker, day):
        return DailyBrokerFlow(date=day, top_buyers=[], top_sellers=[])


class TestMockImplementation:
    def test_satisfies_abc(self):
        provider = MockFlowProvider()
        flow = provider.get_daily_broker_flow("BBCA", date(2025, 3, 14))
        assert flow.date == date(2025, 3, 14)
        assert flow.acc_dist_tag == "-"


class TestStaticBrokerFlowProvider:
    @pytest.fixture
    def provider(self) -> StaticBrokerFlowProvider:
        flow = DailyBrokerFlow(
            date=date(2025, 3, 14),
            top_buyers=[BrokerBuy(broker_code="AK", buy_value=2_500_000_000.0, buy_lots=5000)],
            top_sellers=[BrokerSell(broker_code="YP", sell_value=1_000_000_000.0)],
            acc_dist_tag="Acc",
        )
        return StaticBrokerFlowProvider({"bbri": [flow]})

    def test_name(self, provider):
        assert provider.provider_name == "static"

    def test_lookup_case_insensitive(self, provider):
        flow = provider.get_daily_broker_flow("BBRI", date(2025, 3, 14))
        assert flow.top_buyers[0].broker_code == "AK"

    def test_missing_day_is_none(self, provider):
        assert provider.get_daily_broker_flow("BBRI", date(2025, 3, 15)) is None

    def test_missing_ticker_is_none(self, provider):
        assert provider.get_daily_broker_flow("TLKM", date(2025, 3, 14)) is None
