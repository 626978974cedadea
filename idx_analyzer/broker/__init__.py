"""Broker flow integration: pluggable ABC for daily broker leaderboards.

No concrete vendor client ships with the package; implement
``BrokerFlowProvider`` for the broker-summary source you have access to.
"""

from idx_analyzer.broker.base import BrokerFlowProvider, StaticBrokerFlowProvider

__all__ = ["BrokerFlowProvider", "StaticBrokerFlowProvider"]
