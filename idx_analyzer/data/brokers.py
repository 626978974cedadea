"""Broker code -> category lookup, backed by the versioned ``brokers.yaml`` table."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from idx_analyzer.config import BROKERS_PATH, get_settings, load_yaml
from idx_analyzer.models.data import BrokerCategory, DailyBrokerFlow

logger = logging.getLogger(__name__)


class BrokerClassifier:
    """Maps broker codes to categories. Unknown codes map to ``BrokerCategory.UNKNOWN``."""

    def __init__(self, table: dict[str, BrokerCategory], version: str = "") -> None:
        self._table = {code.upper(): cat for code, cat in table.items()}
        self.version = version

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> BrokerClassifier:
        raw = load_yaml(path or BROKERS_PATH)
        table = {
            str(code): BrokerCategory(category)
            for code, category in (raw.get("brokers") or {}).items()
        }
        return cls(table, version=str(raw.get("version", "")))

    def __len__(self) -> int:
        return len(self._table)

    def category(self, broker_code: str) -> BrokerCategory:
        return self._table.get((broker_code or "").upper(), BrokerCategory.UNKNOWN)

    def codes(self, category: BrokerCategory) -> list[str]:
        return sorted(code for code, cat in self._table.items() if cat == category)

    def tag(self, flow: DailyBrokerFlow) -> DailyBrokerFlow:
        """Return a copy of ``flow`` with every broker's category looked up."""
        return flow.model_copy(update={
            "top_buyers": [
                b.model_copy(update={"category": self.category(b.broker_code)})
                for b in flow.top_buyers
            ],
            "top_sellers": [
                s.model_copy(update={"category": self.category(s.broker_code)})
                for s in flow.top_sellers
            ],
        })


@lru_cache(maxsize=1)
def default_classifier() -> BrokerClassifier:
    """Classifier for the configured broker table, loaded once per process."""
    configured = get_settings().bandarmology.broker_table
    classifier = BrokerClassifier.from_yaml(Path(configured) if configured else None)
    logger.debug("Loaded broker table v%s (%d codes)", classifier.version, len(classifier))
    return classifier
