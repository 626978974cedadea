"""Maps a data type to the providers that can serve it, in fallback order."""

from __future__ import annotations

from idx_analyzer.data.exceptions import NoProviderError
from idx_analyzer.data.providers.base import DataProvider
from idx_analyzer.models.data import DataType


class ProviderRegistry:
    """Ordered provider registry: registration order is fallback order."""

    def __init__(self) -> None:
        self._providers: list[DataProvider] = []

    def register(self, provider: DataProvider) -> None:
        """Register a data provider after those already registered."""
        self._providers.append(provider)

    def candidates(self, data_type: DataType) -> list[DataProvider]:
        """All providers supporting ``data_type``, primary first."""
        found = [p for p in self._providers if data_type in p.supported_data_types]
        if not found:
            raise NoProviderError(data_type)
        return found

    def resolve(self, data_type: DataType) -> DataProvider:
        """The primary provider for ``data_type``."""
        return self.candidates(data_type)[0]
