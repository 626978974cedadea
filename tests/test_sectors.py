"""Tests for ticker -> sector lookup."""

import pytest

from idx_analyzer.data.sectors import UNKNOWN_SECTOR, StaticSectorProvider


@pytest.fixture
def provider() -> StaticSectorProvider:
    return StaticSectorProvider({
        "BBCA": "Financials",
        "BBRI": "Financials",
        "TLKM": "Infrastructure",
    })


class TestStaticSectorProvider:
    def test_get_sector(self, provider):
        assert provider.get_sector("BBCA") == "Financials"
        assert provider.get_sector("bbca.jk") == "Financials"

    def test_unmapped(self, provider):
        assert provider.get_sector("XXXX") == UNKNOWN_SECTOR
        assert not provider.has_mapping("XXXX")

    def test_stocks_in_sector(self, provider):
        assert provider.stocks_in_sector("Financials") == ["BBCA", "BBRI"]
        assert provider.stocks_in_sector("Energy") == []

    def test_sectors_sorted(self, provider):
        assert provider.sectors() == ["Financials", "Infrastructure"]

    def test_statistics(self, provider):
        assert provider.sector_statistics() == {"Financials": 2, "Infrastructure": 1}

    def test_missing_mappings(self, provider):
        assert provider.missing_mappings(["bbca", "XXXX", "TLKM.JK"]) == ["XXXX"]

    def test_sector_map(self, provider):
        assert provider.sector_map(["BBCA", "XXXX"]) == {
            "BBCA": "Financials", "XXXX": UNKNOWN_SECTOR,
        }


class TestPackagedTable:
    def test_loads(self):
        provider = StaticSectorProvider.from_yaml()
        assert provider.version == "1.0.0"
        assert provider.get_sector("BBCA") == "Financials"
        assert provider.get_sector("TLKM") == "Infrastructure"
        assert sum(provider.sector_statistics().values()) > 0

    def test_custom_file(self, tmp_path):
        path = tmp_path / "sectors.yaml"
        path.write_text('version: "9"\nsectors:\n  ABCD: Technology\n')
        provider = StaticSectorProvider.from_yaml(path)
        assert provider.version == "9"
        assert provider.sectors() == ["Technology"]
