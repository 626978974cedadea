"""Central configuration: loaded from YAML, overridable per-field."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


# --- Settings models ---


class TechnicalsSettings(BaseModel):
    sma_windows: list[int] = Field(default_factory=lambda: [5, 10, 20, 50, 100, 150, 200])
    rsi_period: int = 14
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    bollinger_window: int = 20
    bollinger_std: float = 2.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    atr_period: int = 14
    support_resistance_lookback: int = 20
    signal_vote_threshold: int = 3
    # Parity switch: the legacy engine refused a trend label until SMA(200) existed.
    trend_requires_sma_200: bool = False


class TrendSettings(BaseModel):
    year_bars: int = 252
    ma200_trend_lookback: int = 20
    ma200_trend_min_bars: int = 220
    rs_threshold: float = 70.0
    low_multiple: float = 1.3
    high_fraction: float = 0.75
    stage_min_score: int = 30
    max_stage_signals: int = 5
    range_high_pct: float = 75.0
    range_low_pct: float = 25.0
    range_base_high_pct: float = 50.0
    ma200_support_band: float = 0.95
    descriptions: dict[str, str] = Field(default_factory=lambda: {
        "stage_1": "Base building - watch for breakout",
        "stage_2": "Advancing uptrend - ideal for buying",
        "stage_3": "Topping/distribution - consider taking profits",
        "stage_4": "Declining downtrend - avoid or sell",
        "transition": "Stock is in transition between stages",
        "insufficient": "Insufficient data for stage analysis",
    })


class BandarmologySettings(BaseModel):
    default_days: int = 10
    max_days: int = 30
    accumulation_tags: list[str] = Field(default_factory=lambda: ["Acc", "Big Acc"])
    late_accumulation_days: int = 7
    mid_accumulation_days: int = 4
    early_accumulation_days: int = 2
    markup_ready_days: int = 5
    markup_ready_momentum: float = 65.0
    buy_threshold: float = 60.0
    sell_threshold: float = 40.0
    smart_money_alert_days: int = 3
    streak_alert_days: int = 5
    broker_table: str | None = None  # None = packaged brokers.yaml
    recommendations: dict[str, str] = Field(default_factory=lambda: {
        "strong_buy": "STRONG BUY - Strong accumulation, wait for breakout confirmation.",
        "buy": "BUY - Accumulation pattern detected, monitor continuation.",
        "caution": "CAUTION - Distribution phase, avoid new entries.",
        "neutral": "NEUTRAL - Not enough evidence for a recommendation.",
    })


class ScreeningSettings(BaseModel):
    """Settings for universe screening."""

    min_bars: int = 35
    days_back: int = 120
    trend_template_bars: int = 252
    # Requested above the minimum so exchange holidays still leave a full year
    trend_days_back: int = 300
    min_trend_score: int = 6
    base_score: int = 50
    buy_signal_bonus: int = 20
    bullish_trend_bonus: int = 10
    oversold_bonus: int = 15
    default_universe: str = "lq45"


class DataSettings(BaseModel):
    idx_suffix: str = ".JK"
    calendar_buffer: float = 1.6
    fetch_timeout_seconds: float = 20.0
    bar_interval_seconds: float = 0.1
    flow_interval_seconds: float = 0.2
    store_dir: str | None = None  # None = ~/.idx_analyzer/bars
    sector_table: str | None = None  # None = packaged sectors.yaml


class TradingPlanSettings(BaseModel):
    """Settings for trading plan generation."""

    default_account_size: float = 100_000_000.0
    default_risk_pct: float = 2.0
    max_stop_pct: float = 5.0
    atr_stop_multiple: float = 2.0
    tp3_extension: float = 1.5
    shares_per_lot: int = 100
    good_rr_tp1: float = 1.5
    good_rr_tp2: float = 2.0
    poor_rr_tp1: float = 0.5
    poor_rr_tp2: float = 1.0
    atr_history_days: int = 60
    min_atr_bars: int = 15
    # (upper bound exclusive, tick); the last band has no upper bound
    tick_schedule: list[tuple[float, int]] = Field(default_factory=lambda: [
        (200.0, 1),
        (500.0, 2),
        (2000.0, 5),
        (5000.0, 10),
    ])
    top_tick: int = 25


class Settings(BaseModel):
    """Central config: loaded from YAML, overridable per-field."""

    technicals: TechnicalsSettings = Field(default_factory=TechnicalsSettings)
    trend: TrendSettings = Field(default_factory=TrendSettings)
    bandarmology: BandarmologySettings = Field(default_factory=BandarmologySettings)
    screening: ScreeningSettings = Field(default_factory=ScreeningSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    trading_plan: TradingPlanSettings = Field(default_factory=TradingPlanSettings)
    universes: dict[str, list[str]] = Field(default_factory=dict)


# --- Loading ---

_CONFIG_DIR = Path(__file__).parent
_DEFAULTS_PATH = _CONFIG_DIR / "defaults.yaml"
_USER_CONFIG_PATH = Path.home() / ".idx_analyzer" / "config.yaml"

BROKERS_PATH = _CONFIG_DIR / "brokers.yaml"
SECTORS_PATH = _CONFIG_DIR / "sectors.yaml"

_cached_settings: Settings | None = None


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base. Returns new dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; an empty file yields an empty dict."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(
    user_config_path: Path | None = None,
    _force_reload: bool = False,
) -> Settings:
    """Load defaults.yaml, merge ~/.idx_analyzer/config.yaml if present.

    Args:
        user_config_path: Override path for user config file.
        _force_reload: Bypass cache (for testing).

    Returns:
        Merged Settings instance.
    """
    global _cached_settings
    if _cached_settings is not None and not _force_reload:
        return _cached_settings

    # Layer 1: package defaults
    defaults = load_yaml(_DEFAULTS_PATH)

    # Layer 2: user overrides
    user_path = user_config_path or _USER_CONFIG_PATH
    if user_path.exists():
        merged = _deep_merge(defaults, load_yaml(user_path))
    else:
        merged = defaults

    _cached_settings = Settings(**merged)
    return _cached_settings


def get_settings() -> Settings:
    """Get cached settings (singleton). Loads on first call."""
    return load_settings()


def reset_settings() -> None:
    """Clear cached settings. Next get_settings() will reload from YAML."""
    global _cached_settings
    _cached_settings = None


def get_universe(name: str) -> list[str]:
    """Ticker list for a named universe; unknown names fall back to the default one."""
    settings = get_settings()
    universes = settings.universes
    if name in universes:
        return list(universes[name])
    return list(universes.get(settings.screening.default_universe, []))
