"""Broker flow aggregation: pure computation over already-fetched daily flows."""

from __future__ import annotations

from idx_analyzer.config import BandarmologySettings, get_settings
from idx_analyzer.models.bandarmology import BandarmologyResult, FlowPeriod, FlowPhase
from idx_analyzer.models.data import BrokerCategory, DailyBrokerFlow, SkippedUnit
from idx_analyzer.models.technicals import TradeSignal

SMART_MONEY = (BrokerCategory.SMARTMONEY, BrokerCategory.WHALE)
RETAIL = (BrokerCategory.RETAIL,)


def _classify_phase(
    acc_days: int, smart_money_net: float, momentum: float, settings: BandarmologySettings
) -> FlowPhase:
    if acc_days >= settings.markup_ready_days and momentum >= settings.markup_ready_momentum:
        return FlowPhase.MARKUP_READY
    if acc_days >= settings.late_accumulation_days:
        return FlowPhase.LATE_ACCUMULATION
    if acc_days >= settings.mid_accumulation_days:
        return FlowPhase.MID_ACCUMULATION
    if acc_days >= settings.early_accumulation_days:
        return FlowPhase.EARLY_ACCUMULATION
    if acc_days == 0 and smart_money_net < 0:
        return FlowPhase.DISTRIBUTION
    return FlowPhase.NEUTRAL


def _recommendation(phase: FlowPhase, settings: BandarmologySettings) -> str:
    templates = settings.recommendations
    if phase in (FlowPhase.LATE_ACCUMULATION, FlowPhase.MARKUP_READY):
        return templates["strong_buy"]
    if phase == FlowPhase.MID_ACCUMULATION:
        return templates["buy"]
    if phase == FlowPhase.DISTRIBUTION:
        return templates["caution"]
    return templates["neutral"]


def aggregate_flows(
    ticker: str,
    flows: list[DailyBrokerFlow],
    skipped_days: list[SkippedUnit] | None = None,
    settings: BandarmologySettings | None = None,
) -> BandarmologyResult:
    """Aggregate categorized daily flows into momentum, phase and composition.

    ``flows`` are expected newest first and already tagged with categories.
    """
    settings = settings or get_settings().bandarmology

    net_by_category = {c: 0.0 for c in BrokerCategory}
    volume_by_category = {c: 0.0 for c in BrokerCategory}
    total_volume = 0.0
    acc_days = 0

    for flow in flows:
        if flow.acc_dist_tag in settings.accumulation_tags:
            acc_days += 1
        for b in flow.top_buyers:
            net_by_category[b.category] += b.buy_value
            volume_by_category[b.category] += b.buy_value
            total_volume += b.buy_value
        for s in flow.top_sellers:
            net_by_category[s.category] -= s.sell_value
            volume_by_category[s.category] += s.sell_value
            total_volume += s.sell_value

    smart_money_net = sum(net_by_category[c] for c in SMART_MONEY)
    retail_net = sum(net_by_category[c] for c in RETAIL)

    momentum = 50.0
    if total_volume > 0:
        net_ratio = (smart_money_net - retail_net) / total_volume
        momentum = min(100.0, max(0.0, 50.0 + net_ratio * 100))

    if momentum >= settings.buy_threshold:
        momentum_signal = TradeSignal.BUY
    elif momentum <= settings.sell_threshold:
        momentum_signal = TradeSignal.SELL
    else:
        momentum_signal = TradeSignal.NEUTRAL

    phase = _classify_phase(acc_days, smart_money_net, momentum, settings)

    composition = {
        c: (volume_by_category[c] / total_volume * 100 if total_volume > 0 else 0.0)
        for c in BrokerCategory
    }

    alerts: list[str] = []
    if smart_money_net > 0 and acc_days >= settings.smart_money_alert_days:
        alerts.append("Smart money accumulating: net buy")
    if retail_net < 0 and smart_money_net > 0:
        alerts.append("Contrarian bullish: retail selling, smart money buying")
    if acc_days >= settings.streak_alert_days:
        alerts.append(f"Accumulation streak: {acc_days} days")

    dates = [f.date for f in flows]
    period = FlowPeriod(
        start=min(dates) if dates else None,
        end=max(dates) if dates else None,
        days=len(flows),
    )

    return BandarmologyResult(
        ticker=ticker,
        period=period,
        momentum_score=round(momentum, 2),
        momentum_signal=momentum_signal,
        phase=phase,
        accumulation_days=acc_days,
        smart_money_net=smart_money_net,
        retail_net=retail_net,
        total_volume=total_volume,
        broker_composition=composition,
        pattern_alerts=alerts,
        recommendation=_recommendation(phase, settings),
        daily_flows=list(flows),
        skipped_days=list(skipped_days or []),
    )
