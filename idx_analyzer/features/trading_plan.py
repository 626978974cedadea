"""Trading plan math over the IDX tick grid. Pure computation."""

from __future__ import annotations

import math

from idx_analyzer.config import TradingPlanSettings, get_settings
from idx_analyzer.models.technicals import TradeSignal, TrendLabel
from idx_analyzer.models.trading_plan import (
    BrokerTargets,
    EntryPlan,
    PositionSizing,
    RiskReward,
    RRQuality,
    StopLoss,
    TakeProfitLevel,
    TradingPlanResult,
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def tick_size(price: float, settings: TradingPlanSettings | None = None) -> int:
    """IDX price fraction ("fraksi") for a price level."""
    settings = settings or get_settings().trading_plan
    for upper, tick in settings.tick_schedule:
        if price < upper:
            return int(tick)
    return settings.top_tick


def round_to_tick(price: float, tick: int) -> float:
    """Nearest multiple of ``tick``, halves rounding up."""
    return float(_round_half_up(price / tick) * tick)


def floor_to_tick(price: float, tick: int) -> float:
    return float(math.floor(price / tick) * tick)


def format_rupiah(value: float) -> str:
    """``1234567`` -> ``"1.234.567"`` (IDR grouping: dot thousands, comma decimals)."""
    text = f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"
    return text.translate(str.maketrans(",.", ".,"))


def compute_stop_loss(
    price: float,
    atr: float | None,
    tick: int,
    max_loss_pct: float,
    atr_multiple: float = 2.0,
) -> StopLoss:
    """Tighter of a percentage stop and an ATR stop, floored to the tick grid.

    Never below one tick.
    """
    pct_based = price * (1 - max_loss_pct / 100)
    use_atr = atr is not None and atr > 0
    atr_based = price - atr_multiple * atr if use_atr else price
    stop = max(floor_to_tick(max(pct_based, atr_based), tick), float(tick))
    return StopLoss(
        price=stop,
        percent_loss=(price - stop) / price * 100,
        method=f"ATR-based ({atr_multiple:g}x)" if use_atr else "Percentage-based",
    )


def rr_quality(
    rr_tp1: float, rr_tp2: float, settings: TradingPlanSettings | None = None
) -> RRQuality:
    settings = settings or get_settings().trading_plan
    if rr_tp1 >= settings.good_rr_tp1 and rr_tp2 >= settings.good_rr_tp2:
        return RRQuality.GOOD
    if rr_tp1 < settings.poor_rr_tp1 or rr_tp2 < settings.poor_rr_tp2:
        return RRQuality.POOR
    return RRQuality.FAIR


def compute_position_sizing(
    price: float,
    risk_per_share: float,
    account_size: float,
    risk_percent: float,
    shares_per_lot: int = 100,
) -> PositionSizing | None:
    """Whole-lot position sized to the account's risk budget (minimum one lot).

    None without a positive account size and a positive risk per share.
    """
    if account_size <= 0 or risk_per_share <= 0:
        return None
    max_risk = account_size * risk_percent / 100
    max_shares = math.floor(max_risk / risk_per_share)
    lots = max(max_shares // shares_per_lot, 1)
    shares = lots * shares_per_lot
    position_value = shares * price
    return PositionSizing(
        account_size=account_size,
        max_risk_amount=max_risk,
        suggested_lots=lots,
        suggested_shares=shares,
        position_value=position_value,
        percent_of_account=position_value / account_size * 100,
    )


def build_trading_plan(
    ticker: str,
    price: float,
    target_realistic: float,
    target_max: float,
    atr: float | None = None,
    account_size: float | None = None,
    risk_percent: float | None = None,
    trend: TrendLabel = TrendLabel.BULLISH,
    signal: TradeSignal = TradeSignal.BUY,
    settings: TradingPlanSettings | None = None,
) -> TradingPlanResult:
    """Entry, stop, three take-profits, risk/reward and sizing for a long entry.

    Raises:
        ValueError: If ``price`` is not positive.
    """
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")
    settings = settings or get_settings().trading_plan
    account_size = settings.default_account_size if account_size is None else account_size
    risk_percent = settings.default_risk_pct if risk_percent is None else risk_percent

    tick = tick_size(price, settings)
    target_gain_pct = (target_realistic - price) / price * 100
    stop = compute_stop_loss(
        price, atr, tick,
        min(settings.max_stop_pct, target_gain_pct),
        settings.atr_stop_multiple,
    )

    tp1 = round_to_tick(target_realistic, tick)
    tp2 = round_to_tick(target_max, tick)
    tp3 = round_to_tick(price + (target_max - price) * settings.tp3_extension, tick)
    take_profit = [
        TakeProfitLevel(price=tp, percent_gain=(tp - price) / price * 100, label=label)
        for tp, label in (
            (tp1, "TP1 (Conservative)"),
            (tp2, "TP2 (Moderate)"),
            (tp3, "TP3 (Aggressive)"),
        )
    ]

    risk_per_share = price - stop.price
    reward_tp1 = tp1 - price
    reward_tp2 = tp2 - price
    rr_tp1 = reward_tp1 / risk_per_share if risk_per_share > 0 else 0.0
    rr_tp2 = reward_tp2 / risk_per_share if risk_per_share > 0 else 0.0

    execution_strategy = [
        f"1. Entry: Buy at market or limit Rp {format_rupiah(price)}",
        f"2. Set stop loss immediately at Rp {format_rupiah(stop.price)}",
        f"3. TP1: Sell 50% position at Rp {format_rupiah(tp1)}",
        "4. After TP1 hit: Move SL to breakeven",
        f"5. TP2: Sell remaining 50% at Rp {format_rupiah(tp2)}",
    ]

    return TradingPlanResult(
        ticker=ticker,
        tick_size=tick,
        atr=atr,
        entry=EntryPlan(price=price, trend=trend, signal=signal),
        take_profit=take_profit,
        stop_loss=stop,
        risk_reward=RiskReward(
            risk_per_share=risk_per_share,
            reward_tp1=reward_tp1,
            reward_tp2=reward_tp2,
            rr_to_tp1=rr_tp1,
            rr_to_tp2=rr_tp2,
            quality=rr_quality(rr_tp1, rr_tp2, settings),
        ),
        position_sizing=compute_position_sizing(
            price, risk_per_share, account_size, risk_percent, settings.shares_per_lot,
        ),
        execution_strategy=execution_strategy,
    )


def compute_broker_targets(
    broker_avg_price: float,
    broker_volume: float,
    ara: float,
    arb: float,
    total_bid: float,
    total_offer: float,
    price: float,
    settings: TradingPlanSettings | None = None,
) -> BrokerTargets:
    """Targets from how far the dominant broker's holdings can lift the book.

    ``ara``/``arb`` are the day's auto-reject upper/lower prices; the span
    between them, in ticks, is the number of boards. The broker's holdings
    divided by the average queued volume per board is how many boards the
    holdings could absorb: half of that above a 5% markup is the realistic
    target, all of it is the max target.

    Raises:
        ValueError: If the auto-reject span or the order book is empty.
    """
    tick = tick_size(price, settings)
    total_boards = (ara - arb) / tick
    if total_boards <= 0:
        raise ValueError(f"ARA ({ara}) must be above ARB ({arb})")
    avg_bid_offer = (total_bid + total_offer) / total_boards
    if avg_bid_offer <= 0:
        raise ValueError("total bid and offer volume must be positive")

    markup = broker_avg_price * 0.05
    boards = broker_volume / avg_bid_offer
    return BrokerTargets(
        tick_size=tick,
        total_boards=_round_half_up(total_boards),
        avg_bid_offer=_round_half_up(avg_bid_offer),
        markup=_round_half_up(markup),
        boards_to_absorb=_round_half_up(boards),
        target_realistic=_round_half_up(broker_avg_price + markup + boards / 2 * tick),
        target_max=_round_half_up(broker_avg_price + markup + boards * tick),
    )
