"""Screen IDX stocks, check trend templates, read broker flow, build trading plans.

Usage (after pip install):
    idx-screen screen --preset oversold
    idx-screen screen --universe idx80 --preset momentum
    idx-screen trend --tickers BBCA BBRI TLKM --min-score 7
    idx-screen bandar BBRI --flows bbri_flows.yaml --days 10
    idx-screen plan BBRI --price 4500 --target 4900 --target-max 5300
    idx-screen targets --avg 4400 --volume 250000 --ara 5600 --arb 3850 \
        --bid 900000 --offer 1100000 --price 4500
"""

import argparse
import logging
from datetime import date

from tabulate import tabulate

from idx_analyzer.broker.base import StaticBrokerFlowProvider
from idx_analyzer.config import get_settings, get_universe, load_yaml
from idx_analyzer.data.sectors import StaticSectorProvider
from idx_analyzer.data.service import DataService
from idx_analyzer.models.data import DailyBrokerFlow
from idx_analyzer.models.screening import ScreenerPreset
from idx_analyzer.models.trading_plan import TradingPlanInput
from idx_analyzer.service.analyzer import IDXAnalyzer


def _tickers(args: argparse.Namespace) -> list[str]:
    return args.tickers or get_universe(args.universe)


def _print_skipped(skipped) -> None:
    if skipped:
        print(f"\nSkipped {len(skipped)}: " + ", ".join(
            f"{s.unit} ({s.reason})" for s in skipped
        ))


def _cmd_screen(ia: IDXAnalyzer, args: argparse.Namespace) -> None:
    result = ia.run_screener(_tickers(args), args.preset)
    print(result.summary)
    if result.stocks:
        rows = [{
            "Ticker": s.ticker,
            "Price": f"{s.price:,.0f}",
            "RSI": f"{s.rsi:.1f}" if s.rsi is not None else "-",
            "MACD": s.macd_signal.value,
            "Trend": s.trend.value,
            "Signal": s.signal.value.upper(),
            "Score": s.score,
        } for s in result.stocks[: args.top]]
        print(tabulate(rows, headers="keys", tablefmt="simple", stralign="right"))
    _print_skipped(result.skipped)


def _cmd_trend(ia: IDXAnalyzer, args: argparse.Namespace) -> None:
    result = ia.scan_trend_template(_tickers(args), args.min_score)
    print(result.summary)
    if result.results:
        rows = [{
            "Ticker": r.ticker,
            "Sector": r.sector,
            "Price": f"{r.price:,.0f}",
            "Score": f"{r.score}/8",
            "RS": f"{r.rs:.1f}",
            "52W High": f"{r.week_52_high:,.0f}",
            "52W Low": f"{r.week_52_low:,.0f}",
            "Stage": r.stage.stage.label if r.stage else "-",
        } for r in result.results[: args.top]]
        print(tabulate(rows, headers="keys", tablefmt="simple", stralign="right"))
    _print_skipped(result.skipped)


def _load_flows(path: str, ticker: str) -> StaticBrokerFlowProvider:
    raw = load_yaml(path)
    flows = [DailyBrokerFlow(**entry) for entry in raw.get("flows", [])]
    return StaticBrokerFlowProvider({ticker: flows})


def _cmd_bandar(ia: IDXAnalyzer, args: argparse.Namespace) -> None:
    ia.bandarmology.flow_provider = _load_flows(args.flows, args.ticker)
    result = ia.bandarmology.analyze(args.ticker, args.days, end_date=args.end_date)
    print(f"{result.ticker}: {result.period.start} .. {result.period.end} ({result.period.days} days)")
    print(f"  Momentum:      {result.momentum_score:.2f} ({result.momentum_signal.value.upper()})")
    print(f"  Phase:         {result.phase.value}")
    print(f"  Acc days:      {result.accumulation_days}")
    print(f"  Smart money:   {result.smart_money_net:,.0f}")
    print(f"  Retail:        {result.retail_net:,.0f}")
    rows = [
        {"Category": cat.value, "Share %": f"{pct:.1f}"}
        for cat, pct in result.broker_composition.items()
    ]
    print(tabulate(rows, headers="keys", tablefmt="simple", stralign="right"))
    for alert in result.pattern_alerts:
        print(f"  ! {alert}")
    print(result.recommendation)
    _print_skipped(result.skipped_days)


def _cmd_plan(ia: IDXAnalyzer, args: argparse.Namespace) -> None:
    plan = ia.generate_trading_plan(TradingPlanInput(
        ticker=args.ticker,
        current_price=args.price,
        target_realistic=args.target,
        target_max=args.target_max,
        atr=args.atr,
        account_size=args.account,
        risk_percent=args.risk,
    ))
    atr = f"{plan.atr:.1f}" if plan.atr is not None else "-"
    print(f"{plan.ticker}: entry {plan.entry.price:,.0f} | tick {plan.tick_size} | ATR {atr}")
    rows = [{"Level": "SL", "Price": f"{plan.stop_loss.price:,.0f}",
             "Change %": f"-{plan.stop_loss.percent_loss:.2f}", "Note": plan.stop_loss.method}]
    rows += [{"Level": tp.label, "Price": f"{tp.price:,.0f}",
              "Change %": f"+{tp.percent_gain:.2f}", "Note": ""} for tp in plan.take_profit]
    print(tabulate(rows, headers="keys", tablefmt="simple", stralign="right"))
    rr = plan.risk_reward
    print(f"\nR:R TP1 {rr.rr_to_tp1:.2f} | TP2 {rr.rr_to_tp2:.2f} | quality {rr.quality.value.upper()}")
    if plan.position_sizing is not None:
        ps = plan.position_sizing
        print(f"Size: {ps.suggested_lots} lots ({ps.suggested_shares} shares), "
              f"{ps.position_value:,.0f} = {ps.percent_of_account:.1f}% of account")
    print()
    for step in plan.execution_strategy:
        print(step)


def _cmd_targets(ia: IDXAnalyzer, args: argparse.Namespace) -> None:
    t = ia.compute_broker_targets(
        args.avg, args.volume, args.ara, args.arb, args.bid, args.offer, args.price,
    )
    print(tabulate([t.model_dump()], headers="keys", tablefmt="simple", stralign="right"))


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="IDX stock screening and analysis")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def universe_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--tickers", nargs="+", default=None, help="Explicit ticker list")
        p.add_argument(
            "--universe",
            choices=sorted(settings.universes),
            default=settings.screening.default_universe,
            help=f"Named universe (default: {settings.screening.default_universe})",
        )
        p.add_argument("--top", type=int, default=20, help="Rows to show (default: 20)")

    p_screen = sub.add_parser("screen", help="Preset technical screen")
    universe_args(p_screen)
    p_screen.add_argument(
        "--preset", choices=[p.value for p in ScreenerPreset], default="oversold",
    )

    p_trend = sub.add_parser("trend", help="Trend template screen with sector RS")
    universe_args(p_trend)
    p_trend.add_argument("--min-score", type=int, default=settings.screening.min_trend_score)

    p_bandar = sub.add_parser("bandar", help="Broker flow analysis from a flow file")
    p_bandar.add_argument("ticker")
    p_bandar.add_argument("--flows", required=True, help="YAML file with a 'flows' list")
    p_bandar.add_argument("--days", type=int, default=settings.bandarmology.default_days)
    p_bandar.add_argument("--end-date", type=date.fromisoformat, default=None)

    p_plan = sub.add_parser("plan", help="Trading plan for one stock")
    p_plan.add_argument("ticker")
    p_plan.add_argument("--price", type=float, required=True)
    p_plan.add_argument("--target", type=float, required=True, help="Realistic target")
    p_plan.add_argument("--target-max", type=float, required=True)
    p_plan.add_argument("--atr", type=float, default=None)
    p_plan.add_argument("--account", type=float, default=None)
    p_plan.add_argument("--risk", type=float, default=None, help="Risk percent per trade")

    p_targets = sub.add_parser("targets", help="Broker-based price targets")
    for name in ("avg", "volume", "ara", "arb", "bid", "offer", "price"):
        p_targets.add_argument(f"--{name}", type=float, required=True)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    data_service = DataService() if args.command in ("screen", "trend", "plan") else None
    ia = IDXAnalyzer(
        data_service=data_service,
        sector_provider=StaticSectorProvider.from_yaml(),
    )

    commands = {
        "screen": _cmd_screen,
        "trend": _cmd_trend,
        "bandar": _cmd_bandar,
        "plan": _cmd_plan,
        "targets": _cmd_targets,
    }
    try:
        commands[args.command](ia, args)
    except ValueError as e:
        print(f"ERROR: {e}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
