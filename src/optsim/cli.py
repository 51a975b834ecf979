import argparse
import json
import logging
import math
import sys

from . import black_scholes as bs
from .config import (
    DAYS_PER_YEAR, DEFAULT_OTM_PERCENTAGE, DEFAULT_PRICE_RANGE, DEFAULT_RISK_FREE_RATE,
)
from .core import CALL, PUT, ContractSpec, MarketState, Position
from .daycount import days_to_expiry
from .heatmap import build_pnl_heatmap
from .simulation import position_summary, simulate_price_axis, simulate_time_axis

logger = logging.getLogger("optsim")


def _kind(s: str):
    s = s.lower()
    if s in {"call", "c"}:
        return CALL
    if s in {"put", "p"}:
        return PUT
    raise argparse.ArgumentTypeError("kind must be 'call' or 'put'")


def _strikes(s: str):
    try:
        return [float(k) for k in s.split(",") if k.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError("strikes must be comma-separated numbers")


def add_common(parser: argparse.ArgumentParser):
    parser.add_argument("--S", type=float, required=True, help="spot")
    parser.add_argument("--K", type=float, required=True, help="strike")
    parser.add_argument("--sigma", type=float, required=True, help="implied vol, decimal")
    parser.add_argument("--r", type=float, default=DEFAULT_RISK_FREE_RATE, help="cont. risk-free")
    parser.add_argument("--q", type=float, default=0.0, help="cont. dividend yield")
    parser.add_argument("--kind", type=_kind, default=CALL, help="call|put")
    when = parser.add_mutually_exclusive_group(required=True)
    when.add_argument("--days", type=int, help="calendar days to expiry")
    when.add_argument("--expiration", help="expiration date, YYYY-MM-DD")


def add_position(parser: argparse.ArgumentParser):
    parser.add_argument("--premium", type=float, required=True, help="premium paid per share")
    parser.add_argument("--contracts", type=int, default=1)
    parser.add_argument("--multiplier", type=int, default=100)


def _days(args) -> int:
    if args.days is not None:
        return args.days
    return days_to_expiry(args.expiration)


def _market(args) -> MarketState:
    return MarketState(spot=args.S, rate=args.r, q=args.q)


def _position(args, days: int) -> Position:
    contract = ContractSpec(K=args.K, kind=args.kind, sigma=args.sigma, T=days / DAYS_PER_YEAR)
    return Position(contract, args.premium, args.contracts, args.multiplier)


def _emit(args, payload):
    if args.json:
        print(json.dumps(payload, indent=2, default=str))
        return True
    return False


def _no_data(what: str) -> int:
    print(f"No {what}: inputs incomplete or invalid.")
    return 1


def cmd_price(args):
    days = _days(args)
    T = ContractSpec(K=args.K, kind=args.kind, sigma=args.sigma, T=days / DAYS_PER_YEAR).T
    if not (args.S > 0 and args.K > 0) or (T > 0 and not args.sigma > 0):
        return _no_data("price")
    px = bs.price(args.S, args.K, T, args.r, args.q, args.sigma, args.kind)
    g = bs.greeks(args.S, args.K, T, args.r, args.q, args.sigma, args.kind)
    if not _emit(args, {"price": px, "days": days, **g}):
        print(f"{px:.10f}")
        for key, val in g.items():
            print(f"  {key:<6} {val: .6f}")
    return 0


def cmd_summary(args):
    days = _days(args)
    summary = position_summary(_market(args), _position(args, days))
    if summary is None:
        return _no_data("summary")
    payload = {
        "theoretical_value": summary.theoretical_value,
        "dollar_pnl": summary.dollar_pnl,
        "percent_pnl": summary.percent_pnl,
        "breakeven": summary.breakeven,
        "max_profit": summary.max_profit if math.isfinite(summary.max_profit) else "unlimited",
        "max_loss": summary.max_loss,
        **summary.greeks,
    }
    if not _emit(args, payload):
        for key, val in payload.items():
            print(f"{key:<18} {val}")
    return 0


def cmd_sweep(args):
    series = simulate_price_axis(_market(args), _position(args, _days(args)), args.range)
    if not series:
        return _no_data("price sweep")
    rows = [
        {"stock_price": p.stock_price, "option_price": p.option_price,
         "dollar_pnl": p.dollar_pnl, "percent_pnl": p.percent_pnl,
         "price_change_percent": p.price_change_percent}
        for p in series
    ]
    if not _emit(args, rows):
        print(f"{'stock':>10} {'option':>10} {'P&L $':>12} {'P&L %':>9}")
        for p in series:
            print(f"{p.stock_price:>10.2f} {p.option_price:>10.4f} "
                  f"{p.dollar_pnl:>12.2f} {p.percent_pnl:>8.1f}%")
    return 0


def cmd_decay(args):
    days = _days(args)
    series = simulate_time_axis(_market(args), _position(args, days), days)
    if not series:
        return _no_data("time-decay sweep")
    rows = [
        {"days_to_expiry": p.days_to_expiry, "option_price": p.option_price,
         "dollar_pnl": p.dollar_pnl, "percent_pnl": p.percent_pnl}
        for p in series
    ]
    if not _emit(args, rows):
        print(f"{'days':>6} {'option':>10} {'P&L $':>12} {'P&L %':>9}")
        for p in series:
            print(f"{p.days_to_expiry:>6.0f} {p.option_price:>10.4f} "
                  f"{p.dollar_pnl:>12.2f} {p.percent_pnl:>8.1f}%")
    return 0


def cmd_heatmap(args):
    days = _days(args)
    grid = build_pnl_heatmap(
        _market(args), _position(args, days), args.strikes, days,
        otm_percentage=args.otm,
    )
    if grid is None:
        return _no_data("heat-map")
    arrays = grid.to_arrays()
    payload = {
        "baseline_price": grid.baseline_price,
        "atm_strike": grid.atm_strike,
        "strikes": list(grid.strikes),
        "columns": [c.label for c in grid.columns],
        "dollar_pnl": arrays["dollar_pnl"].tolist(),
        "percent_pnl": arrays["percent_pnl"].tolist(),
        "band": arrays["band"].tolist(),
    }
    if not _emit(args, payload):
        print(f"{'price':>10} " + " ".join(f"{c.label:>9}" for c in grid.columns))
        for i, k in enumerate(grid.strikes):
            mark = "*" if k == grid.atm_strike else " "
            cells = " ".join(f"{grid.cell(i, j).point.dollar_pnl:>9.0f}"
                             for j in range(len(grid.columns)))
            print(f"{k:>9.2f}{mark} {cells}")
    return 0


def main(argv=None):
    p = argparse.ArgumentParser(prog="optsim", description="Option P&L simulation CLI")
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--json", action="store_true", help="emit JSON instead of a table")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_px = sub.add_parser("price", help="Black-Scholes price and Greeks")
    add_common(p_px)
    p_px.set_defaults(func=cmd_price)

    p_sum = sub.add_parser("summary", help="position value, P&L and limits")
    add_common(p_sum)
    add_position(p_sum)
    p_sum.set_defaults(func=cmd_summary)

    p_sw = sub.add_parser("sweep", help="P&L vs underlying price")
    add_common(p_sw)
    add_position(p_sw)
    p_sw.add_argument("--range", type=float, default=DEFAULT_PRICE_RANGE,
                      help="fraction of spot either side (default 0.5)")
    p_sw.set_defaults(func=cmd_sweep)

    p_dc = sub.add_parser("decay", help="P&L vs days remaining")
    add_common(p_dc)
    add_position(p_dc)
    p_dc.set_defaults(func=cmd_decay)

    p_hm = sub.add_parser("heatmap", help="P&L grid: strike ladder x days")
    add_common(p_hm)
    add_position(p_hm)
    p_hm.add_argument("--strikes", type=_strikes, required=True,
                      help="comma-separated strike ladder")
    p_hm.add_argument("--otm", type=float, default=DEFAULT_OTM_PERCENTAGE,
                      help="row band, percent of spot")
    p_hm.set_defaults(func=cmd_heatmap)

    args = p.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return args.func(args)
    except ValueError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
