"""Profit/loss simulation for a long option position.

Two 1-D sweeps over the pricing kernel, both anchored on the premium
paid:

* price axis: P&L against hypothetical underlying prices at fixed time;
* time axis: P&L against days remaining at fixed underlying price;

plus the closed-form breakeven / max-profit / max-loss metrics and a
one-shot position summary.

Every entry point gates its numeric inputs first and returns an empty
``SimulationSeries`` (or ``None``) instead of letting NaN or infinity
reach a chart.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from . import black_scholes as bs
from .black_scholes_vec import bs_price_vec
from .config import (
    CONTRACT_MULTIPLIER,
    DAILY_STEP_THRESHOLD,
    DAYS_PER_YEAR,
    DEFAULT_DIVIDEND_YIELD,
    DEFAULT_PRICE_RANGE,
    DEFAULT_RISK_FREE_RATE,
    PRICE_SWEEP_POINTS,
    TIME_SWEEP_STEPS,
)
from .core import (
    CALL, MarketState, Position, SimulationPoint, SimulationSeries, check_kind, is_count,
)

logger = logging.getLogger(__name__)

__all__ = [
    "calculate_profit_loss",
    "generate_pnl_simulation",
    "time_decay_days",
    "generate_time_decay_simulation",
    "calculate_breakeven",
    "calculate_max_profit_loss",
    "PositionSummary",
    "position_summary",
    "simulate_price_axis",
    "simulate_time_axis",
]


# ---------------------------------------------------------------------------
# Input gate
# ---------------------------------------------------------------------------

def _valid_inputs(S, K, premium, T, sigma, r=0.0, q=0.0,
                  num_contracts=1, multiplier=CONTRACT_MULTIPLIER) -> bool:
    """True when the kernel can be called without producing 0/0 or log(<=0).

    ``sigma <= 0`` is only tolerated when ``T == 0`` (intrinsic branch).
    Contract count and multiplier must be whole numbers >= 1.
    """
    for name, value in (("num_contracts", num_contracts), ("multiplier", multiplier)):
        if not is_count(value):
            logger.debug("rejecting simulation input: %s=%r must be an integer >= 1",
                         name, value)
            return False
    values = {"S": S, "K": K, "premium": premium, "T": T,
              "sigma": sigma, "r": r, "q": q}
    for name, value in values.items():
        if value is None or not math.isfinite(value):
            logger.debug("rejecting simulation input: %s=%r", name, value)
            return False
    for name in ("S", "K", "premium"):
        if values[name] <= 0:
            logger.debug("rejecting simulation input: %s=%r must be > 0", name, values[name])
            return False
    if T < 0:
        logger.debug("rejecting simulation input: T=%r is negative", T)
        return False
    if T > 0 and sigma <= 0:
        logger.debug("rejecting simulation input: sigma=%r with T=%r", sigma, T)
        return False
    return True


# ---------------------------------------------------------------------------
# P&L
# ---------------------------------------------------------------------------

def calculate_profit_loss(
    new_price: float,
    premium: float,
    num_contracts: int = 1,
    multiplier: int = CONTRACT_MULTIPLIER,
) -> tuple[float, float]:
    """Dollar and percent P&L of re-marking a long option at ``new_price``.

    Returns
    -------
    (dollar_pnl, percent_pnl)

    Raises
    ------
    ValueError
        If ``premium <= 0``: percent P&L has no meaning without a cost basis.
    """
    if not premium > 0:
        raise ValueError(f"premium must be positive, got {premium}")
    change = new_price - premium
    return change * multiplier * num_contracts, change / premium * 100.0


def _years(days):
    if days is None or isinstance(days, bool):
        return None
    return days / DAYS_PER_YEAR


def _pnl_arrays(prices: np.ndarray, premium, scale):
    change = prices - premium
    return change * scale, change / premium * 100.0


# ---------------------------------------------------------------------------
# Price-axis sweep
# ---------------------------------------------------------------------------

def generate_pnl_simulation(
    S: float,
    K: float,
    premium: float,
    T: float,
    sigma: float,
    kind: str = CALL,
    r: float = DEFAULT_RISK_FREE_RATE,
    q: float = DEFAULT_DIVIDEND_YIELD,
    num_contracts: int = 1,
    price_range: float = DEFAULT_PRICE_RANGE,
    multiplier: int = CONTRACT_MULTIPLIER,
) -> SimulationSeries:
    """P&L across hypothetical underlying prices, time held at ``T`` years.

    Prices are ``PRICE_SWEEP_POINTS`` evenly spaced values spanning
    ``[S*(1-price_range), S*(1+price_range)]`` inclusive, increasing.
    """
    check_kind(kind)
    empty = SimulationSeries("price")
    if not _valid_inputs(S, K, premium, T, sigma, r, q, num_contracts, multiplier):
        return empty
    if not (math.isfinite(price_range) and 0 < price_range < 1):
        logger.debug("rejecting price_range=%r, expected 0 < range < 1", price_range)
        return empty

    stock = np.linspace(S * (1 - price_range), S * (1 + price_range), PRICE_SWEEP_POINTS)
    opt_px = bs_price_vec(stock, K, T, r, q, sigma, kind)
    dollar, percent = _pnl_arrays(opt_px, premium, multiplier * num_contracts)
    change = (stock - S) / S * 100.0
    days = T * DAYS_PER_YEAR

    points = tuple(
        SimulationPoint(
            stock_price=float(stock[i]),
            days_to_expiry=days,
            option_price=float(opt_px[i]),
            dollar_pnl=float(dollar[i]),
            percent_pnl=float(percent[i]),
            price_change_percent=float(change[i]),
        )
        for i in range(len(stock))
    )
    return SimulationSeries("price", points)


# ---------------------------------------------------------------------------
# Time-axis sweep
# ---------------------------------------------------------------------------

def time_decay_days(current_days: float) -> list[float]:
    """Days-remaining schedule from ``current_days`` down to expiry.

    Daily steps up to ``DAILY_STEP_THRESHOLD`` days; beyond that,
    ``ceil(current_days / TIME_SWEEP_STEPS)``-day steps.  Always ends at 0.
    Fractional day counts step down from the fraction (12.5, 11.5, ...,
    0.5) before the final 0.
    """
    if not (math.isfinite(current_days) and current_days >= 0):
        return []
    if current_days > DAILY_STEP_THRESHOLD:
        step = math.ceil(current_days / TIME_SWEEP_STEPS)
    else:
        step = 1
    n_steps = math.floor(current_days / step)
    days = [current_days - i * step for i in range(n_steps + 1)]
    if days[-1] != 0:
        days.append(0)
    return days


def generate_time_decay_simulation(
    S: float,
    K: float,
    premium: float,
    current_days: float,
    sigma: float,
    kind: str = CALL,
    r: float = DEFAULT_RISK_FREE_RATE,
    q: float = DEFAULT_DIVIDEND_YIELD,
    num_contracts: int = 1,
    multiplier: int = CONTRACT_MULTIPLIER,
) -> SimulationSeries:
    """P&L as the option decays from ``current_days`` to expiry at spot ``S``.

    ``current_days`` may be fractional.  Points run from today (index 0)
    to expiry (last, ``days_to_expiry == 0``).
    """
    check_kind(kind)
    empty = SimulationSeries("days")
    if not _valid_inputs(S, K, premium, _years(current_days), sigma, r, q,
                         num_contracts, multiplier):
        return empty

    days = np.array(time_decay_days(current_days), dtype=float)
    opt_px = bs_price_vec(S, K, days / DAYS_PER_YEAR, r, q, sigma, kind)
    dollar, percent = _pnl_arrays(opt_px, premium, multiplier * num_contracts)

    points = [
        SimulationPoint(
            stock_price=float(S),
            days_to_expiry=float(days[i]),
            option_price=float(opt_px[i]),
            dollar_pnl=float(dollar[i]),
            percent_pnl=float(percent[i]),
        )
        for i in range(len(days))
    ]
    points.sort(key=lambda p: p.days_to_expiry, reverse=True)
    return SimulationSeries("days", tuple(points))


# ---------------------------------------------------------------------------
# Closed-form metrics
# ---------------------------------------------------------------------------

def calculate_breakeven(K: float, premium: float, kind: str = CALL) -> float:
    """Underlying price at which the position nets zero at expiry."""
    if check_kind(kind) == CALL:
        return K + premium
    return K - premium


def calculate_max_profit_loss(
    K: float,
    premium: float,
    kind: str = CALL,
    num_contracts: int = 1,
    multiplier: int = CONTRACT_MULTIPLIER,
) -> tuple[float, float]:
    """(max_profit, max_loss) for a long option held to expiry.

    Loss is capped at the premium.  A call's upside is unbounded and is
    reported as ``math.inf``; a put's is capped at the underlying going
    to zero.
    """
    scale = multiplier * num_contracts
    max_loss = -premium * scale
    if check_kind(kind) == CALL:
        max_profit = math.inf
    else:
        max_profit = (K - premium) * scale
    return max_profit, max_loss


# ---------------------------------------------------------------------------
# Position-level convenience
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PositionSummary:
    theoretical_value: float
    dollar_pnl: float
    percent_pnl: float
    greeks: dict
    breakeven: float
    max_profit: float
    max_loss: float


def position_summary(market: MarketState, position: Position) -> Optional[PositionSummary]:
    """Mark the position at today's spot and collect its headline metrics.

    Returns ``None`` when the inputs cannot be priced.
    """
    c = position.contract
    if not _valid_inputs(market.spot, c.K, position.premium, c.T, c.sigma,
                         market.rate, market.q, position.num_contracts, position.multiplier):
        return None

    value = bs.price(market.spot, c.K, c.T, market.rate, market.q, c.sigma, c.kind)
    dollar, percent = calculate_profit_loss(
        value, position.premium, position.num_contracts, position.multiplier
    )
    max_profit, max_loss = calculate_max_profit_loss(
        c.K, position.premium, c.kind, position.num_contracts, position.multiplier
    )
    return PositionSummary(
        theoretical_value=value,
        dollar_pnl=dollar,
        percent_pnl=percent,
        greeks=bs.greeks(market.spot, c.K, c.T, market.rate, market.q, c.sigma, c.kind),
        breakeven=calculate_breakeven(c.K, position.premium, c.kind),
        max_profit=max_profit,
        max_loss=max_loss,
    )


def simulate_price_axis(
    market: MarketState,
    position: Position,
    price_range: float = DEFAULT_PRICE_RANGE,
) -> SimulationSeries:
    c = position.contract
    return generate_pnl_simulation(
        market.spot, c.K, position.premium, c.T, c.sigma, c.kind,
        r=market.rate, q=market.q,
        num_contracts=position.num_contracts,
        price_range=price_range,
        multiplier=position.multiplier,
    )


def simulate_time_axis(
    market: MarketState,
    position: Position,
    current_days: Optional[float] = None,
) -> SimulationSeries:
    """Time sweep of ``position``; ``current_days`` overrides ``contract.T``."""
    c = position.contract
    if current_days is None:
        current_days = position.days_to_expiry
    return generate_time_decay_simulation(
        market.spot, c.K, position.premium, current_days, c.sigma, c.kind,
        r=market.rate, q=market.q,
        num_contracts=position.num_contracts,
        multiplier=position.multiplier,
    )
