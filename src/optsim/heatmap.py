"""Price x time P&L heat-map for a held option.

Rows are hypothetical underlying prices taken from a strike ladder,
columns are days-remaining milestones down to expiry.  Every cell
re-prices the *held* contract at the row's price and the column's days,
and reports P&L against the held contract's theoretical value today
(not against the premium paid).  This "what would change" P&L is
deliberately distinct from the premium-anchored P&L of
``simulation.generate_pnl_simulation``.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence

import numpy as np

from . import black_scholes as bs
from .black_scholes_vec import bs_price_vec
from .config import (
    DAYS_PER_YEAR,
    DEFAULT_OTM_PERCENTAGE,
    EXPIRY_LABEL,
    FALLBACK_STRIKE_COUNT,
    MAX_HEATMAP_COLUMNS,
)
from .core import (
    HeatmapCell, MarketState, Position, SimulationGrid, SimulationPoint, TimeColumn,
)
from .simulation import _valid_inputs, _years

logger = logging.getLogger(__name__)

__all__ = [
    "PNL_BAND_THRESHOLDS",
    "heatmap_time_columns",
    "heatmap_strikes",
    "atm_strike",
    "classify_pnl",
    "build_pnl_heatmap",
]

# |percent P&L| lower bounds of bands 4..1; band 5 is >= 100, band 1 is > 0.
PNL_BAND_THRESHOLDS = (100.0, 50.0, 25.0, 10.0)


# ---------------------------------------------------------------------------
# Column policy
# ---------------------------------------------------------------------------

def _milestones(max_days: int, fractions: Sequence[float], fixed: Sequence[int]) -> list[int]:
    candidates = [max_days] + [math.floor(max_days * f) for f in fractions] + list(fixed)
    return sorted({d for d in candidates if d > 0}, reverse=True)


def heatmap_time_columns(max_days: int) -> list[TimeColumn]:
    """Days-remaining columns for an expiration ``max_days`` away.

    * ``<= 7`` days: every day, then expiry.
    * ``<= 30`` days: 80/60/40/20% of ``max_days`` plus 7, 3 and 1 days,
      then expiry.
    * ``> 30`` days: 75/50/25% of ``max_days`` plus 30, 14, 7, 3 and 1 days,
      keeping the first seven, then expiry.

    Columns run from most to fewest days; the last is always ``Exp`` (0).
    """
    if not (math.isfinite(max_days) and max_days >= 0):
        return []
    max_days = int(max_days)
    if max_days <= 7:
        days = list(range(max_days, 0, -1))
    elif max_days <= 30:
        days = _milestones(max_days, (0.8, 0.6, 0.4, 0.2), (7, 3, 1))
    else:
        days = _milestones(max_days, (0.75, 0.5, 0.25), (30, 14, 7, 3, 1))
        days = days[:MAX_HEATMAP_COLUMNS - 1]
    columns = [TimeColumn(d, f"{d}d") for d in days]
    columns.append(TimeColumn(0, EXPIRY_LABEL))
    return columns


# ---------------------------------------------------------------------------
# Row policy
# ---------------------------------------------------------------------------

def heatmap_strikes(
    strikes: Iterable[float],
    spot: float,
    otm_percentage: float = DEFAULT_OTM_PERCENTAGE,
) -> list[float]:
    """Strike ladder within ``+/- otm_percentage`` % of ``spot``, high to low.

    If nothing falls inside the band, the ``FALLBACK_STRIKE_COUNT`` strikes
    nearest to spot are used instead.  Non-positive or non-finite strikes
    are dropped.
    """
    ladder = sorted({float(k) for k in strikes if math.isfinite(k) and k > 0}, reverse=True)
    if not ladder or not spot > 0:
        return ladder

    band = otm_percentage / 100.0
    lower, upper = spot * (1 - band), spot * (1 + band)
    inside = [k for k in ladder if lower <= k <= upper]
    if inside:
        return inside

    nearest = sorted(ladder, key=lambda k: abs(k - spot))[:FALLBACK_STRIKE_COUNT]
    logger.debug("no strikes within %.1f%% of %.2f, using %d nearest",
                 otm_percentage, spot, len(nearest))
    return sorted(nearest, reverse=True)


def atm_strike(strikes: Sequence[float], spot: float) -> Optional[float]:
    """Strike closest to spot (first one wins a tie)."""
    if len(strikes) == 0 or not spot > 0:
        return None
    best = strikes[0]
    for k in strikes[1:]:
        if abs(k - spot) < abs(best - spot):
            best = k
    return best


# ---------------------------------------------------------------------------
# Cell severity
# ---------------------------------------------------------------------------

def classify_pnl(percent_pnl: float) -> int:
    """Signed severity band of a percent P&L.

    ``5``: >= 100%, ``4``: >= 50%, ``3``: >= 25%, ``2``: >= 10%,
    ``1``: > 0%, ``0``: flat.  Losses mirror with negative bands.
    """
    if percent_pnl == 0:
        return 0
    size = abs(percent_pnl)
    level = 1
    for i, threshold in enumerate(PNL_BAND_THRESHOLDS):
        if size >= threshold:
            level = len(PNL_BAND_THRESHOLDS) + 1 - i
            break
    return level if percent_pnl > 0 else -level


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

def build_pnl_heatmap(
    market: MarketState,
    position: Position,
    strikes: Iterable[float],
    current_days: Optional[float] = None,
    *,
    max_days: Optional[int] = None,
    otm_percentage: float = DEFAULT_OTM_PERCENTAGE,
) -> Optional[SimulationGrid]:
    """Heat-map of the held position's P&L versus its value today.

    Parameters
    ----------
    market : MarketState
        Today's spot, rate and dividend yield.
    position : Position
        The held contract.  Its strike and implied volatility are used for
        every cell; its premium only gates whether a grid is produced.
    strikes : iterable of float
        Available strikes; filtered by ``heatmap_strikes`` into row prices.
    current_days : float, optional
        Calendar days to expiry today (baseline time), possibly fractional.
        Defaults to the held contract's ``T``; an explicit value wins.
    max_days : int, optional
        Days spanned by the columns; defaults to ``current_days``.  Column
        milestones are whole days, so a fractional span is floored.

    Returns
    -------
    SimulationGrid or None
        ``None`` when the inputs cannot be priced or the baseline value is
        zero (percent P&L would be undefined).
    """
    c = position.contract
    if current_days is None:
        current_days = position.days_to_expiry
    if max_days is None:
        max_days = current_days
    if not _valid_inputs(market.spot, c.K, position.premium, _years(current_days),
                         c.sigma, market.rate, market.q,
                         position.num_contracts, position.multiplier):
        return None
    if not c.sigma > 0:
        logger.debug("rejecting heat-map without implied volatility for K=%s", c.K)
        return None

    rows = heatmap_strikes(strikes, market.spot, otm_percentage)
    columns = heatmap_time_columns(max_days)
    if not rows or not columns:
        logger.debug("empty heat-map axes: %d rows, %d columns", len(rows), len(columns))
        return None

    baseline = bs.price(market.spot, c.K, current_days / DAYS_PER_YEAR,
                        market.rate, market.q, c.sigma, c.kind)
    if not baseline > 0:
        logger.info("held %s K=%s has no value today; heat-map skipped", c.kind, c.K)
        return None

    prices = np.array(rows, dtype=float)
    scale = position.scale
    per_column = []
    for col in columns:
        px = bs_price_vec(prices, c.K, col.days / DAYS_PER_YEAR,
                          market.rate, market.q, c.sigma, c.kind)
        per_column.append(px)

    cells = []
    for i, stock in enumerate(rows):
        row = []
        for j, col in enumerate(columns):
            value = float(per_column[j][i])
            change = value - baseline
            percent = change / baseline * 100.0
            point = SimulationPoint(
                stock_price=stock,
                days_to_expiry=float(col.days),
                option_price=value,
                dollar_pnl=change * scale,
                percent_pnl=percent,
                price_change_percent=(stock - market.spot) / market.spot * 100.0,
            )
            row.append(HeatmapCell(point=point, band=classify_pnl(percent)))
        cells.append(tuple(row))

    logger.debug("built %dx%d heat-map for %s K=%s (baseline %.4f)",
                 len(rows), len(columns), c.kind, c.K, baseline)
    return SimulationGrid(
        strikes=tuple(rows),
        columns=tuple(columns),
        cells=tuple(cells),
        baseline_price=baseline,
        atm_strike=atm_strike(rows, market.spot),
    )
