from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Iterator, Optional

import numpy as np

from .config import CONTRACT_MULTIPLIER, DAYS_PER_YEAR

CALL = "call"
PUT  = "put"


def check_kind(kind: str) -> str:
    if kind not in (CALL, PUT):
        raise ValueError(f"kind must be 'call' or 'put', got {kind!r}")
    return kind


def is_count(value) -> bool:
    """Whole number >= 1 (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        return False
    return value >= 1


# ---------------------------------------------------------------------------
# Inputs: market snapshot, contract, held position
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MarketState:
    """What is *moving*: one snapshot of the underlying.

    Parameters
    ----------
    spot : float
        Current underlying price.
    rate : float
        Continuously-compounded risk-free rate (decimal).
    q : float
        Continuous dividend yield (decimal, default 0).
    """
    spot: float
    rate: float
    q: float = 0.0


@dataclass(frozen=True)
class ContractSpec:
    """What the contract *is*.

    Strike and volatility positivity is not checked here so that an
    incomplete quote can still be represented; the simulation layer
    refuses to price such contracts.

    Parameters
    ----------
    K : float
        Strike price.
    kind : str
        ``"call"`` or ``"put"``.
    sigma : float
        Implied volatility (annualised, decimal).
    T : float
        Time to expiry in years; ``0`` means at expiry.
    """
    K: float
    kind: str
    sigma: float
    T: float = 0.0

    def __post_init__(self):
        check_kind(self.kind)
        if self.T < 0:
            raise ValueError(f"T must be non-negative, got {self.T}")

    @property
    def is_call(self) -> bool:
        return self.kind == CALL


@dataclass(frozen=True)
class Position:
    """A long holding of ``num_contracts`` contracts bought at ``premium``."""
    contract: ContractSpec
    premium: float
    num_contracts: int = 1
    multiplier: int = CONTRACT_MULTIPLIER

    def __post_init__(self):
        for name in ("num_contracts", "multiplier"):
            value = getattr(self, name)
            if not is_count(value):
                raise ValueError(f"{name} must be an integer >= 1, got {value!r}")

    @property
    def days_to_expiry(self) -> float:
        """``contract.T`` in calendar days; whole when ``T`` came from whole days."""
        days = self.contract.T * DAYS_PER_YEAR
        nearest = round(days)
        if abs(days - nearest) < 1e-9:
            return nearest
        return days

    @property
    def scale(self) -> int:
        """Dollars of P&L per 1.00 move in the option price."""
        return self.multiplier * self.num_contracts


# ---------------------------------------------------------------------------
# Outputs: points, series, grids
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SimulationPoint:
    stock_price: float
    days_to_expiry: float
    option_price: float
    dollar_pnl: float
    percent_pnl: float
    price_change_percent: float = 0.0


_POINT_FIELDS = tuple(f.name for f in fields(SimulationPoint))


@dataclass(frozen=True)
class SimulationSeries:
    """Ordered points along one swept axis (``"price"`` or ``"days"``).

    Price series run by increasing stock price; days series run by
    decreasing days to expiry, so index 0 is today and the last point is
    expiry.
    """
    axis: str
    points: tuple[SimulationPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[SimulationPoint]:
        return iter(self.points)

    def __getitem__(self, i):
        return self.points[i]

    def column(self, name: str) -> np.ndarray:
        """One field of every point as a float array, e.g. ``"dollar_pnl"``."""
        if name not in _POINT_FIELDS:
            raise KeyError(f"unknown column {name!r}; expected one of {_POINT_FIELDS}")
        return np.array([getattr(p, name) for p in self.points], dtype=float)


@dataclass(frozen=True)
class TimeColumn:
    days: int
    label: str


@dataclass(frozen=True)
class HeatmapCell:
    point: SimulationPoint
    band: int    # signed severity, see heatmap.classify_pnl


@dataclass(frozen=True)
class SimulationGrid:
    """Heat-map: rows are hypothetical underlying prices (high to low),
    columns are days remaining (most to least, expiry last).
    """
    strikes: tuple[float, ...]
    columns: tuple[TimeColumn, ...]
    cells: tuple[tuple[HeatmapCell, ...], ...]
    baseline_price: float
    atm_strike: Optional[float] = None

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.strikes), len(self.columns)

    def cell(self, i: int, j: int) -> HeatmapCell:
        return self.cells[i][j]

    def to_arrays(self) -> dict[str, np.ndarray]:
        """``"dollar_pnl"``, ``"percent_pnl"``, ``"option_price"``, ``"band"``
        as ``(n_rows, n_cols)`` arrays."""
        out = {}
        for name in ("dollar_pnl", "percent_pnl", "option_price"):
            out[name] = np.array(
                [[getattr(c.point, name) for c in row] for row in self.cells],
                dtype=float,
            ).reshape(self.shape)
        out["band"] = np.array(
            [[c.band for c in row] for row in self.cells], dtype=int
        ).reshape(self.shape)
        return out
