# optsim: option pricing and P&L simulation engine
# Public API

# Data model
from .core import (
    CALL, PUT,
    MarketState, ContractSpec, Position,
    SimulationPoint, SimulationSeries, TimeColumn, HeatmapCell, SimulationGrid,
)

# Pricing kernel
from .black_scholes import (
    norm_cdf, norm_pdf, intrinsic_value,
    price as bs_price, delta, gamma, theta, vega, rho, greeks as bs_greeks,
)
from .black_scholes_vec import bs_price_vec, bs_greeks_vec

# Simulation layer
from .simulation import (
    calculate_profit_loss,
    generate_pnl_simulation, generate_time_decay_simulation, time_decay_days,
    calculate_breakeven, calculate_max_profit_loss,
    PositionSummary, position_summary, simulate_price_axis, simulate_time_axis,
)
from .heatmap import (
    PNL_BAND_THRESHOLDS,
    heatmap_time_columns, heatmap_strikes, atm_strike, classify_pnl,
    build_pnl_heatmap,
)

# Day count
from .daycount import days_to_expiry, year_fraction

__all__ = [
    # Data model
    "CALL", "PUT",
    "MarketState", "ContractSpec", "Position",
    "SimulationPoint", "SimulationSeries", "TimeColumn", "HeatmapCell",
    "SimulationGrid",
    # Kernel
    "norm_cdf", "norm_pdf", "intrinsic_value",
    "bs_price", "delta", "gamma", "theta", "vega", "rho", "bs_greeks",
    "bs_price_vec", "bs_greeks_vec",
    # Simulation
    "calculate_profit_loss",
    "generate_pnl_simulation", "generate_time_decay_simulation", "time_decay_days",
    "calculate_breakeven", "calculate_max_profit_loss",
    "PositionSummary", "position_summary",
    "simulate_price_axis", "simulate_time_axis",
    # Heat-map
    "PNL_BAND_THRESHOLDS",
    "heatmap_time_columns", "heatmap_strikes", "atm_strike", "classify_pnl",
    "build_pnl_heatmap",
    # Day count
    "days_to_expiry", "year_fraction",
]

__version__ = "0.1.0"
