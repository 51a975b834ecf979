# config.py
# Conventions and defaults shared by the kernel, the sweeps and the CLI.

# Day count: calendar days over a 365-day year.
DAYS_PER_YEAR = 365

# Dollar P&L of one listed equity option contract covers 100 shares.
CONTRACT_MULTIPLIER = 100

DEFAULT_RISK_FREE_RATE = 0.045
DEFAULT_DIVIDEND_YIELD = 0.0

# Price sweep: +/- 50% of spot, 101 points (100 intervals).
DEFAULT_PRICE_RANGE = 0.5
PRICE_SWEEP_POINTS = 101

# Time sweep: daily steps up to 30 days out, ~20 steps beyond that.
DAILY_STEP_THRESHOLD = 30
TIME_SWEEP_STEPS = 20

# Heat-map row / column policies.
DEFAULT_OTM_PERCENTAGE = 10.0
FALLBACK_STRIKE_COUNT = 15
MAX_HEATMAP_COLUMNS = 8
EXPIRY_LABEL = "Exp"
