# black_scholes_vec.py
# Vectorised Black-Scholes pricing and Greeks.
# All public functions accept scalars *or* NumPy arrays and broadcast.
# Same CDF approximation and expiry conventions as the scalar kernel.

from __future__ import annotations
import numpy as np
from scipy.stats import norm

from .config import DAYS_PER_YEAR
from .core import CALL, check_kind

_n = norm.pdf   # vectorised standard-normal PDF

# Abramowitz & Stegun 7.1.26
_A = (0.254829592, -0.284496736, 1.421413741, -1.453152027, 1.061405429)
_P = 0.3275911


def norm_cdf_vec(x) -> np.ndarray:
    """Element-wise twin of ``black_scholes.norm_cdf``."""
    x = np.asarray(x, dtype=float)
    sign = np.where(x < 0, -1.0, 1.0)
    z = np.abs(x) / np.sqrt(2.0)
    t = 1.0 / (1.0 + _P * z)
    a1, a2, a3, a4, a5 = _A
    y = 1.0 - (((((a5 * t + a4) * t) + a3) * t + a2) * t + a1) * t * np.exp(-z * z)
    return 0.5 * (1.0 + sign * y)


_N = norm_cdf_vec


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------
def _broadcast(S, K, T, r, q, sigma):
    return np.broadcast_arrays(
        *(np.asarray(x, dtype=float) for x in (S, K, T, r, q, sigma))
    )


def _d1_d2(S, K, T, r, q, sigma, live):
    """d1, d2 on the ``live`` (T > 0) elements; expiry elements get a
    harmless placeholder and are masked out by the callers."""
    T_safe = np.where(live, T, 1.0)
    sig_safe = np.where(live, sigma, 1.0)
    sig_sqrt_T = sig_safe * np.sqrt(T_safe)
    d1 = (np.log(S / K) + (r - q + 0.5 * sig_safe * sig_safe) * T_safe) / sig_sqrt_T
    d2 = d1 - sig_sqrt_T
    return d1, d2, T_safe, sig_safe


# ---------------------------------------------------------------------------
# Vectorised price
# ---------------------------------------------------------------------------
def bs_price_vec(S, K, T, r, q, sigma, kind) -> np.ndarray:
    """Vectorised Black-Scholes price.

    Parameters accept scalars or arrays; NumPy broadcasting rules apply.
    ``kind`` is a single ``"call"`` / ``"put"`` for the whole batch.

    Returns
    -------
    np.ndarray
        Option prices (same shape as broadcasted inputs).  Elements with
        ``T <= 0`` hold the intrinsic value.
    """
    check_kind(kind)
    S, K, T, r, q, sigma = _broadcast(S, K, T, r, q, sigma)
    live = T > 0
    d1, d2, T_safe, _ = _d1_d2(S, K, T, r, q, sigma, live)
    disc_r = np.exp(-r * T_safe)
    disc_q = np.exp(-q * T_safe)

    if kind == CALL:
        px = S * disc_q * _N(d1) - K * disc_r * _N(d2)
        intrinsic = np.maximum(S - K, 0.0)
    else:
        px = K * disc_r * _N(-d2) - S * disc_q * _N(-d1)
        intrinsic = np.maximum(K - S, 0.0)
    return np.where(live, px, intrinsic)


# ---------------------------------------------------------------------------
# Vectorised Greeks
# ---------------------------------------------------------------------------
def bs_greeks_vec(S, K, T, r, q, sigma, kind) -> dict[str, np.ndarray]:
    """Vectorised Greeks.

    Returns dict with keys: delta, gamma, theta, vega, rho.
    Theta is per calendar day, vega is dPrice/dSigma (absolute).
    """
    check_kind(kind)
    S, K, T, r, q, sigma = _broadcast(S, K, T, r, q, sigma)
    live = T > 0
    d1, d2, T_safe, sig_safe = _d1_d2(S, K, T, r, q, sigma, live)
    disc_r = np.exp(-r * T_safe)
    disc_q = np.exp(-q * T_safe)
    sqrt_T = np.sqrt(T_safe)
    n_d1 = _n(d1)

    # Common
    gamma = disc_q * n_d1 / (S * sig_safe * sqrt_T)
    vega  = S * disc_q * n_d1 * sqrt_T
    decay = -(S * disc_q * sig_safe * n_d1) / (2 * sqrt_T)

    if kind == CALL:
        delta = disc_q * _N(d1)
        theta = (decay - r * K * disc_r * _N(d2)
                 + q * S * disc_q * _N(d1)) / DAYS_PER_YEAR
        rho   = K * T_safe * disc_r * _N(d2)
        delta_exp = np.where(S > K, 1.0, 0.0)
    else:
        delta = disc_q * (_N(d1) - 1.0)
        theta = (decay + r * K * disc_r * _N(-d2)
                 - q * S * disc_q * _N(-d1)) / DAYS_PER_YEAR
        rho   = -K * T_safe * disc_r * _N(-d2)
        delta_exp = np.where(S < K, -1.0, 0.0)

    return {
        "delta": np.where(live, delta, delta_exp),
        "gamma": np.where(live, gamma, 0.0),
        "theta": np.where(live, theta, 0.0),
        "vega":  np.where(live, vega, 0.0),
        "rho":   np.where(live, rho, 0.0),
    }
