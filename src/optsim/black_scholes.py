"""Closed-form Black-Scholes pricer with continuous dividend yield.

Scalar kernel: pure functions of ``(S, K, T, r, q, sigma, kind)``.  At
``T <= 0`` every function returns its expiry value (intrinsic payoff,
step delta, zero gamma / theta / vega / rho) without touching the
analytic formula.

Inputs are not validated: ``S <= 0``, ``K <= 0`` or ``sigma <= 0`` with
``T > 0`` are undefined.  The simulation layer gates these before calling
in.
"""

import math
from math import log, sqrt, exp
from typing import Dict, Literal

from .config import DAYS_PER_YEAR
from .core import CALL, check_kind

# Abramowitz & Stegun 7.1.26
_A1 =  0.254829592
_A2 = -0.284496736
_A3 =  1.421413741
_A4 = -1.453152027
_A5 =  1.061405429
_P  =  0.3275911

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)

Kind = Literal["call", "put"]


def norm_cdf(x: float) -> float:
    """Standard normal CDF, rational approximation (abs error ~1e-7)."""
    sign = -1.0 if x < 0 else 1.0
    z = abs(x) / math.sqrt(2.0)
    t = 1.0 / (1.0 + _P * z)
    y = 1.0 - (((((_A5 * t + _A4) * t) + _A3) * t + _A2) * t + _A1) * t * math.exp(-z * z)
    return 0.5 * (1.0 + sign * y)


def norm_pdf(x: float) -> float:
    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)


def _d1_d2(S, K, T, r, q, sigma):
    rt = sigma * sqrt(T)
    d1 = (log(S / K) + (r - q + 0.5 * sigma * sigma) * T) / rt
    d2 = d1 - rt
    return d1, d2


def intrinsic_value(S: float, K: float, kind: Kind = CALL) -> float:
    if check_kind(kind) == CALL:
        return max(0.0, S - K)
    return max(0.0, K - S)


def price(S: float, K: float, T: float, r: float, q: float, sigma: float,
          kind: Kind = CALL) -> float:
    check_kind(kind)
    if T <= 0:
        return intrinsic_value(S, K, kind)
    d1, d2 = _d1_d2(S, K, T, r, q, sigma)
    disc_r = exp(-r * T)
    disc_q = exp(-q * T)
    if kind == CALL:
        return S * disc_q * norm_cdf(d1) - K * disc_r * norm_cdf(d2)
    return K * disc_r * norm_cdf(-d2) - S * disc_q * norm_cdf(-d1)


def delta(S: float, K: float, T: float, r: float, q: float, sigma: float,
          kind: Kind = CALL) -> float:
    """dPrice/dS.  At expiry: the sign of the intrinsic exposure."""
    check_kind(kind)
    if T <= 0:
        if kind == CALL:
            return 1.0 if S > K else 0.0
        return -1.0 if S < K else 0.0
    d1, _ = _d1_d2(S, K, T, r, q, sigma)
    disc_q = exp(-q * T)
    if kind == CALL:
        return disc_q * norm_cdf(d1)
    return disc_q * (norm_cdf(d1) - 1.0)


def gamma(S: float, K: float, T: float, r: float, q: float, sigma: float) -> float:
    if T <= 0:
        return 0.0
    d1, _ = _d1_d2(S, K, T, r, q, sigma)
    return exp(-q * T) * norm_pdf(d1) / (S * sigma * sqrt(T))


def theta(S: float, K: float, T: float, r: float, q: float, sigma: float,
          kind: Kind = CALL) -> float:
    """Time decay per calendar day (annual theta / 365).

    With ``q = 0`` the carry term vanishes and this is the plain
    erosion-plus-drift form.
    """
    check_kind(kind)
    if T <= 0:
        return 0.0
    d1, d2 = _d1_d2(S, K, T, r, q, sigma)
    disc_r = exp(-r * T)
    disc_q = exp(-q * T)
    decay = -(S * disc_q * sigma * norm_pdf(d1)) / (2.0 * sqrt(T))
    if kind == CALL:
        drift = -r * K * disc_r * norm_cdf(d2)
        carry = q * S * disc_q * norm_cdf(d1)
    else:
        drift = r * K * disc_r * norm_cdf(-d2)
        carry = -q * S * disc_q * norm_cdf(-d1)
    return (decay + drift + carry) / DAYS_PER_YEAR


def vega(S: float, K: float, T: float, r: float, q: float, sigma: float) -> float:
    """dPrice/dSigma in absolute units (not per 1%)."""
    if T <= 0:
        return 0.0
    d1, _ = _d1_d2(S, K, T, r, q, sigma)
    return S * exp(-q * T) * norm_pdf(d1) * sqrt(T)


def rho(S: float, K: float, T: float, r: float, q: float, sigma: float,
        kind: Kind = CALL) -> float:
    check_kind(kind)
    if T <= 0:
        return 0.0
    _, d2 = _d1_d2(S, K, T, r, q, sigma)
    if kind == CALL:
        return K * T * exp(-r * T) * norm_cdf(d2)
    return -K * T * exp(-r * T) * norm_cdf(-d2)


def greeks(S: float, K: float, T: float, r: float, q: float, sigma: float,
           kind: Kind = CALL) -> Dict[str, float]:
    """Returns delta, gamma, theta (per day), vega and rho."""
    return {
        "delta": delta(S, K, T, r, q, sigma, kind),
        "gamma": gamma(S, K, T, r, q, sigma),
        "theta": theta(S, K, T, r, q, sigma, kind),
        "vega":  vega(S, K, T, r, q, sigma),
        "rho":   rho(S, K, T, r, q, sigma, kind),
    }
