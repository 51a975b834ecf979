"""Tests for the scalar Black-Scholes kernel."""

import math

import numpy as np
import pytest
from scipy.stats import norm

from optsim.core import CALL, PUT
from optsim.black_scholes import (
    norm_cdf, norm_pdf, intrinsic_value, price, delta, gamma, theta, vega, rho, greeks,
)


def test_bs_known_values():
    assert abs(price(100, 100, 1.0, 0.05, 0.0, 0.2, CALL) - 10.4506) < 1e-3
    assert abs(price(100, 100, 1.0, 0.05, 0.0, 0.2, PUT)  - 5.5735)  < 1e-3


class TestNormal:
    def test_cdf_matches_scipy(self):
        xs = np.linspace(-6, 6, 241)
        err = max(abs(norm_cdf(x) - norm.cdf(x)) for x in xs)
        assert err < 1e-7

    def test_cdf_symmetry(self):
        for x in (0.1, 0.7, 1.5, 3.2):
            assert abs(norm_cdf(x) + norm_cdf(-x) - 1.0) < 1e-15

    def test_cdf_at_zero(self):
        assert abs(norm_cdf(0.0) - 0.5) < 1e-9

    def test_cdf_extremes_stay_in_unit_interval(self):
        assert 0.0 <= norm_cdf(-40.0) < 1e-12
        assert 1.0 - 1e-12 < norm_cdf(40.0) <= 1.0

    def test_pdf_matches_scipy(self):
        for x in (-2.0, 0.0, 0.3, 1.7):
            assert abs(norm_pdf(x) - norm.pdf(x)) < 1e-15


class TestPrice:
    def test_short_dated_atm_example(self):
        c = price(100, 100, 30 / 365, 0.045, 0.0, 0.25, CALL)
        p = price(100, 100, 30 / 365, 0.045, 0.0, 0.25, PUT)
        assert abs(c - 3.041) < 0.01
        assert abs(p - 2.672) < 0.01
        assert abs((c - p) - (100 - 100 * math.exp(-0.045 * 30 / 365))) < 1e-9

    @pytest.mark.parametrize("S,K,T,r,q,sigma", [
        (100, 100, 1.0, 0.05, 0.0, 0.2),
        (120, 100, 0.25, 0.03, 0.02, 0.35),
        (80, 100, 2.0, 0.01, 0.04, 0.15),
        (50, 55, 10 / 365, 0.045, 0.0, 0.6),
    ])
    def test_put_call_parity(self, S, K, T, r, q, sigma):
        c = price(S, K, T, r, q, sigma, CALL)
        p = price(S, K, T, r, q, sigma, PUT)
        fwd = S * math.exp(-q * T) - K * math.exp(-r * T)
        assert abs((c - p) - fwd) <= 1e-6 * max(1.0, abs(fwd))

    @pytest.mark.parametrize("S", [70.0, 95.0, 100.0, 105.0, 130.0])
    @pytest.mark.parametrize("T", [0.0, 0.05, 0.5, 2.0])
    def test_intrinsic_floor(self, S, T):
        K, r, q, sigma = 100.0, 0.04, 0.01, 0.3
        fwd = S * math.exp(-q * T) - K * math.exp(-r * T)
        assert price(S, K, T, r, q, sigma, CALL) >= max(0.0, fwd) - 1e-4
        assert price(S, K, T, r, q, sigma, PUT) >= max(0.0, -fwd) - 1e-4

    def test_expiry_uses_intrinsic(self):
        assert price(105, 100, 0.0, 0.05, 0.0, 0.25, CALL) == 5.0
        assert price(105, 100, 0.0, 0.05, 0.0, 0.25, PUT) == 0.0
        assert price(95, 100, 0.0, 0.05, 0.0, 0.25, PUT) == 5.0

    def test_expiry_ignores_zero_vol(self):
        assert price(105, 100, 0.0, 0.05, 0.0, 0.0, CALL) == 5.0

    @pytest.mark.parametrize("S", [90.0, 100.0, 110.0])
    def test_terminal_convergence(self, S):
        for kind in (CALL, PUT):
            near = price(S, 100, 1e-10, 0.05, 0.0, 0.3, kind)
            assert abs(near - intrinsic_value(S, 100, kind)) < 1e-3

    def test_call_increasing_put_decreasing_in_spot(self):
        spots = np.linspace(70, 130, 61)
        calls = [price(s, 100, 0.5, 0.04, 0.01, 0.25, CALL) for s in spots]
        puts = [price(s, 100, 0.5, 0.04, 0.01, 0.25, PUT) for s in spots]
        assert np.all(np.diff(calls) > 0)
        assert np.all(np.diff(puts) < 0)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            price(100, 100, 1.0, 0.05, 0.0, 0.2, "straddle")


class TestGreeks:
    def test_short_dated_atm_delta(self):
        assert abs(delta(100, 100, 30 / 365, 0.045, 0.0, 0.25, CALL) - 0.535) < 0.005

    def test_expiry_example(self):
        g = greeks(105, 100, 0.0, 0.05, 0.0, 0.25, CALL)
        assert g["delta"] == 1.0
        assert g["gamma"] == 0.0
        assert g["theta"] == 0.0
        assert g["vega"] == 0.0
        assert g["rho"] == 0.0

    def test_expiry_delta_steps(self):
        assert delta(95, 100, 0.0, 0.05, 0.0, 0.25, CALL) == 0.0
        assert delta(100, 100, 0.0, 0.05, 0.0, 0.25, CALL) == 0.0
        assert delta(95, 100, 0.0, 0.05, 0.0, 0.25, PUT) == -1.0
        assert delta(105, 100, 0.0, 0.05, 0.0, 0.25, PUT) == 0.0

    @pytest.mark.parametrize("S", [40.0, 80.0, 100.0, 125.0, 300.0])
    def test_delta_bounds(self, S):
        for T in (0.0, 0.01, 1.0):
            assert 0.0 <= delta(S, 100, T, 0.05, 0.02, 0.3, CALL) <= 1.0
            assert -1.0 <= delta(S, 100, T, 0.05, 0.02, 0.3, PUT) <= 0.0

    def test_gamma_same_for_call_and_put(self):
        g_call = greeks(103, 100, 0.4, 0.03, 0.01, 0.22, CALL)["gamma"]
        g_put = greeks(103, 100, 0.4, 0.03, 0.01, 0.22, PUT)["gamma"]
        assert g_call == g_put
        assert g_call > 0

    def test_delta_matches_finite_difference(self):
        h = 0.01
        for kind in (CALL, PUT):
            fd = (price(100 + h, 100, 0.5, 0.05, 0.0, 0.2, kind)
                  - price(100 - h, 100, 0.5, 0.05, 0.0, 0.2, kind)) / (2 * h)
            assert abs(delta(100, 100, 0.5, 0.05, 0.0, 0.2, kind) - fd) < 1e-3

    def test_gamma_matches_finite_difference(self):
        h = 0.5
        fd = (delta(100 + h, 100, 0.5, 0.05, 0.0, 0.2, CALL)
              - delta(100 - h, 100, 0.5, 0.05, 0.0, 0.2, CALL)) / (2 * h)
        assert abs(gamma(100, 100, 0.5, 0.05, 0.0, 0.2) - fd) < 1e-4

    def test_theta_is_per_calendar_day(self):
        h = 1e-3
        for kind in (CALL, PUT):
            dP_dT = (price(100, 100, 0.5 + h, 0.05, 0.0, 0.2, kind)
                     - price(100, 100, 0.5 - h, 0.05, 0.0, 0.2, kind)) / (2 * h)
            assert abs(theta(100, 100, 0.5, 0.05, 0.0, 0.2, kind) - (-dP_dT / 365)) < 1e-4

    @pytest.mark.parametrize("q", [0.02, 0.06])
    def test_dividend_greeks_match_finite_difference(self, q):
        S, K, T, r, sigma = 100.0, 100.0, 1.0, 0.05, 0.2
        h = 0.01
        for kind in (CALL, PUT):
            fd_delta = (price(S + h, K, T, r, q, sigma, kind)
                        - price(S - h, K, T, r, q, sigma, kind)) / (2 * h)
            assert abs(delta(S, K, T, r, q, sigma, kind) - fd_delta) < 1e-3

            fd_gamma = (delta(S + 0.5, K, T, r, q, sigma, kind)
                        - delta(S - 0.5, K, T, r, q, sigma, kind)) / 1.0
            assert abs(gamma(S, K, T, r, q, sigma) - fd_gamma) < 1e-4

            dT = 1e-3
            dP_dT = (price(S, K, T + dT, r, q, sigma, kind)
                     - price(S, K, T - dT, r, q, sigma, kind)) / (2 * dT)
            assert abs(theta(S, K, T, r, q, sigma, kind) - (-dP_dT / 365)) < 1e-4

    def test_dividend_discounts_delta(self):
        plain = delta(100, 100, 1.0, 0.05, 0.0, 0.2, CALL)
        with_q = delta(100, 100, 1.0, 0.05, 0.06, 0.2, CALL)
        assert with_q < plain
        assert with_q == pytest.approx(0.4897, abs=1e-3)

    def test_long_call_decays(self):
        assert theta(100, 100, 0.25, 0.05, 0.0, 0.3, CALL) < 0

    def test_vega_and_rho_match_finite_difference(self):
        h = 1e-4
        for kind in (CALL, PUT):
            fd_v = (price(100, 95, 0.75, 0.04, 0.02, 0.25 + h, kind)
                    - price(100, 95, 0.75, 0.04, 0.02, 0.25 - h, kind)) / (2 * h)
            fd_r = (price(100, 95, 0.75, 0.04 + h, 0.02, 0.25, kind)
                    - price(100, 95, 0.75, 0.04 - h, 0.02, 0.25, kind)) / (2 * h)
            assert abs(vega(100, 95, 0.75, 0.04, 0.02, 0.25) - fd_v) < 1e-2
            assert abs(rho(100, 95, 0.75, 0.04, 0.02, 0.25, kind) - fd_r) < 1e-2

    def test_all_keys(self):
        g = greeks(100, 100, 1.0, 0.05, 0.0, 0.2, PUT)
        assert set(g.keys()) == {"delta", "gamma", "theta", "vega", "rho"}
