"""Tests for the value types."""

import numpy as np
import pytest

from optsim.core import (
    CALL, PUT, ContractSpec, MarketState, Position, SimulationPoint, SimulationSeries,
)


class TestContractSpec:
    def test_valid(self):
        c = ContractSpec(K=100.0, kind=PUT, sigma=0.2, T=0.5)
        assert not c.is_call

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            ContractSpec(K=100.0, kind="CALL", sigma=0.2, T=0.5)

    def test_negative_time(self):
        with pytest.raises(ValueError):
            ContractSpec(K=100.0, kind=CALL, sigma=0.2, T=-0.01)

    def test_incomplete_quote_is_representable(self):
        c = ContractSpec(K=100.0, kind=CALL, sigma=0.0, T=0.1)
        assert c.sigma == 0.0

    def test_frozen(self):
        c = ContractSpec(K=100.0, kind=CALL, sigma=0.2)
        with pytest.raises(AttributeError):
            c.K = 105.0


class TestPosition:
    CONTRACT = ContractSpec(K=100.0, kind=CALL, sigma=0.2, T=0.5)

    def test_defaults(self):
        pos = Position(self.CONTRACT, premium=4.0)
        assert pos.num_contracts == 1
        assert pos.multiplier == 100
        assert pos.scale == 100

    def test_scale(self):
        assert Position(self.CONTRACT, 4.0, num_contracts=3, multiplier=10).scale == 30

    @pytest.mark.parametrize("n", [0, -1, 1.5, True])
    def test_bad_contract_count(self, n):
        with pytest.raises(ValueError):
            Position(self.CONTRACT, 4.0, num_contracts=n)

    def test_bad_multiplier(self):
        with pytest.raises(ValueError):
            Position(self.CONTRACT, 4.0, multiplier=0)

    def test_numpy_integer_count(self):
        assert Position(self.CONTRACT, 4.0, num_contracts=np.int64(2)).scale == 200

    def test_days_to_expiry(self):
        whole = Position(ContractSpec(K=100.0, kind=CALL, sigma=0.2, T=30 / 365), 4.0)
        assert whole.days_to_expiry == 30
        assert isinstance(whole.days_to_expiry, int)
        part = Position(ContractSpec(K=100.0, kind=CALL, sigma=0.2, T=12.5 / 365), 4.0)
        assert part.days_to_expiry == pytest.approx(12.5)


class TestSimulationSeries:
    POINTS = tuple(
        SimulationPoint(stock_price=s, days_to_expiry=10.0, option_price=s / 10,
                        dollar_pnl=s - 100, percent_pnl=(s - 100) / 100)
        for s in (90.0, 100.0, 110.0)
    )

    def test_sequence_protocol(self):
        series = SimulationSeries("price", self.POINTS)
        assert len(series) == 3
        assert series[1].stock_price == 100.0
        assert [p.stock_price for p in series] == [90.0, 100.0, 110.0]
        assert series

    def test_empty_is_falsy(self):
        assert not SimulationSeries("days")

    def test_column(self):
        series = SimulationSeries("price", self.POINTS)
        np.testing.assert_array_equal(series.column("dollar_pnl"), [-10.0, 0.0, 10.0])
        np.testing.assert_array_equal(series.column("price_change_percent"), [0.0, 0.0, 0.0])

    def test_unknown_column(self):
        with pytest.raises(KeyError):
            SimulationSeries("price", self.POINTS).column("vega")


def test_market_state_defaults():
    m = MarketState(spot=100.0, rate=0.04)
    assert m.q == 0.0
