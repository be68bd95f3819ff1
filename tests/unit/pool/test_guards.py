"""Tests for swap and provide guards."""

from dataclasses import replace

import pytest

from pcl_engine.curve.state import PriceState
from pcl_engine.errors import (
    AllowedSpreadAssertion,
    EmptyPoolError,
    MaxSpreadAssertion,
    SlippageExceeded,
    ValidationError,
    ZeroAmount,
)
from pcl_engine.math.fixed_point import Decimal256
from pcl_engine.pool.guards import (
    assert_max_spread,
    assert_slippage_tolerance,
    before_swap_check,
    check_spread_limits,
)


def dec(value: str | int) -> Decimal256:
    return Decimal256.from_decimal(value)


class TestBeforeSwapCheck:
    def test_passes(self):
        before_swap_check([dec(1), dec(1)], dec(1))

    def test_zero_offer(self):
        with pytest.raises(ZeroAmount):
            before_swap_check([dec(1), dec(1)], Decimal256.zero())

    def test_empty_pool(self):
        with pytest.raises(EmptyPoolError):
            before_swap_check([dec(1), Decimal256.zero()], dec(1))


class TestMaxSpread:
    def test_spread_within_default(self):
        assert_max_spread(None, None, 1000, 996, 4)

    def test_spread_above_default(self):
        with pytest.raises(MaxSpreadAssertion):
            assert_max_spread(None, None, 1000, 990, 10)

    def test_custom_limit(self):
        assert_max_spread(None, dec("0.02"), 1000, 990, 10)

    def test_limit_above_maximum(self):
        with pytest.raises(AllowedSpreadAssertion):
            assert_max_spread(None, dec("0.6"), 1000, 990, 10)

    def test_belief_price(self):
        """At price 2 an offer of 1000 expects 500 back."""
        assert_max_spread(dec(2), dec("0.01"), 1000, 496, 0)
        with pytest.raises(MaxSpreadAssertion):
            assert_max_spread(dec(2), dec("0.01"), 1000, 490, 0)

    def test_belief_price_better_return(self):
        assert_max_spread(dec(2), dec("0.01"), 1000, 600, 0)

    def test_zero_belief_price(self):
        with pytest.raises(ValidationError):
            assert_max_spread(Decimal256.zero(), dec("0.01"), 1000, 600, 0)


class TestSpreadLimits:
    def test_default_spread(self):
        assert check_spread_limits(None, None) == dec("0.005")

    def test_explicit_spread(self):
        assert check_spread_limits(dec(2), dec("0.5")) == dec("0.5")

    def test_zero_belief_price(self):
        with pytest.raises(ValidationError):
            check_spread_limits(Decimal256.zero(), None)

    def test_spread_above_maximum(self):
        with pytest.raises(AllowedSpreadAssertion):
            check_spread_limits(None, dec("0.51"))


class TestSlippageTolerance:
    @pytest.fixture
    def price_state(self) -> PriceState:
        return replace(PriceState.initial(Decimal256.one(), 0), xcp_profit_real=Decimal256.one())

    def test_balanced_share(self, price_state):
        slippage = assert_slippage_tolerance([dec(100), dec(100)], dec(100), price_state, None)
        assert slippage == Decimal256.zero()

    def test_share_below_tolerance(self, price_state):
        with pytest.raises(SlippageExceeded):
            assert_slippage_tolerance([dec(100), dec(100)], dec(99), price_state, None)

    def test_custom_tolerance(self, price_state):
        slippage = assert_slippage_tolerance([dec(100), dec(100)], dec(99), price_state, dec("0.02"))
        assert slippage == dec("0.01")

    def test_tolerance_above_maximum(self, price_state):
        with pytest.raises(AllowedSpreadAssertion):
            assert_slippage_tolerance([dec(100), dec(100)], dec(100), price_state, dec("0.51"))
