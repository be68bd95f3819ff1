"""Tests for the internal oracle and price_scale repegging."""

from dataclasses import replace

import pytest

from pcl_engine.curve.repeg import update_price
from pcl_engine.curve.scheduler import promote_params
from pcl_engine.errors import XcpProfitLoss
from pcl_engine.math.fixed_point import Decimal256
from tests.helpers import make_pool_params, make_pool_state

T0 = 1_000_000


def dec(value: str | int) -> Decimal256:
    return Decimal256.from_decimal(value)


def with_price_state(state, **changes):
    return replace(state, price_state=replace(state.price_state, **changes))


@pytest.fixture
def params():
    return make_pool_params()


@pytest.fixture
def balanced_xs():
    return [dec(1000), dec(1000)]


class TestOracle:
    """EMA of the last traded price."""

    def test_half_time_moves_oracle_halfway(self, params, balanced_xs):
        state = with_price_state(make_pool_state(now=T0), last_price=dec(2))
        new = update_price(state, params, T0 + params.ma_half_time, dec(1000), balanced_xs, dec("1.1"))

        assert new.price_state.oracle_price.abs_diff(dec("1.5")).value < 10**6
        assert new.price_state.last_price == dec("1.1")
        assert new.price_state.last_price_update == T0 + params.ma_half_time

    def test_same_block_keeps_oracle(self, params, balanced_xs):
        state = with_price_state(make_pool_state(now=T0), last_price=dec(2))
        new = update_price(state, params, T0, dec(1000), balanced_xs, dec("1.1"))

        assert new.price_state.oracle_price == Decimal256.one()
        assert new.price_state.last_price == dec("1.1")


class TestVirtualPrice:
    def test_first_update_keeps_profit_untracked(self, params, balanced_xs):
        """Profit tracking starts once xcp_profit_real is initialized."""
        state = make_pool_state(now=T0)
        new = update_price(state, params, T0, dec(1000), balanced_xs, Decimal256.one())
        assert new.price_state.xcp_profit_real == Decimal256.zero()

    def test_profit_grows_with_virtual_price(self, params, balanced_xs):
        state = with_price_state(
            make_pool_state(now=T0),
            xcp_profit=Decimal256.one(),
            xcp_profit_real=Decimal256.one(),
        )
        new = update_price(state, params, T0, dec(900), balanced_xs, Decimal256.one())

        real = new.price_state.xcp_profit_real
        assert real == dec(1000) / dec(900)
        assert new.price_state.xcp_profit == real

    def test_virtual_price_drop_raises(self, params, balanced_xs):
        state = with_price_state(
            make_pool_state(now=T0),
            xcp_profit=dec(2),
            xcp_profit_real=dec(2),
        )
        with pytest.raises(XcpProfitLoss):
            update_price(state, params, T0, dec(1000), balanced_xs, Decimal256.one())

    def test_virtual_price_drop_allowed_during_ramp(self, params, balanced_xs):
        state = with_price_state(
            make_pool_state(amp=dec(40), gamma=dec("0.0001"), now=T0),
            xcp_profit=dec(2),
            xcp_profit_real=dec(2),
        )
        now = T0 + 86400
        state = promote_params(state, now, dec(44), dec("0.0001"), now + 86400)

        new = update_price(state, params, now + 1, dec(1000), balanced_xs, Decimal256.one())
        assert new.price_state.xcp_profit_real < dec(2)


class TestRepeg:
    """price_scale moves toward the oracle when profit allows."""

    def test_repegs_toward_oracle(self, params, balanced_xs):
        state = with_price_state(
            make_pool_state(now=T0),
            oracle_price=dec("1.2"),
            last_price=dec("1.2"),
            xcp_profit=Decimal256.one(),
            xcp_profit_real=Decimal256.one(),
        )
        new = update_price(state, params, T0, dec(900), balanced_xs, dec("1.2"))

        # norm = 0.2, step = norm / 10 = 0.02 of the distance
        assert new.price_state.price_scale == dec("1.02")
        assert new.price_state.xcp_profit_real > Decimal256.one()

    def test_no_repeg_that_lowers_virtual_price(self, params):
        """Moving price_scale toward the balance point costs virtual price."""
        state = with_price_state(
            make_pool_state(now=T0),
            oracle_price=dec("0.5"),
            last_price=dec("0.5"),
            xcp_profit=Decimal256.one(),
            xcp_profit_real=Decimal256.one(),
        )
        # Asset 1 is in excess, the oracle points the same way
        xs = [dec(1000), dec(1100)]
        new = update_price(state, params, T0, dec(900), xs, dec("0.5"))

        ps = new.price_state
        assert ps.price_scale == Decimal256.one()
        assert ps.xcp_profit_real > dec("1.16")
        assert ps.xcp_profit == ps.xcp_profit_real

    def test_no_repeg_without_profit(self, params, balanced_xs):
        state = with_price_state(
            make_pool_state(now=T0),
            oracle_price=dec("1.2"),
            last_price=dec("1.2"),
            xcp_profit=Decimal256.one(),
            xcp_profit_real=Decimal256.one(),
        )
        new = update_price(state, params, T0, dec(1000), balanced_xs, dec("1.2"))

        assert new.price_state.price_scale == Decimal256.one()
        assert new.price_state.xcp_profit_real == Decimal256.one()

    def test_no_repeg_when_oracle_matches(self, params, balanced_xs):
        state = with_price_state(
            make_pool_state(now=T0),
            xcp_profit=Decimal256.one(),
            xcp_profit_real=Decimal256.one(),
        )
        new = update_price(state, params, T0, dec(900), balanced_xs, Decimal256.one())
        assert new.price_state.price_scale == Decimal256.one()
