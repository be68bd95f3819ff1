"""Tests for swaps, simulations and the observation oracle."""

import pytest

from pcl_engine.errors import (
    AllowedSpreadAssertion,
    EmptyPoolError,
    InsufficientOfferAmount,
    InvalidAsset,
    MaxSpreadAssertion,
    ObservationOutOfRange,
    ValidationError,
    ZeroAmount,
)
from pcl_engine.math.fixed_point import Decimal256
from pcl_engine.pool import engine
from tests.helpers import HUNDRED_K, MAKER, OSMO, USD, PoolHelper, make_pool


def dec(value: str | int) -> Decimal256:
    return Decimal256.from_decimal(value)


class TestSwap:
    """Swaps against a balanced 100k/100k pool."""

    def test_reference_swaps(self, funded_helper):
        result = funded_helper.swap(OSMO, 100_000000)
        assert result.ask_asset == USD
        assert result.return_amount == 99_737929

        funded_helper.next_block(1000)
        result = funded_helper.swap(USD, 100_000000)
        assert result.ask_asset == OSMO
        assert result.return_amount == 99_741246

        assert funded_helper.query_d().abs_diff(dec("200000.260415")) < dec("0.000001")

    def test_balances_move_by_offer_and_return(self, funded_helper):
        result = funded_helper.swap(OSMO, 100_000000)
        assert result.balances == (
            HUNDRED_K + 100_000000,
            HUNDRED_K - result.return_amount - result.maker_fee_amount,
        )

    def test_maker_fee_share(self, funded_helper):
        result = funded_helper.swap(OSMO, 100_000000)
        assert result.fee_address == MAKER
        assert result.commission_amount > 0
        assert abs(result.maker_fee_amount * 2 - result.commission_amount) <= 1
        assert funded_helper.maker_collected == [0, result.maker_fee_amount]

    def test_no_maker_fee_without_fee_address(self):
        helper = PoolHelper(fee_address=None)
        helper.provide(HUNDRED_K, HUNDRED_K)
        result = helper.swap(OSMO, 100_000000)
        assert result.maker_fee_amount == 0
        assert result.fee_address is None
        assert result.balances[1] == HUNDRED_K - result.return_amount

    def test_swap_grows_virtual_price(self, funded_helper):
        funded_helper.swap(OSMO, 100_000000)
        assert funded_helper.price_state.xcp_profit_real > Decimal256.one()
        assert funded_helper.price_state.last_price > Decimal256.one()

    def test_spread_within_default(self, funded_helper):
        result = funded_helper.swap(OSMO, 1000_000000)
        assert result.spread_amount < result.return_amount // 200

    def test_large_swap_exceeds_spread(self, funded_helper):
        config = funded_helper.config
        with pytest.raises(MaxSpreadAssertion):
            funded_helper.swap(OSMO, 90_000_000000)
        assert funded_helper.config is config

    def test_large_swap_with_loose_spread(self, funded_helper):
        result = funded_helper.swap(OSMO, 10_000_000000, max_spread=dec("0.5"))
        assert 9_000_000000 < result.return_amount < 10_000_000000

    def test_spread_above_maximum(self, funded_helper):
        with pytest.raises(AllowedSpreadAssertion):
            funded_helper.swap(OSMO, 100_000000, max_spread=dec("0.51"))

    def test_belief_price(self, funded_helper):
        funded_helper.swap(OSMO, 100_000000, belief_price=Decimal256.one(), max_spread=dec("0.01"))
        with pytest.raises(MaxSpreadAssertion):
            funded_helper.swap(OSMO, 100_000000, belief_price=dec("0.9"), max_spread=dec("0.01"))

    def test_zero_amount(self, funded_helper):
        with pytest.raises(ZeroAmount):
            funded_helper.swap(OSMO, 0)

    def test_negative_amount(self, funded_helper):
        config = funded_helper.config
        with pytest.raises(ValidationError):
            funded_helper.swap(OSMO, -100_000000)
        assert funded_helper.config is config

    def test_zero_belief_price(self, funded_helper):
        with pytest.raises(ValidationError):
            funded_helper.swap(OSMO, 100_000000, belief_price=Decimal256.zero())

    def test_empty_pool(self, helper):
        with pytest.raises(EmptyPoolError):
            helper.swap(OSMO, 100_000000)

    def test_unknown_asset(self, funded_helper):
        with pytest.raises(InvalidAsset):
            funded_helper.swap("uatom", 100_000000)

    def test_different_precisions(self):
        helper = PoolHelper(make_pool(decimals=(6, 8)))
        helper.provide(HUNDRED_K, 100_000_00000000)
        result = helper.swap(OSMO, 100_000000)
        # Same trade as the 6/6 pool, with two more decimals on the output
        assert abs(result.return_amount - 99_73792900) <= 300


class TestSimulation:
    def test_simulation_matches_swap(self, funded_helper):
        sim = engine.simulate_swap(funded_helper.config, funded_helper.ctx(), OSMO, 100_000000)
        result = funded_helper.swap(OSMO, 100_000000)
        assert sim.return_amount == result.return_amount
        assert sim.spread_amount == result.spread_amount
        assert sim.commission_amount == result.commission_amount

    def test_simulation_does_not_change_state(self, funded_helper):
        config = funded_helper.config
        engine.simulate_swap(config, funded_helper.ctx(), OSMO, 100_000000)
        assert funded_helper.config is config

    def test_reverse_simulation(self, funded_helper):
        rev = engine.reverse_simulate_swap(funded_helper.config, funded_helper.ctx(), USD, 50_000000)
        assert rev.offer_amount > 50_000000
        assert rev.commission_amount > 0

        sim = engine.simulate_swap(funded_helper.config, funded_helper.ctx(), OSMO, rev.offer_amount)
        assert sim.return_amount >= 50_000000

    def test_reverse_simulation_above_liquidity(self, funded_helper):
        with pytest.raises(ValidationError):
            engine.reverse_simulate_swap(funded_helper.config, funded_helper.ctx(), USD, HUNDRED_K)

    def test_simulation_on_empty_pool(self, helper):
        with pytest.raises(EmptyPoolError):
            engine.simulate_swap(helper.config, helper.ctx(), OSMO, 100)

    def test_negative_amounts(self, funded_helper):
        with pytest.raises(ValidationError):
            engine.simulate_swap(funded_helper.config, funded_helper.ctx(), OSMO, -1)
        with pytest.raises(ValidationError):
            engine.reverse_simulate_swap(funded_helper.config, funded_helper.ctx(), USD, -1)


class TestSwapExactAmountOut:
    def test_receives_at_least_requested(self, funded_helper):
        result = funded_helper.swap_exact_amount_out(USD, 50_000000, 60_000000)
        assert result.ask_asset == USD
        assert result.return_amount >= 50_000000
        assert result.offer_amount <= 60_000000

    def test_offer_matches_reverse_simulation(self, funded_helper):
        rev = engine.reverse_simulate_swap(funded_helper.config, funded_helper.ctx(), OSMO, 50_000000)
        result = funded_helper.swap_exact_amount_out(OSMO, 50_000000, 60_000000)
        assert result.offer_amount == rev.offer_amount

    def test_max_amount_in_too_low(self, funded_helper):
        with pytest.raises(InsufficientOfferAmount):
            funded_helper.swap_exact_amount_out(USD, 50_000000, 50_000000)

    def test_zero_amount(self, funded_helper):
        with pytest.raises(ZeroAmount):
            funded_helper.swap_exact_amount_out(USD, 0, 1)

    def test_negative_amounts(self, funded_helper):
        with pytest.raises(ValidationError):
            funded_helper.swap_exact_amount_out(USD, -50_000000, 60_000000)
        with pytest.raises(ValidationError):
            funded_helper.swap_exact_amount_out(USD, 50_000000, -1)

    def test_empty_pool(self, helper):
        with pytest.raises(EmptyPoolError):
            helper.swap_exact_amount_out(USD, 1, 10)


class TestObservations:
    def test_price_of_previous_block(self, funded_helper):
        first = funded_helper.swap(OSMO, 100_000000)
        funded_helper.next_block(1000)
        funded_helper.swap(USD, 100_000000)

        assert funded_helper.observe(0) == Decimal256.from_ratio(100_000000, first.return_amount)

    def test_price_in_native_units(self):
        helper = PoolHelper(make_pool(decimals=(6, 8)))
        helper.provide(HUNDRED_K, 100_000_00000000)
        first = helper.swap(OSMO, 100_000000)
        helper.next_block(1000)

        # uosmo per 10^-8 uusd
        price = helper.observe(0)
        assert price == Decimal256.from_ratio(100_000000, first.return_amount)
        assert price < dec("0.011")

    def test_observations_aggregate_per_block(self, funded_helper):
        funded_helper.swap(OSMO, 100_000000)
        with pytest.raises(MaxSpreadAssertion):
            funded_helper.swap(OSMO, 90_000_000000)
        funded_helper.swap(USD, 100_000000)

        price1 = funded_helper.observe(0)
        assert len(funded_helper.config.observations) == 0

        # A dust trade commits the previous block without adding its own
        funded_helper.next_block(10)
        funded_helper.swap(USD, 2)
        price2 = funded_helper.observe(0)
        assert price2 == price1
        assert len(funded_helper.config.observations) == 1

        funded_helper.next_block(10)
        funded_helper.swap(USD, 1005)
        price3 = funded_helper.observe(0)
        assert price3.abs_diff(price2) / price2 < dec("0.005")

    def test_pending_block_is_committed_on_query(self, funded_helper):
        funded_helper.swap(OSMO, 100_000000)
        funded_helper.next_block(100)
        assert len(funded_helper.config.observations) == 0
        # The trade block is over, so its moving average answers
        assert funded_helper.observe(50) > Decimal256.one()

    def test_no_observations(self, funded_helper):
        with pytest.raises(ObservationOutOfRange):
            funded_helper.observe(0)

    def test_too_old(self, funded_helper):
        funded_helper.swap(OSMO, 100_000000)
        funded_helper.next_block(100)
        with pytest.raises(ObservationOutOfRange):
            funded_helper.observe(200)


class TestSwapSequence:
    """Large swaps in both directions, 1000 seconds apart."""

    TEN_K = 10_000_000000

    def swap_and_check(self, helper: PoolHelper, offer_asset: str, amount: int) -> None:
        d_before = helper.query_d()
        lp_before = helper.lp_price()
        real_before = helper.price_state.xcp_profit_real
        scale_before = helper.price_state.price_scale

        helper.swap(offer_asset, amount, max_spread=dec("0.5"))

        assert helper.lp_price() >= lp_before
        assert helper.price_state.xcp_profit_real >= real_before
        # D is measured against price_scale, so it is only comparable without a repeg
        if helper.price_state.price_scale == scale_before:
            assert helper.query_d() >= d_before
        helper.next_block(1000)

    def test_virtual_price_never_drops(self, funded_helper):
        funded_helper.next_block(1000)
        for _ in range(4):
            self.swap_and_check(funded_helper, USD, self.TEN_K)
        for _ in range(4):
            self.swap_and_check(funded_helper, OSMO, self.TEN_K)

        ps = funded_helper.price_state
        assert ps.xcp_profit_real > Decimal256.one()
        assert ps.oracle_price != Decimal256.one()

    def test_no_repeg_toward_balance(self, funded_helper):
        """While uusd piles up the oracle points at the balance point."""
        funded_helper.next_block(1000)
        for _ in range(4):
            self.swap_and_check(funded_helper, USD, self.TEN_K)

        ps = funded_helper.price_state
        assert ps.oracle_price < Decimal256.one()
        assert ps.price_scale == Decimal256.one()

    def test_repeg_after_reversal(self, funded_helper):
        """The pool overshoots to uosmo while the oracle still lags below 1."""
        funded_helper.next_block(1000)
        self.swap_and_check(funded_helper, USD, self.TEN_K)
        real = funded_helper.price_state.xcp_profit_real

        self.swap_and_check(funded_helper, OSMO, 2 * self.TEN_K)

        ps = funded_helper.price_state
        assert ps.price_scale < Decimal256.one()
        assert ps.price_scale > ps.oracle_price
        assert ps.xcp_profit_real > real
