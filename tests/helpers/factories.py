"""Factory functions and a ledger helper for pool tests.

Usage:
    from tests.helpers import PoolHelper

    helper = PoolHelper()
    helper.provide(HUNDRED_K, HUNDRED_K)
    result = helper.swap(OSMO, 100_000000)
"""

from __future__ import annotations

from dataclasses import replace

from pcl_engine.curve.params import PoolParams
from pcl_engine.curve.state import AmpGamma, PoolState, PriceState
from pcl_engine.math.fixed_point import Decimal256
from pcl_engine.pool import engine
from pcl_engine.pool.state import ExecutionContext, PoolConfig, ProvideResult, SwapResult, WithdrawResult
from tests.helpers.constants import (
    AMP,
    FEE_GAMMA,
    GAMMA,
    MA_HALF_TIME,
    MAKER,
    MAKER_FEE_SHARE,
    MID_FEE,
    MIN_PRICE_SCALE_DELTA,
    OSMO,
    OUT_FEE,
    OWNER,
    REPEG_PROFIT_THRESHOLD,
    START_HEIGHT,
    START_TIME,
    USD,
)


def make_pool_params(**overrides: object) -> PoolParams:
    """Create reference PoolParams, overriding any field by keyword."""
    params = PoolParams(
        mid_fee=MID_FEE,
        out_fee=OUT_FEE,
        fee_gamma=FEE_GAMMA,
        repeg_profit_threshold=REPEG_PROFIT_THRESHOLD,
        min_price_scale_delta=MIN_PRICE_SCALE_DELTA,
        ma_half_time=MA_HALF_TIME,
    )
    return replace(params, **overrides)


def make_pool_state(
    amp: Decimal256 = AMP,
    gamma: Decimal256 = GAMMA,
    price_scale: Decimal256 | None = None,
    now: int = START_TIME,
) -> PoolState:
    """Create a fresh PoolState with optional overrides."""
    return PoolState.initial_state(AmpGamma(amp=amp, gamma=gamma), price_scale or Decimal256.one(), now)


def make_pool(
    price_scale: Decimal256 | None = None,
    amp: Decimal256 = AMP,
    gamma: Decimal256 = GAMMA,
    decimals: tuple[int, int] = (6, 6),
    track_asset_balances: bool = False,
    **param_overrides: object,
) -> PoolConfig:
    """Create a uosmo/uusd pool config with the reference parameters."""
    return engine.create_pool(
        precisions={OSMO: decimals[0], USD: decimals[1]},
        amp=amp,
        gamma=gamma,
        params=make_pool_params(**param_overrides),
        price_scale=price_scale or Decimal256.one(),
        owner=OWNER,
        block_time=START_TIME,
        block_height=START_HEIGHT,
        track_asset_balances=track_asset_balances,
    )


class PoolHelper:
    """Drives the engine the way a ledger would.

    Keeps the pool balances, the LP supply and the block clock, builds the
    ExecutionContext for each call and applies the returned balance
    movements.
    """

    def __init__(
        self,
        config: PoolConfig | None = None,
        fee_address: str | None = MAKER,
        maker_fee_share: Decimal256 = MAKER_FEE_SHARE,
    ) -> None:
        self.config = config or make_pool()
        self.balances = (0, 0)
        self.total_share = 0
        self.time = START_TIME
        self.height = START_HEIGHT
        self.fee_address = fee_address
        self.maker_fee_share = maker_fee_share
        self.maker_collected = [0, 0]

    def ctx(self, sender: str | None = None) -> ExecutionContext:
        return ExecutionContext(
            block_time=self.time,
            block_height=self.height,
            balances=self.balances,
            total_share=self.total_share,
            maker_fee_share=self.maker_fee_share,
            fee_address=self.fee_address,
            sender=sender,
        )

    def next_block(self, seconds: int = 5) -> None:
        self.time += seconds
        self.height += 1

    def provide(self, amount0: int, amount1: int, slippage_tolerance: Decimal256 | None = None) -> ProvideResult:
        assets = [(OSMO, amount0), (USD, amount1)]
        self.config, result = engine.provide(self.config, self.ctx(), assets, slippage_tolerance)
        self.balances = result.balances
        self.total_share += result.share + result.minted_to_pool
        return result

    def withdraw(self, lp_amount: int) -> WithdrawResult:
        self.config, result = engine.withdraw(self.config, self.ctx(), lp_amount)
        self.balances = result.balances
        self.total_share -= result.burned
        return result

    def swap(
        self,
        offer_asset: str,
        amount: int,
        belief_price: Decimal256 | None = None,
        max_spread: Decimal256 | None = None,
    ) -> SwapResult:
        self.config, result = engine.swap(self.config, self.ctx(), offer_asset, amount, belief_price, max_spread)
        self._apply_swap(result)
        return result

    def swap_exact_amount_out(self, ask_asset: str, amount_out: int, max_amount_in: int) -> SwapResult:
        self.config, result = engine.swap_exact_amount_out(self.config, self.ctx(), ask_asset, amount_out, max_amount_in)
        self._apply_swap(result)
        return result

    def _apply_swap(self, result: SwapResult) -> None:
        self.balances = result.balances
        ask_ind = self.config.precisions.index_of(result.ask_asset)
        self.maker_collected[ask_ind] += result.maker_fee_amount

    def query_d(self) -> Decimal256:
        return engine.compute_d(self.config, self.ctx())

    def observe(self, seconds_ago: int = 0) -> Decimal256:
        return engine.observe(self.config, self.ctx(), seconds_ago).price

    def lp_price(self) -> Decimal256:
        return engine.lp_price(self.config, self.ctx())

    @property
    def price_state(self) -> PriceState:
        return self.config.state.price_state
