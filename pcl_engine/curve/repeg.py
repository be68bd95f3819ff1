"""Internal oracle and price_scale repegging.

After every trade (and every imbalanced provide) the pool:
    1. decays its EMA oracle toward the last traded price,
    2. tracks LP virtual price growth (xcp_profit_real),
    3. moves price_scale a damped step toward the oracle when enough
       profit has accrued and the move does not lower the virtual price.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

import structlog

from pcl_engine.curve.invariant import calc_d, get_xcp
from pcl_engine.curve.params import PoolParams
from pcl_engine.curve.scheduler import get_amp_gamma, is_changing
from pcl_engine.curve.state import PoolState
from pcl_engine.errors import XcpProfitLoss
from pcl_engine.math.fixed_point import Decimal256, half_pow

logger = structlog.get_logger()

_TWO = Decimal256.from_int(2)
_TEN = Decimal256.from_int(10)


def update_price(
    state: PoolState,
    params: PoolParams,
    now: int,
    total_lp: Decimal256,
    cur_xs: Sequence[Decimal256],
    cur_price: Decimal256,
) -> PoolState:
    """Update oracle, virtual price and possibly price_scale.

    Args:
        state: Current pool state
        params: Pool parameters (ma_half_time, thresholds)
        now: Block time
        total_lp: LP supply after the operation, in 18-decimal units
        cur_xs: Internal balances after the operation (asset 1 scaled by
            the current price_scale)
        cur_price: Price of the operation (asset 0 per asset 1)

    Returns:
        The new PoolState

    Raises:
        XcpProfitLoss: If the virtual price dropped outside of an amp/gamma ramp
    """
    amp_gamma = get_amp_gamma(state, now)
    ps = state.price_state

    oracle_price = ps.oracle_price
    last_price_update = ps.last_price_update
    if now > ps.last_price_update:
        alpha = half_pow(Decimal256.from_ratio(now - ps.last_price_update, params.ma_half_time))
        oracle_price = ps.last_price * alpha.complement() + ps.oracle_price * alpha
        last_price_update = now

    xcp_profit = ps.xcp_profit
    xcp_profit_real = ps.xcp_profit_real

    d = calc_d(cur_xs, amp_gamma)
    xcp = get_xcp(d, ps.price_scale)

    if not xcp_profit_real.is_zero():
        new_real = xcp / total_lp
        if new_real < xcp_profit_real and not is_changing(state, now):
            raise XcpProfitLoss()
        xcp_profit = xcp_profit * new_real / xcp_profit_real
        xcp_profit_real = new_real

    price_scale = ps.price_scale
    norm = oracle_price.abs_diff(price_scale) / price_scale
    scale_delta = max(params.min_price_scale_delta, norm / _TEN)

    profit_target = xcp_profit.saturating_sub(Decimal256.one()) / _TWO + params.repeg_profit_threshold
    if (
        not norm.is_zero()
        and norm >= scale_delta
        and xcp_profit_real.saturating_sub(Decimal256.one()) > profit_target
    ):
        numerator = price_scale * (norm - scale_delta) + scale_delta * oracle_price
        price_scale_new = numerator / norm

        xs = [cur_xs[0], cur_xs[1] * price_scale_new / price_scale]
        new_d = calc_d(xs, amp_gamma)
        new_xcp_profit_real = get_xcp(new_d, price_scale_new) / total_lp

        # LPs must not lose virtual price to the move and keep half of the accrued profit
        if (
            new_xcp_profit_real >= xcp_profit_real
            and _TWO * new_xcp_profit_real > xcp_profit + Decimal256.one()
        ):
            logger.debug(
                "price_scale_repegged",
                old_price_scale=str(price_scale),
                new_price_scale=str(price_scale_new),
                oracle_price=str(oracle_price),
            )
            price_scale = price_scale_new
            xcp_profit_real = new_xcp_profit_real

    return replace(
        state,
        price_state=replace(
            ps,
            oracle_price=oracle_price,
            last_price=cur_price,
            price_scale=price_scale,
            last_price_update=last_price_update,
            xcp_profit=xcp_profit,
            xcp_profit_real=xcp_profit_real,
        ),
    )
