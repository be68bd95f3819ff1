"""Dynamic fee model.

The fee rate moves from mid_fee (balanced pool) toward out_fee (imbalanced
pool) depending on how far the internal balances are from equilibrium.
"""

from __future__ import annotations

from collections.abc import Sequence

from pcl_engine.constants import FEE_EPS
from pcl_engine.curve.params import PoolParams
from pcl_engine.math.fixed_point import Decimal256

_TWO = Decimal256.from_int(2)
_FOUR = Decimal256.from_int(4)


def fee_rate(xp: Sequence[Decimal256], params: PoolParams) -> Decimal256:
    """Fee rate for internal balances `xp`.

    k = fee_gamma / (fee_gamma + 1 - 4 * x0 * x1 / (x0 + x1)^2)
    rate = k * mid_fee + (1 - k) * out_fee

    Returns:
        A rate in [mid_fee, out_fee]
    """
    total = xp[0] + xp[1]
    if total.is_zero():
        return params.out_fee

    balance = (_FOUR * xp[0] * xp[1]) / (total * total)
    k = params.fee_gamma / (params.fee_gamma + Decimal256.one().saturating_sub(balance))
    if k <= FEE_EPS:
        k = Decimal256.zero()

    return k * params.mid_fee + k.complement() * params.out_fee


def calc_provide_fee(
    deposits: Sequence[Decimal256],
    xp: Sequence[Decimal256],
    params: PoolParams,
) -> Decimal256:
    """Fee rate charged on the minted LP share of an imbalanced provide.

    Args:
        deposits: Deposited amounts, asset 1 already scaled by price_scale
        xp: Internal balances after the deposit
        params: Pool parameters

    Returns:
        (|d0 - avg| + |d1 - avg|) * fee_rate(xp) * 2 / (4 * (d0 + d1)),
        zero for an empty deposit
    """
    total = deposits[0] + deposits[1]
    if total.is_zero():
        return Decimal256.zero()

    avg = total / _TWO
    imbalance = deposits[0].abs_diff(avg) + deposits[1].abs_diff(avg)
    fee = fee_rate(xp, params) * _TWO / _FOUR
    return imbalance * fee / total


def split_fee(total_fee: Decimal256, maker_fee_share: Decimal256) -> tuple[Decimal256, Decimal256]:
    """Split a fee between LPs and the maker.

    Returns:
        (lp_fee, maker_fee) with lp_fee + maker_fee == total_fee
    """
    maker_fee = total_fee * maker_fee_share
    return total_fee - maker_fee, maker_fee
