"""Curve math: invariant solver, fees, amp/gamma schedule, repeg."""

from .fees import calc_provide_fee, fee_rate, split_fee
from .invariant import calc_d, calc_y, get_xcp
from .params import PoolParams, UpdatePoolParams
from .repeg import update_price
from .scheduler import get_amp_gamma, is_changing, promote_params, stop_promotion
from .state import AmpGamma, PoolState, PriceState

__all__ = [
    "AmpGamma",
    "PoolParams",
    "PoolState",
    "PriceState",
    "UpdatePoolParams",
    "calc_d",
    "calc_provide_fee",
    "calc_y",
    "fee_rate",
    "get_amp_gamma",
    "get_xcp",
    "is_changing",
    "promote_params",
    "split_fee",
    "stop_promotion",
    "update_price",
]
