"""Test helpers for the pool engine."""

from tests.helpers.constants import HUNDRED_K, MAKER, OSMO, OWNER, USD
from tests.helpers.factories import PoolHelper, make_pool, make_pool_params, make_pool_state

__all__ = [
    "HUNDRED_K",
    "MAKER",
    "OSMO",
    "OWNER",
    "USD",
    "PoolHelper",
    "make_pool",
    "make_pool_params",
    "make_pool_state",
]
