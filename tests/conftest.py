"""Pytest configuration and fixtures."""

import pytest

from pcl_engine.curve.params import PoolParams
from pcl_engine.math.fixed_point import Decimal256
from tests.helpers import HUNDRED_K, PoolHelper, make_pool, make_pool_params


@pytest.fixture
def pool_params() -> PoolParams:
    """Reference pool parameters."""
    return make_pool_params()


@pytest.fixture
def helper() -> PoolHelper:
    """Empty uosmo/uusd pool at price_scale 1."""
    return PoolHelper()


@pytest.fixture
def funded_helper(helper: PoolHelper) -> PoolHelper:
    """Pool holding 100,000 of each asset."""
    helper.provide(HUNDRED_K, HUNDRED_K)
    return helper


@pytest.fixture
def scaled_helper() -> PoolHelper:
    """Empty pool with price_scale 2."""
    return PoolHelper(make_pool(price_scale=Decimal256.from_int(2)))
