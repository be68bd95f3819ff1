"""Concentrated-liquidity pool pricing engine."""

__version__ = "0.1.0"

from pcl_engine.math.fixed_point import Decimal256  # noqa: E402
from pcl_engine.pool import ExecutionContext, PoolConfig, engine  # noqa: E402

__all__ = ["Decimal256", "ExecutionContext", "PoolConfig", "engine", "__version__"]
