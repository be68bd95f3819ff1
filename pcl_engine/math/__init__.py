"""Mathematical utilities for the pool engine.

This package provides the numeric primitive shared by every component:
- Decimal256: 18-decimal unsigned fixed-point arithmetic
"""

from pcl_engine.math.fixed_point import Decimal256, half_pow

__all__ = ["Decimal256", "half_pow"]
