"""Pool fee and repeg parameters."""

from __future__ import annotations

from dataclasses import dataclass, replace

from pcl_engine.constants import (
    FEE_GAMMA_MAX,
    FEE_GAMMA_MIN,
    MA_HALF_TIME_MAX,
    MA_HALF_TIME_MIN,
    MAX_FEE,
    MIN_FEE,
    PRICE_SCALE_DELTA_MAX,
    PRICE_SCALE_DELTA_MIN,
    REPEG_PROFIT_THRESHOLD_MAX,
    REPEG_PROFIT_THRESHOLD_MIN,
)
from pcl_engine.errors import IncorrectPoolParam
from pcl_engine.math.fixed_point import Decimal256


def _validate(name: str, value: Decimal256 | int, min_value: Decimal256 | int, max_value: Decimal256 | int) -> None:
    if not min_value <= value <= max_value:
        raise IncorrectPoolParam(name, min_value, max_value)


@dataclass(frozen=True)
class UpdatePoolParams:
    """Partial update of PoolParams. None leaves the field unchanged."""

    mid_fee: Decimal256 | None = None
    out_fee: Decimal256 | None = None
    fee_gamma: Decimal256 | None = None
    repeg_profit_threshold: Decimal256 | None = None
    min_price_scale_delta: Decimal256 | None = None
    ma_half_time: int | None = None


@dataclass(frozen=True)
class PoolParams:
    """Fee and repeg parameters of a pool.

    Attributes:
        mid_fee: Fee rate charged when the pool is balanced
        out_fee: Fee rate charged when the pool is fully imbalanced
        fee_gamma: Controls how fast the fee moves from mid_fee to out_fee
        repeg_profit_threshold: Extra profit required before repegging
        min_price_scale_delta: Minimum relative price_scale step
        ma_half_time: Oracle EMA half time, in seconds
    """

    mid_fee: Decimal256
    out_fee: Decimal256
    fee_gamma: Decimal256
    repeg_profit_threshold: Decimal256
    min_price_scale_delta: Decimal256
    ma_half_time: int

    def validate(self) -> PoolParams:
        """Check every field against its allowed range.

        Returns:
            self, so the call can be chained after construction

        Raises:
            IncorrectPoolParam: On the first field out of range
        """
        _validate("mid_fee", self.mid_fee, MIN_FEE, MAX_FEE)
        _validate("out_fee", self.out_fee, MIN_FEE, MAX_FEE)
        if self.mid_fee > self.out_fee:
            raise IncorrectPoolParam("out_fee", self.mid_fee, MAX_FEE)
        _validate("fee_gamma", self.fee_gamma, FEE_GAMMA_MIN, FEE_GAMMA_MAX)
        if self.fee_gamma.is_zero():
            raise IncorrectPoolParam("fee_gamma", FEE_GAMMA_MIN, FEE_GAMMA_MAX)
        _validate(
            "repeg_profit_threshold",
            self.repeg_profit_threshold,
            REPEG_PROFIT_THRESHOLD_MIN,
            REPEG_PROFIT_THRESHOLD_MAX,
        )
        _validate(
            "min_price_scale_delta",
            self.min_price_scale_delta,
            PRICE_SCALE_DELTA_MIN,
            PRICE_SCALE_DELTA_MAX,
        )
        _validate("ma_half_time", self.ma_half_time, MA_HALF_TIME_MIN, MA_HALF_TIME_MAX)
        return self

    def update(self, update: UpdatePoolParams) -> PoolParams:
        """Apply a partial update and validate the result."""
        changes = {
            name: value
            for name, value in (
                ("mid_fee", update.mid_fee),
                ("out_fee", update.out_fee),
                ("fee_gamma", update.fee_gamma),
                ("repeg_profit_threshold", update.repeg_profit_threshold),
                ("min_price_scale_delta", update.min_price_scale_delta),
                ("ma_half_time", update.ma_half_time),
            )
            if value is not None
        }
        return replace(self, **changes).validate()
