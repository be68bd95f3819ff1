"""Engine configuration."""

from dataclasses import dataclass

from pcl_engine.constants import (
    LP_TOKEN_PRECISION,
    MIN_TRADE_SIZE,
    MINIMUM_LIQUIDITY_AMOUNT,
    OBSERVATIONS_SIZE,
)
from pcl_engine.math.fixed_point import Decimal256


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for pool operations.

    This dataclass holds the tunable constants of the engine, making it easy
    to test with different configurations and ensuring consistency across
    the codebase.

    Attributes:
        observations_size: Capacity of the TWAP observation ring buffer
        min_trade_size: Trades below this size skip oracle and observation updates
        minimum_liquidity_amount: LP amount locked forever by the first provide
        lp_token_precision: Decimals of the LP token
    """

    observations_size: int = OBSERVATIONS_SIZE
    min_trade_size: Decimal256 = MIN_TRADE_SIZE
    minimum_liquidity_amount: int = MINIMUM_LIQUIDITY_AMOUNT
    lp_token_precision: int = LP_TOKEN_PRECISION

    def __post_init__(self) -> None:
        if self.observations_size <= 0:
            raise ValueError(f"observations_size must be positive, got {self.observations_size}")
        if not 0 <= self.lp_token_precision <= Decimal256.DECIMAL_PLACES:
            raise ValueError(f"lp_token_precision out of range: {self.lp_token_precision}")


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
