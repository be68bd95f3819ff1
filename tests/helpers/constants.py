"""Shared test constants."""

from pcl_engine.math.fixed_point import Decimal256

# Pool assets (both 6 decimals)
OSMO = "uosmo"
USD = "uusd"

OWNER = "owner"
MAKER = "maker"

# Reference block
START_TIME = 1_700_000_000
START_HEIGHT = 12_345

# Reference pool parameters
AMP = Decimal256.from_int(40)
GAMMA = Decimal256.from_decimal("0.000145")
MID_FEE = Decimal256.from_decimal("0.0026")
OUT_FEE = Decimal256.from_decimal("0.0045")
FEE_GAMMA = Decimal256.from_decimal("0.00023")
REPEG_PROFIT_THRESHOLD = Decimal256.from_decimal("0.000002")
MIN_PRICE_SCALE_DELTA = Decimal256.from_decimal("0.000146")
MA_HALF_TIME = 600
MAKER_FEE_SHARE = Decimal256.from_decimal("0.5")

# 100,000 tokens with 6 decimals
HUNDRED_K = 100_000_000000
