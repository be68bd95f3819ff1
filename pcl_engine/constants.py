"""Protocol constants for the concentrated-liquidity pool engine.

Centralizes the numeric limits shared by the curve math, the oracle and
the pool operations.
"""

from decimal import Decimal

from pcl_engine.math.fixed_point import Decimal256

# Number of assets in a pool
N_COINS = 2

# Newton-Raphson bounds for the invariant solver
MAX_ITER = 255
# Convergence tolerance: one smallest unit of the 18-decimal representation
SOLVER_TOLERANCE = Decimal("1e-18")

# Trades below this size (in 18-decimal units of either asset) do not move
# the oracle and are not observed
MIN_TRADE_SIZE = Decimal256.from_decimal("0.001")

# LP tokens permanently locked in the pool by the first provide (raw LP units)
MINIMUM_LIQUIDITY_AMOUNT = 1000
# Decimals of the LP token
LP_TOKEN_PRECISION = 6

# Fee rates below this weight are treated as zero
FEE_EPS = Decimal256.raw(1000)  # 1e-15

# Slippage tolerance applied when the caller does not set one (0.5%)
DEFAULT_SLIPPAGE = Decimal256.from_decimal("0.005")
# Upper bound for caller-supplied slippage and spread
MAX_ALLOWED_SLIPPAGE = Decimal256.from_decimal("0.5")

# Parameter bounds
AMP_MIN = Decimal256.from_decimal("0.1")
AMP_MAX = Decimal256.from_int(100_000)
GAMMA_MIN = Decimal256.from_decimal("0.00000001")
GAMMA_MAX = Decimal256.from_decimal("0.02")

MIN_FEE = Decimal256.from_decimal("0.000001")
MAX_FEE = Decimal256.from_decimal("0.5")
FEE_GAMMA_MIN = Decimal256.zero()
FEE_GAMMA_MAX = Decimal256.one()
REPEG_PROFIT_THRESHOLD_MIN = Decimal256.zero()
REPEG_PROFIT_THRESHOLD_MAX = Decimal256.from_decimal("0.01")
PRICE_SCALE_DELTA_MIN = Decimal256.zero()
PRICE_SCALE_DELTA_MAX = Decimal256.one()
MA_HALF_TIME_MIN = 1
MA_HALF_TIME_MAX = 7 * 86400

# Amp/gamma promotion limits
MIN_AMP_CHANGING_TIME = 86400
MAX_CHANGE = Decimal256.from_decimal("0.1")

# Capacity of the observation ring buffer
OBSERVATIONS_SIZE = 3000
