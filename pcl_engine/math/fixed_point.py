"""256-bit unsigned fixed-point decimal with 18 fractional digits.

This is the single numeric type used by the solver, the fee model, the oracle
and the pool state. Values are stored as integers scaled by 10^18 and must
fit in a uint256.

Rounding follows the on-chain Decimal256 convention: multiplication and
division truncate toward zero, and only the conversion to a native amount
has a rounding-up variant. Subtraction below zero raises instead of wrapping.

The natural exponential `exp` is the 18-decimal LogExpMath algorithm
(digit extraction followed by a Taylor series) and backs `half_pow`, which
the oracle uses for its moving-average decay.
"""

from __future__ import annotations

import decimal
from decimal import ROUND_DOWN, Decimal
from math import isqrt
from typing import ClassVar

from pcl_engine.errors import ArithmeticOverflow, ArithmeticUnderflow, DivisionByZero

__all__ = [
    # Classes
    "Decimal256",
    # Functions
    "exp",
    "half_pow",
    # Constants
    "ONE_18",
    "ONE_20",
    "UINT256_MAX",
    "DECIMAL_HIGH_PREC_CONTEXT",
]

# =============================================================================
# Constants
# =============================================================================

ONE_18 = 10**18
ONE_20 = 10**20

UINT256_MAX = 2**256 - 1

# 78 digits of precision - enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)

# e^-41 is close to zero; half_pow never needs a larger magnitude
MAX_NATURAL_EXPONENT = 41 * ONE_18

# ln(2) in 18-decimal fixed-point
LN_2 = 693_147_180_559_945_309

# Pre-computed constants for digit extraction in 20-decimal precision
# x values represent exponents (powers of 2), a values are e^x
X_20 = {
    2: 3_200_000_000_000_000_000_000,  # 32 * ONE_20 = 2^5
    3: 1_600_000_000_000_000_000_000,  # 16 * ONE_20 = 2^4
    4: 800_000_000_000_000_000_000,  # 8 * ONE_20 = 2^3
    5: 400_000_000_000_000_000_000,  # 4 * ONE_20 = 2^2
    6: 200_000_000_000_000_000_000,  # 2 * ONE_20 = 2^1
    7: 100_000_000_000_000_000_000,  # 1 * ONE_20 = 2^0
    8: 50_000_000_000_000_000_000,  # 0.5 * ONE_20 = 2^-1
    9: 25_000_000_000_000_000_000,  # 0.25 * ONE_20 = 2^-2
}
A_20 = {
    2: 7_896_296_018_268_069_516_100_000_000_000_000,  # e^32
    3: 888_611_052_050_787_263_676_000_000,  # e^16
    4: 298_095_798_704_172_827_474_000,  # e^8
    5: 5_459_815_003_314_423_907_810,  # e^4
    6: 738_905_609_893_065_022_723,  # e^2
    7: 271_828_182_845_904_523_536,  # e^1
    8: 164_872_127_070_012_814_685,  # e^0.5
    9: 128_402_541_668_774_148_407,  # e^0.25
}


# =============================================================================
# Exponential
# =============================================================================


def exp(x: int) -> int:
    """Compute e^x where x is signed 18-decimal fixed-point.

    Args:
        x: Exponent in 18-decimal fixed-point (can be negative).

    Returns:
        e^x as 18-decimal fixed-point integer.

    Raises:
        ArithmeticOverflow: If |x| is above MAX_NATURAL_EXPONENT
    """
    if abs(x) > MAX_NATURAL_EXPONENT:
        raise ArithmeticOverflow(f"Exponent {x} outside valid range")

    if x < 0:
        # e^-x = 1 / e^x
        return (ONE_18 * ONE_18) // exp(-x)

    # Scale to 20-decimal precision
    x *= 100

    # Extract medium powers of e (20-decimal)
    product = ONE_20
    for i in range(2, 10):
        if x >= X_20[i]:
            x -= X_20[i]
            product = (product * A_20[i]) // ONE_20

    # Taylor series: e^x = 1 + x + x^2/2! + x^3/3! + ... + x^12/12!
    series_sum = ONE_20
    term = x
    series_sum += term

    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return ((product * series_sum) // ONE_20) // 100


def half_pow(power: Decimal256) -> Decimal256:
    """Compute 0.5^power for a non-negative fixed-point power.

    0.5^p = e^(-p * ln 2). Powers beyond the exponent range underflow to 0.
    """
    exponent = (power.value * LN_2) // ONE_18
    if exponent > MAX_NATURAL_EXPONENT:
        return Decimal256.zero()
    return Decimal256(exp(-exponent))


# =============================================================================
# Decimal256
# =============================================================================


class Decimal256:
    """Unsigned 18-decimal fixed-point number stored as int.

    All values are stored as integers scaled by 10^18.
    Example: 1.5 is stored as 1_500_000_000_000_000_000

    Operators `+ - * /` are available and truncate toward zero.
    """

    ONE: ClassVar[int] = ONE_18
    DECIMAL_PLACES: ClassVar[int] = 18

    __slots__ = ("value",)

    value: int

    def __init__(self, value: int) -> None:
        """Create Decimal256 from raw scaled value."""
        if value < 0:
            raise ArithmeticUnderflow(f"Decimal256 cannot be negative: {value}")
        if value > UINT256_MAX:
            raise ArithmeticOverflow(f"Decimal256 overflow: {value} > 2^256-1")
        self.value = value

    # --- Constructors ---

    @classmethod
    def zero(cls) -> Decimal256:
        return cls(0)

    @classmethod
    def one(cls) -> Decimal256:
        return cls(cls.ONE)

    @classmethod
    def raw(cls, value: int) -> Decimal256:
        """Create from raw value (already scaled to 18 decimals)."""
        return cls(value)

    @classmethod
    def from_int(cls, i: int) -> Decimal256:
        """Create from integer (will be scaled by 10^18)."""
        return cls(i * cls.ONE)

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> Decimal256:
        """Create numerator/denominator, truncated to 18 decimals."""
        if denominator == 0:
            raise DivisionByZero(f"Division by zero: {numerator} / 0")
        return cls((numerator * cls.ONE) // denominator)

    @classmethod
    def from_decimal(cls, d: Decimal | str | int) -> Decimal256:
        """Create from a decimal value, truncating beyond 18 decimals.

        Requires non-negative input (matches unsigned semantics).
        """
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            dec = Decimal(d)
            if dec < 0:
                raise ArithmeticUnderflow(f"Decimal256 requires non-negative input, got {d}")
            scaled = (dec * cls.ONE).to_integral_value(rounding=ROUND_DOWN)
        return cls(int(scaled))

    @classmethod
    def with_precision(cls, amount: int, precision: int) -> Decimal256:
        """Interpret an integer amount that has `precision` decimals."""
        if not 0 <= precision <= cls.DECIMAL_PLACES:
            raise ValueError(f"Precision must be in [0, {cls.DECIMAL_PLACES}], got {precision}")
        return cls(amount * 10 ** (cls.DECIMAL_PLACES - precision))

    # --- Conversions ---

    def to_decimal(self) -> Decimal:
        """Convert to Decimal (exact)."""
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return Decimal(self.value) / Decimal(self.ONE)

    def to_uint(self, precision: int) -> int:
        """Convert to an integer amount with `precision` decimals, rounding down."""
        if not 0 <= precision <= self.DECIMAL_PLACES:
            raise ValueError(f"Precision must be in [0, {self.DECIMAL_PLACES}], got {precision}")
        return self.value // 10 ** (self.DECIMAL_PLACES - precision)

    def to_uint_up(self, precision: int) -> int:
        """Convert to an integer amount with `precision` decimals, rounding up."""
        if not 0 <= precision <= self.DECIMAL_PLACES:
            raise ValueError(f"Precision must be in [0, {self.DECIMAL_PLACES}], got {precision}")
        factor = 10 ** (self.DECIMAL_PLACES - precision)
        if self.value == 0:
            return 0
        return (self.value - 1) // factor + 1

    # --- Rounding-aware arithmetic ---

    def mul_down(self, other: Decimal256) -> Decimal256:
        """Multiply with floor rounding: (a * b) // 10^18"""
        return Decimal256((self.value * other.value) // self.ONE)

    def div_down(self, other: Decimal256) -> Decimal256:
        """Divide with floor rounding: (a * 10^18) // b"""
        if other.value == 0:
            raise DivisionByZero("Decimal256 division by zero")
        return Decimal256((self.value * self.ONE) // other.value)

    def saturating_sub(self, other: Decimal256) -> Decimal256:
        """Subtract other from self. Clamps to 0 if result would be negative."""
        return Decimal256(max(0, self.value - other.value))

    def abs_diff(self, other: Decimal256) -> Decimal256:
        """|self - other|"""
        return Decimal256(abs(self.value - other.value))

    def complement(self) -> Decimal256:
        """Return 1 - self. Clamps to 0 if self > 1."""
        return Decimal256(max(0, self.ONE - self.value))

    def inv(self) -> Decimal256:
        """Return 1 / self."""
        return Decimal256.one().div_down(self)

    def sqrt(self) -> Decimal256:
        """Square root, rounded down."""
        return Decimal256(isqrt(self.value * self.ONE))

    def is_zero(self) -> bool:
        return self.value == 0

    # --- Operators ---

    def __add__(self, other: Decimal256) -> Decimal256:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return Decimal256(self.value + other.value)

    def __sub__(self, other: Decimal256) -> Decimal256:
        """Subtract other from self.

        Raises:
            ArithmeticUnderflow: If result would be negative
        """
        if not isinstance(other, Decimal256):
            return NotImplemented
        result = self.value - other.value
        if result < 0:
            raise ArithmeticUnderflow(f"Underflow: {self} - {other}")
        return Decimal256(result)

    def __mul__(self, other: Decimal256) -> Decimal256:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return self.mul_down(other)

    def __truediv__(self, other: Decimal256) -> Decimal256:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return self.div_down(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Decimal256):
            return NotImplemented
        return self.value >= other.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __bool__(self) -> bool:
        return self.value != 0

    def __repr__(self) -> str:
        return f"Decimal256({self.value})"

    def __str__(self) -> str:
        """Render like the on-chain type: no trailing zeros, no exponent."""
        whole, frac = divmod(self.value, self.ONE)
        if frac == 0:
            return str(whole)
        return f"{whole}.{frac:018d}".rstrip("0")
