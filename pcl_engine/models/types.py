"""Shared type definitions for boundary messages.

Amounts travel as decimal integer strings and fixed-point values as decimal
strings, so no precision is lost in JSON.
"""

import decimal
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from pcl_engine.math.fixed_point import DECIMAL_HIGH_PREC_CONTEXT, UINT256_MAX, Decimal256

# Maximum uint128 value (native token amounts)
UINT128_MAX = 2**128 - 1


def validate_uint128(value: Any) -> str:
    """Validate that a value is a valid uint128 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint128 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint128 range
    """
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool):
        raise ValueError("Uint128 must be string or int, got bool")

    # Accept int directly
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint128 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint128 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint128 cannot be negative: {value}")
    if int_value > UINT128_MAX:
        raise ValueError(f"Uint128 overflow: {value} > 2^128-1")

    return str(int_value)


def validate_decimal(value: Any) -> str:
    """Validate a non-negative fixed-point value with at most 18 decimals.

    Raises:
        ValueError: If value is not a finite non-negative decimal that fits Decimal256
    """
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError(f"Decimal must be a string, got {type(value).__name__}")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        try:
            dec = Decimal(value)
        except InvalidOperation as err:
            raise ValueError(f"Invalid decimal: '{value}'") from err

        if not dec.is_finite():
            raise ValueError(f"Decimal must be finite: '{value}'")
        if dec < 0:
            raise ValueError(f"Decimal cannot be negative: {value}")
        if dec.as_tuple().exponent < -Decimal256.DECIMAL_PLACES:
            raise ValueError(f"Decimal has more than {Decimal256.DECIMAL_PLACES} fractional digits: {value}")
        if dec * Decimal256.ONE > UINT256_MAX:
            raise ValueError(f"Decimal overflow: {value}")

    return str(value)


# Native token amount as decimal string (validated)
Uint128 = Annotated[
    str,
    BeforeValidator(validate_uint128),
    Field(description="128-bit unsigned integer as decimal string"),
]

# 18-decimal fixed-point value as decimal string (validated)
DecimalStr = Annotated[
    str,
    BeforeValidator(validate_decimal),
    Field(description="Non-negative decimal with up to 18 fractional digits"),
]

# Native denomination (e.g. "uosmo", "factory/osmo1.../uusd", "ibc/27394F...")
Denom = Annotated[str, Field(pattern=r"^[a-zA-Z][a-zA-Z0-9/:._-]{1,127}$")]


def to_decimal256(value: str) -> Decimal256:
    """Convert a validated DecimalStr to Decimal256."""
    return Decimal256.from_decimal(value)


def optional_decimal256(value: str | None) -> Decimal256 | None:
    return None if value is None else Decimal256.from_decimal(value)
