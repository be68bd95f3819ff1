"""Protective checks applied before a pool operation commits."""

from __future__ import annotations

from collections.abc import Sequence

from pcl_engine.constants import DEFAULT_SLIPPAGE, MAX_ALLOWED_SLIPPAGE
from pcl_engine.curve.state import PriceState
from pcl_engine.errors import (
    AllowedSpreadAssertion,
    EmptyPoolError,
    MaxSpreadAssertion,
    SlippageExceeded,
    ValidationError,
    ZeroAmount,
)
from pcl_engine.math.fixed_point import Decimal256

_TWO = Decimal256.from_int(2)


def before_swap_check(balances: Sequence[Decimal256], offer_amount: Decimal256) -> None:
    """Reject zero offers and swaps against an empty pool.

    Raises:
        ZeroAmount: If the offer amount is zero
        EmptyPoolError: If either pool balance is zero
    """
    if offer_amount.is_zero():
        raise ZeroAmount("Swap amount must not be zero")
    if any(balance.is_zero() for balance in balances):
        raise EmptyPoolError("One of the pools is empty")


def check_spread_limits(belief_price: Decimal256 | None, max_spread: Decimal256 | None) -> Decimal256:
    """Validate the caller's spread limits before any swap math runs.

    Returns:
        The effective max spread

    Raises:
        ValidationError: If belief_price is zero
        AllowedSpreadAssertion: If max_spread is above MAX_ALLOWED_SLIPPAGE
    """
    if belief_price is not None and belief_price.is_zero():
        raise ValidationError("Belief price must be positive")
    if max_spread is None:
        max_spread = DEFAULT_SLIPPAGE
    if max_spread > MAX_ALLOWED_SLIPPAGE:
        raise AllowedSpreadAssertion(MAX_ALLOWED_SLIPPAGE)
    return max_spread


def assert_max_spread(
    belief_price: Decimal256 | None,
    max_spread: Decimal256 | None,
    offer_amount: int,
    return_amount: int,
    spread_amount: int,
) -> None:
    """Check the swap spread against the caller's limits.

    With a belief price the return is compared with offer_amount / belief_price;
    without one the spread is measured against return_amount + spread_amount.

    Raises:
        ValidationError: If belief_price is zero
        AllowedSpreadAssertion: If max_spread is above MAX_ALLOWED_SLIPPAGE
        MaxSpreadAssertion: If the spread is above max_spread
    """
    max_spread = check_spread_limits(belief_price, max_spread)

    if belief_price is not None:
        expected_return = (Decimal256.from_int(offer_amount) * belief_price.inv()).to_uint(0)
        if return_amount < expected_return:
            shortfall = expected_return - return_amount
            if Decimal256.from_ratio(shortfall, expected_return) > max_spread:
                raise MaxSpreadAssertion()
    elif return_amount + spread_amount > 0:
        if Decimal256.from_ratio(spread_amount, return_amount + spread_amount) > max_spread:
            raise MaxSpreadAssertion()


def assert_slippage_tolerance(
    deposits: Sequence[Decimal256],
    actual_share: Decimal256,
    price_state: PriceState,
    slippage_tolerance: Decimal256 | None,
) -> Decimal256:
    """Compare the minted share with the share a balanced deposit would get.

    Returns:
        The measured slippage

    Raises:
        AllowedSpreadAssertion: If the tolerance is above MAX_ALLOWED_SLIPPAGE
        SlippageExceeded: If the slippage is above the tolerance
    """
    if slippage_tolerance is None:
        slippage_tolerance = DEFAULT_SLIPPAGE
    if slippage_tolerance > MAX_ALLOWED_SLIPPAGE:
        raise AllowedSpreadAssertion(MAX_ALLOWED_SLIPPAGE)

    deposit_value = deposits[0] + deposits[1] * price_state.price_scale
    lp_expected = deposit_value / (_TWO * price_state.price_scale.sqrt()) / price_state.xcp_profit_real
    slippage = lp_expected.saturating_sub(actual_share) / lp_expected

    if slippage > slippage_tolerance:
        raise SlippageExceeded(slippage, slippage_tolerance)
    return slippage
