"""Concentrated-liquidity invariant math.

The two-asset curve blends a constant-sum and a constant-product invariant.
With internal balances x0, x1 (asset 1 already scaled by price_scale) and
invariant D:

    K0 = 4 * x0 * x1 / D^2
    K  = amp * gamma^2 * K0 / (gamma + 1 - K0)^2
    F(D, x) = K * D * (x0 + x1) + x0 * x1 - K * D^2 - D^2 / 4 = 0

Both D and a single balance are found with Newton-Raphson. The iteration
runs in a 78-digit decimal context and the result is truncated back to
18 decimals, so the step never oscillates around the last fixed-point unit.
"""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from decimal import Decimal

from pcl_engine.constants import MAX_ITER, SOLVER_TOLERANCE
from pcl_engine.curve.state import AmpGamma
from pcl_engine.errors import ConvergenceError, ZeroBalanceError
from pcl_engine.math.fixed_point import DECIMAL_HIGH_PREC_CONTEXT, Decimal256

_TWO = Decimal(2)
_FOUR = Decimal(4)


def _k(d: Decimal, x0: Decimal, x1: Decimal, amp: Decimal, gamma: Decimal) -> tuple[Decimal, Decimal]:
    """Return (K0, K) for the given D and balances."""
    k0 = _FOUR * x0 * x1 / (d * d)
    k = amp * gamma * gamma * k0 / ((gamma + 1 - k0) ** 2)
    return k0, k


def _f(d: Decimal, x0: Decimal, x1: Decimal, amp: Decimal, gamma: Decimal) -> Decimal:
    _, k = _k(d, x0, x1, amp, gamma)
    return k * d * (x0 + x1) + x0 * x1 - k * d * d - d * d / _FOUR


def _df_dd(d: Decimal, x0: Decimal, x1: Decimal, amp: Decimal, gamma: Decimal) -> Decimal:
    """Partial derivative of F with respect to D."""
    k0, k = _k(d, x0, x1, amp, gamma)
    k_d = -x0 * x1 * 8 * amp * gamma * gamma * (gamma + 1 + k0) / (d**3 * (gamma + 1 - k0) ** 3)
    return (k_d * d + k) * (x0 + x1) - (k_d * d + 2 * k) * d - d / _TWO


def _df_dx(d: Decimal, x: Decimal, x_other: Decimal, amp: Decimal, gamma: Decimal) -> Decimal:
    """Partial derivative of F with respect to the balance `x`."""
    k0, k = _k(d, x, x_other, amp, gamma)
    k_x = x_other * 4 * amp * gamma * gamma * (gamma + 1 + k0) / (d * d * (gamma + 1 - k0) ** 3)
    return (k_x * (x + x_other) + k) * d + x_other - k_x * d * d


def _check_balances(xs: Sequence[Decimal256]) -> None:
    if len(xs) != 2:
        raise ValueError(f"Expected 2 balances, got {len(xs)}")
    for i, x in enumerate(xs):
        if x.is_zero():
            raise ZeroBalanceError(f"Balance at index {i} must be positive")


def calc_d(xs: Sequence[Decimal256], amp_gamma: AmpGamma) -> Decimal256:
    """Calculate the invariant D for internal balances `xs`.

    Algorithm:
        1. Initial guess: D = 2 * sqrt(x0 * x1)
        2. Newton step D -= F(D) / F'(D) until the step is <= 1e-18
        3. Max iterations: 255

    Args:
        xs: Internal balances [x0, x1 * price_scale]
        amp_gamma: Effective amplification and curvature

    Returns:
        D truncated to 18 decimals

    Raises:
        ZeroBalanceError: If any balance is zero
        ConvergenceError: If the iteration does not converge
    """
    _check_balances(xs)

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        x0 = xs[0].to_decimal()
        x1 = xs[1].to_decimal()
        amp = amp_gamma.amp.to_decimal()
        gamma = amp_gamma.gamma.to_decimal()

        d = _TWO * (x0 * x1).sqrt()
        for _ in range(MAX_ITER):
            df = _df_dd(d, x0, x1, amp, gamma)
            if df == 0:
                raise ConvergenceError("Invariant derivative vanished")
            d_new = d - _f(d, x0, x1, amp, gamma) / df
            if d_new <= 0:
                raise ConvergenceError(f"Invariant iteration left the domain: D={d_new}")
            if abs(d_new - d) <= SOLVER_TOLERANCE:
                return Decimal256.from_decimal(d_new)
            d = d_new

    raise ConvergenceError(f"Invariant D did not converge after {MAX_ITER} iterations")


def calc_y(xs: Sequence[Decimal256], d: Decimal256, amp_gamma: AmpGamma, ask_ind: int) -> Decimal256:
    """Solve for xs[ask_ind] given D and the other balance.

    Args:
        xs: Internal balances; xs[ask_ind] is ignored
        d: Invariant to preserve
        amp_gamma: Effective amplification and curvature
        ask_ind: Index of the balance to solve for

    Returns:
        The new balance, truncated to 18 decimals

    Raises:
        ZeroBalanceError: If the other balance or D is zero
        ConvergenceError: If the iteration does not converge
    """
    if ask_ind not in (0, 1):
        raise IndexError(f"ask_ind {ask_ind} out of range for 2 assets")
    if xs[1 - ask_ind].is_zero():
        raise ZeroBalanceError(f"Balance at index {1 - ask_ind} must be positive")
    if d.is_zero():
        raise ZeroBalanceError("Invariant must be positive")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        x_other = xs[1 - ask_ind].to_decimal()
        d_dec = d.to_decimal()
        amp = amp_gamma.amp.to_decimal()
        gamma = amp_gamma.gamma.to_decimal()

        y = d_dec * d_dec / (_FOUR * x_other)
        for _ in range(MAX_ITER):
            df = _df_dx(d_dec, y, x_other, amp, gamma)
            if df == 0:
                raise ConvergenceError("Balance derivative vanished")
            y_new = y - _f(d_dec, y, x_other, amp, gamma) / df
            if y_new <= 0:
                raise ConvergenceError(f"Balance iteration left the domain: y={y_new}")
            if abs(y_new - y) <= SOLVER_TOLERANCE:
                return Decimal256.from_decimal(y_new)
            y = y_new

    raise ConvergenceError(f"Balance did not converge after {MAX_ITER} iterations")


def get_xcp(d: Decimal256, price_scale: Decimal256) -> Decimal256:
    """Virtual value of the pool: sqrt(D/2 * D/(2 * price_scale))."""
    two = Decimal256.from_int(2)
    return ((d / two) * (d / (two * price_scale))).sqrt()
