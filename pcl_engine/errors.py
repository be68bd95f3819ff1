"""Pool engine error classes.

Every failure aborts the whole operation: nothing is committed and the
engine never retries. Errors are grouped by what the caller can do about
them:

- ValidationError: the request or the init parameters are malformed
- ArithmeticFailure: overflow, division by zero, solver non-convergence
- GuardViolation: a protective bound was hit (slippage, spread, ...)
- StateError: the pool is not in a state that allows the operation
- UnsupportedOperation: the operation exists but is disabled
"""

from __future__ import annotations


class PclError(Exception):
    """Base error for pool engine operations."""

    pass


# =============================================================================
# Validation errors
# =============================================================================


class ValidationError(PclError):
    """Bad init parameters, wrong asset count/type, zero or duplicate assets."""

    pass


class IncorrectPoolParam(ValidationError):
    """A pool parameter is outside of its allowed range."""

    def __init__(self, name: str, min_value: object, max_value: object) -> None:
        self.name = name
        self.min_value = min_value
        self.max_value = max_value
        super().__init__(f"Incorrect pool parameter {name}: must be in [{min_value}, {max_value}]")


class InvalidAsset(ValidationError):
    """The asset does not belong to the pair."""

    def __init__(self, asset: str) -> None:
        self.asset = asset
        super().__init__(f"The asset {asset} does not belong to the pair")


class InvalidNumberOfAssets(ValidationError):
    """More assets than the pair holds were supplied."""

    def __init__(self, expected: int) -> None:
        self.expected = expected
        super().__init__(f"Invalid number of assets. This pair supports only {expected} assets")


class InvalidZeroAmount(ValidationError):
    """Initial provide can not be one-sided."""

    def __init__(self) -> None:
        super().__init__("Initial provide can not be one-sided")


# =============================================================================
# Arithmetic errors
# =============================================================================


class ArithmeticFailure(PclError, ArithmeticError):
    """Base class for fixed-point and solver arithmetic errors."""

    pass


class ArithmeticOverflow(ArithmeticFailure):
    """Value exceeds the 256-bit fixed-point range."""

    pass


class ArithmeticUnderflow(ArithmeticFailure):
    """Operation would produce a negative unsigned value."""

    pass


class DivisionByZero(ArithmeticFailure):
    """Division by zero."""

    pass


class ConvergenceError(ArithmeticFailure):
    """Newton-Raphson iteration did not converge within the iteration bound."""

    pass


class ZeroBalanceError(ArithmeticFailure):
    """Curve math was called with a zero balance."""

    pass


# =============================================================================
# Guard violations
# =============================================================================


class GuardViolation(PclError):
    """A protective bound was violated."""

    pass


class SlippageExceeded(GuardViolation):
    """Provide slippage is above the tolerance."""

    def __init__(self, slippage: object, tolerance: object) -> None:
        self.slippage = slippage
        self.tolerance = tolerance
        super().__init__(f"Operation exceeds max slippage tolerance: {slippage} > {tolerance}")


class MaxSpreadAssertion(GuardViolation):
    """Swap spread is above the caller's maximum."""

    def __init__(self) -> None:
        super().__init__("Operation exceeds max spread limit")


class AllowedSpreadAssertion(GuardViolation):
    """The requested max spread or slippage is above the protocol maximum."""

    def __init__(self, limit: object) -> None:
        self.limit = limit
        super().__init__(f"Allowed spread must be less than or equal to {limit}")


class MinimumLiquidityAmountError(GuardViolation):
    """Initial liquidity does not cover the permanently locked amount."""

    def __init__(self, minimum: int) -> None:
        self.minimum = minimum
        super().__init__(f"Initial liquidity must be more than {minimum}")


class ZeroAmount(GuardViolation):
    """An amount that must be positive was zero."""

    pass


class ObservationOutOfRange(GuardViolation):
    """Requested observation is older than the oldest retained entry."""

    pass


class XcpProfitLoss(GuardViolation):
    """The operation would decrease the LP virtual price."""

    def __init__(self) -> None:
        super().__init__("XCP profit real value dropped. This action makes loss")


class MinChangingTimeAssertion(GuardViolation):
    """Amp/gamma promotion is scheduled too soon."""

    def __init__(self, min_time: int) -> None:
        self.min_time = min_time
        super().__init__(f"Amp and gamma coefficients cannot be changed more often than once per {min_time} seconds")


class MaxChangeAssertion(GuardViolation):
    """Amp/gamma promotion changes a parameter too much at once."""

    def __init__(self, name: str, max_change: object) -> None:
        self.name = name
        self.max_change = max_change
        super().__init__(f"The difference between the old and new {name} value is higher than {max_change}")


class InsufficientOfferAmount(GuardViolation):
    """Exact-output swap needs more input than the caller allowed."""

    def __init__(self, required: int, maximum: int) -> None:
        self.required = required
        self.maximum = maximum
        super().__init__(
            f"Not enough tokens to perform swap. Need {required} but token_in_max_amount is {maximum}"
        )


# =============================================================================
# State errors
# =============================================================================


class StateError(PclError):
    """Operation attempted before the pool is ready for it."""

    pass


class EmptyPoolError(StateError):
    """One of the pool balances is zero."""

    pass


class BalanceTrackingAlreadyEnabled(StateError):
    """Asset balance tracking was enabled twice."""

    def __init__(self) -> None:
        super().__init__("Asset balances tracking is already enabled")


class Unauthorized(StateError):
    """Sender is not the pool owner."""

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class BlockOutOfOrder(StateError):
    """A message carries a block older than the last one applied to the pool."""

    def __init__(self, time: int, height: int, last_time: int, last_height: int) -> None:
        self.time = time
        self.height = height
        super().__init__(
            f"Block (time {time}, height {height}) precedes the last applied block "
            f"(time {last_time}, height {last_height})"
        )


class SnapshotOutOfOrder(StateError):
    """A balance snapshot was saved below the latest recorded height."""

    def __init__(self, asset: str, height: int, latest: int) -> None:
        self.asset = asset
        super().__init__(f"Balance snapshot for {asset} at height {height} precedes {latest}")


# =============================================================================
# Unsupported operations
# =============================================================================


class UnsupportedOperation(PclError):
    """The operation is recognized but disabled."""

    pass


# =============================================================================
# Pool store errors
# =============================================================================


class PoolNotFound(PclError):
    """No pool is registered under the requested id."""

    def __init__(self, pool_id: str) -> None:
        self.pool_id = pool_id
        super().__init__(f"Pool {pool_id} not found")


class PoolAlreadyExists(StateError):
    """A pool is already registered under the requested id."""

    def __init__(self, pool_id: str) -> None:
        self.pool_id = pool_id
        super().__init__(f"Pool {pool_id} already exists")
