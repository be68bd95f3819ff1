"""Asset precision helpers.

Token amounts arrive as integers in each asset's native decimals. The engine
works in Decimal256 (18 decimals) internally; these helpers convert in both
directions and hold the per-asset precision map fixed at pool creation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pcl_engine.constants import N_COINS
from pcl_engine.errors import InvalidAsset, InvalidNumberOfAssets, ValidationError
from pcl_engine.math.fixed_point import Decimal256

MAX_PRECISION = Decimal256.DECIMAL_PLACES


def scale_up(amount: int, precision: int) -> Decimal256:
    """Scale a native token amount to 18 decimals for internal math.

    Args:
        amount: Amount in token's native decimals
        precision: Number of decimals of the token (0..18)

    Returns:
        Amount as Decimal256

    Raises:
        ValidationError: If precision is out of range
    """
    if not 0 <= precision <= MAX_PRECISION:
        raise ValidationError(f"Precision must be in [0, {MAX_PRECISION}], got {precision}")
    return Decimal256.with_precision(amount, precision)


def scale_down_down(value: Decimal256, precision: int) -> int:
    """Scale an 18-decimal value back to token decimals, rounding down.

    Used for every amount the pool pays out.
    """
    if not 0 <= precision <= MAX_PRECISION:
        raise ValidationError(f"Precision must be in [0, {MAX_PRECISION}], got {precision}")
    return value.to_uint(precision)


def scale_down_up(value: Decimal256, precision: int) -> int:
    """Scale an 18-decimal value back to token decimals, rounding up.

    Used for amounts the pool must receive.
    """
    if not 0 <= precision <= MAX_PRECISION:
        raise ValidationError(f"Precision must be in [0, {MAX_PRECISION}], got {precision}")
    return value.to_uint_up(precision)


@dataclass(frozen=True)
class Precisions:
    """Immutable asset -> decimals map for the two pool assets.

    Attributes:
        assets: The pair, in pool order (index 0 is the base asset)
        decimals: Decimals for each asset, same order
    """

    assets: tuple[str, str]
    decimals: tuple[int, int]

    @classmethod
    def from_assets(cls, precisions: Mapping[str, int]) -> Precisions:
        """Build from an ordered asset -> decimals mapping.

        Raises:
            InvalidNumberOfAssets: If the mapping does not hold exactly two assets
            ValidationError: If a precision is out of range
        """
        items = list(precisions.items())
        if len(items) != N_COINS:
            raise InvalidNumberOfAssets(N_COINS)
        for asset, decimals in items:
            if not asset:
                raise ValidationError("Asset name must not be empty")
            if not 0 <= decimals <= MAX_PRECISION:
                raise ValidationError(
                    f"Precision of {asset} must be in [0, {MAX_PRECISION}], got {decimals}"
                )
        (a0, p0), (a1, p1) = items
        return cls(assets=(a0, a1), decimals=(p0, p1))

    def index_of(self, asset: str) -> int:
        """Position of `asset` in the pair.

        Raises:
            InvalidAsset: If the asset does not belong to the pair
        """
        try:
            return self.assets.index(asset)
        except ValueError:
            raise InvalidAsset(asset) from None

    def to_decimal(self, idx: int, amount: int) -> Decimal256:
        """Native integer amount of asset `idx` -> Decimal256."""
        return scale_up(amount, self.decimals[idx])

    def to_uint(self, idx: int, value: Decimal256) -> int:
        """Decimal256 -> native integer amount of asset `idx`, rounding down."""
        return scale_down_down(value, self.decimals[idx])

    def to_uint_up(self, idx: int, value: Decimal256) -> int:
        """Decimal256 -> native integer amount of asset `idx`, rounding up."""
        return scale_down_up(value, self.decimals[idx])

    def normalize(self, balances: tuple[int, int]) -> list[Decimal256]:
        """Native pool balances (pool order) -> Decimal256 balances."""
        return [scale_up(amount, prec) for amount, prec in zip(balances, self.decimals, strict=True)]

    def denormalize(self, values: Sequence[Decimal256]) -> tuple[int, int]:
        """Decimal256 amounts (pool order) -> native amounts, rounding down."""
        return self.to_uint(0, values[0]), self.to_uint(1, values[1])
