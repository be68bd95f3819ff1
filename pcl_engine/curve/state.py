"""Immutable curve state: amplification/gamma pair, price state, pool state.

All values are frozen dataclasses. Operations that change the state build a
new value with `dataclasses.replace` and never mutate in place.
"""

from __future__ import annotations

from dataclasses import dataclass

from pcl_engine.constants import AMP_MAX, AMP_MIN, GAMMA_MAX, GAMMA_MIN
from pcl_engine.errors import IncorrectPoolParam
from pcl_engine.math.fixed_point import Decimal256


@dataclass(frozen=True)
class AmpGamma:
    """Amplification and curvature parameters of the invariant.

    Attributes:
        amp: Amplification coefficient, in [0.1, 100000]
        gamma: Curvature, in [1e-8, 0.02]
    """

    amp: Decimal256
    gamma: Decimal256

    @classmethod
    def new(cls, amp: Decimal256, gamma: Decimal256) -> AmpGamma:
        """Validated constructor.

        Raises:
            IncorrectPoolParam: If amp or gamma is out of range
        """
        if not AMP_MIN <= amp <= AMP_MAX:
            raise IncorrectPoolParam("amp", AMP_MIN, AMP_MAX)
        if not GAMMA_MIN <= gamma <= GAMMA_MAX:
            raise IncorrectPoolParam("gamma", GAMMA_MIN, GAMMA_MAX)
        return cls(amp=amp, gamma=gamma)


@dataclass(frozen=True)
class PriceState:
    """Internal oracle and repeg bookkeeping.

    Attributes:
        oracle_price: EMA of last_price
        last_price: Price of the most recent trade (or balanced provide)
        price_scale: Internal price used to scale asset 1
        last_price_update: Timestamp of the last EMA update
        xcp_profit: Accumulated virtual profit, grows with fees
        xcp_profit_real: Current LP virtual price
    """

    oracle_price: Decimal256
    last_price: Decimal256
    price_scale: Decimal256
    last_price_update: int
    xcp_profit: Decimal256
    xcp_profit_real: Decimal256

    @classmethod
    def initial(cls, price_scale: Decimal256, now: int) -> PriceState:
        """Price state of a freshly created pool."""
        return cls(
            oracle_price=price_scale,
            last_price=price_scale,
            price_scale=price_scale,
            last_price_update=now,
            xcp_profit=Decimal256.zero(),
            xcp_profit_real=Decimal256.zero(),
        )


@dataclass(frozen=True)
class PoolState:
    """Amp/gamma schedule plus price state.

    Attributes:
        initial: AmpGamma at the start of the current ramp
        future: AmpGamma at the end of the current ramp
        initial_time: Ramp start timestamp
        future_time: Ramp end timestamp
        price_state: Oracle and repeg state
    """

    initial: AmpGamma
    future: AmpGamma
    initial_time: int
    future_time: int
    price_state: PriceState

    @classmethod
    def initial_state(cls, amp_gamma: AmpGamma, price_scale: Decimal256, now: int) -> PoolState:
        return cls(
            initial=amp_gamma,
            future=amp_gamma,
            initial_time=now,
            future_time=now,
            price_state=PriceState.initial(price_scale, now),
        )
