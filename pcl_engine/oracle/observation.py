"""Per-block trade observations for TWAP queries.

Swaps never write into the ring directly. Each swap accumulates its size
into a single pending `PrecommitObservation` for the current block; the
first mutating operation of a later block commits it. A block therefore
contributes at most one observation however many trades it contains.

The ring keeps, for every committed block, the block price
(base_amount / quote_amount) and the simple moving average of the block
prices retained in the ring (`price_sma`). Queries interpolate `price_sma`
between the two entries bracketing the requested time.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, replace

import structlog

from pcl_engine.constants import OBSERVATIONS_SIZE
from pcl_engine.errors import ObservationOutOfRange
from pcl_engine.math.fixed_point import Decimal256

logger = structlog.get_logger()


@dataclass(frozen=True)
class Observation:
    """A committed block observation.

    Attributes:
        timestamp: Block time of the trades
        base_amount: Total amount of asset 0 traded in the block
        quote_amount: Total amount of asset 1 traded in the block
        price: base_amount / quote_amount
        price_sma: Moving average of block prices over the ring
    """

    timestamp: int
    base_amount: Decimal256
    quote_amount: Decimal256
    price: Decimal256
    price_sma: Decimal256


@dataclass(frozen=True)
class PrecommitObservation:
    """Trade sizes accumulated during the block at `precommit_ts`."""

    base_amount: Decimal256
    quote_amount: Decimal256
    precommit_ts: int

    @property
    def price(self) -> Decimal256:
        return self.base_amount / self.quote_amount


@dataclass(frozen=True)
class OracleObservation:
    """Answer to an observe query."""

    timestamp: int
    price: Decimal256


@dataclass(frozen=True)
class ObservationBuffer:
    """Fixed-capacity ring of block observations plus the pending precommit.

    Attributes:
        capacity: Maximum number of retained observations
        slots: Stored observations; grows until `capacity`, then is overwritten
            in place starting from the oldest entry
        head: Write cursor, the slot the next observation goes to
        precommit: Pending observation of the last block with trades
    """

    capacity: int = OBSERVATIONS_SIZE
    slots: tuple[Observation, ...] = ()
    head: int = 0
    precommit: PrecommitObservation | None = None

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError(f"capacity must be positive, got {self.capacity}")

    def __len__(self) -> int:
        return len(self.slots)

    @property
    def is_full(self) -> bool:
        return len(self.slots) == self.capacity

    def ordered(self) -> list[Observation]:
        """Observations from oldest to newest."""
        if not self.is_full:
            return list(self.slots)
        return list(self.slots[self.head :] + self.slots[: self.head])

    def newest(self) -> Observation | None:
        if not self.slots:
            return None
        return self.slots[(self.head - 1) % len(self.slots)] if self.is_full else self.slots[-1]

    def oldest(self) -> Observation | None:
        if not self.slots:
            return None
        return self.slots[self.head] if self.is_full else self.slots[0]

    # --- Writes ---

    def precommit_trade(self, now: int, base_amount: Decimal256, quote_amount: Decimal256) -> ObservationBuffer:
        """Accumulate a trade into the pending observation of block `now`."""
        pending = self.precommit
        if pending is not None and pending.precommit_ts == now:
            pending = PrecommitObservation(
                base_amount=pending.base_amount + base_amount,
                quote_amount=pending.quote_amount + quote_amount,
                precommit_ts=now,
            )
        else:
            pending = PrecommitObservation(base_amount=base_amount, quote_amount=quote_amount, precommit_ts=now)
        return replace(self, precommit=pending)

    def commit_pending(self, now: int) -> ObservationBuffer:
        """Move the pending observation of an earlier block into the ring.

        Does nothing while the pending observation belongs to the current
        block. The pending slot is cleared once its block is over, even when
        the ring already holds an entry for that timestamp.
        """
        pending = self.precommit
        if pending is None or pending.precommit_ts >= now:
            return self

        cleared = replace(self, precommit=None)
        last = self.newest()
        if last is not None and last.timestamp >= pending.precommit_ts:
            return cleared

        price = pending.price
        if last is None:
            price_sma = price
        elif not self.is_full:
            count = Decimal256.from_int(len(self.slots))
            price_sma = (last.price_sma * count + price) / (count + Decimal256.one())
        else:
            count = Decimal256.from_int(self.capacity)
            oldest = self.oldest()
            price_sma = (last.price_sma * count + price).saturating_sub(oldest.price) / count

        observation = Observation(
            timestamp=pending.precommit_ts,
            base_amount=pending.base_amount,
            quote_amount=pending.quote_amount,
            price=price,
            price_sma=price_sma,
        )
        logger.debug(
            "observation_committed",
            timestamp=observation.timestamp,
            price=str(price),
            price_sma=str(price_sma),
        )
        return cleared._push(observation)

    def _push(self, observation: Observation) -> ObservationBuffer:
        if self.is_full:
            slots = self.slots[: self.head] + (observation,) + self.slots[self.head + 1 :]
        else:
            slots = self.slots + (observation,)
        return replace(self, slots=slots, head=(self.head + 1) % self.capacity)

    # --- Queries ---

    def observe(self, now: int, seconds_ago: int) -> OracleObservation:
        """Price at `now - seconds_ago`.

        `seconds_ago == 0` answers with the newest committed block price.
        Otherwise the moving average is linearly interpolated between the
        two observations around the target time; a target past the newest
        observation gets the newest moving average.

        Raises:
            ObservationOutOfRange: If the target precedes the oldest retained
                observation or nothing was observed yet
        """
        target = now - seconds_ago
        if target < 0:
            raise ObservationOutOfRange(f"Requested observation is before the epoch: {target}")

        if not self.slots:
            pending = self.precommit
            if pending is not None and pending.precommit_ts <= target:
                return OracleObservation(timestamp=target, price=pending.price)
            if pending is not None:
                raise ObservationOutOfRange(
                    f"Requested observation is too old. Last known observation is at {pending.precommit_ts}"
                )
            raise ObservationOutOfRange("Buffer is empty")

        newest = self.newest()
        if seconds_ago == 0:
            return OracleObservation(timestamp=target, price=newest.price)
        if target >= newest.timestamp:
            return OracleObservation(timestamp=target, price=newest.price_sma)

        history = self.ordered()
        oldest = history[0]
        if target < oldest.timestamp:
            raise ObservationOutOfRange(
                f"Requested observation is too old. Last known observation is at {oldest.timestamp}"
            )

        idx = bisect_right([obs.timestamp for obs in history], target)
        left, right = history[idx - 1], history[idx]
        if left.timestamp == target:
            return OracleObservation(timestamp=target, price=left.price_sma)

        coeff = Decimal256.from_ratio(target - left.timestamp, right.timestamp - left.timestamp)
        diff = left.price_sma.abs_diff(right.price_sma) * coeff
        if left.price_sma > right.price_sma:
            price = left.price_sma - diff
        else:
            price = left.price_sma + diff
        return OracleObservation(timestamp=target, price=price)
