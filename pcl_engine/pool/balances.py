"""Height-indexed pool balance snapshots.

A balance saved at height h becomes visible to queries at heights > h, so a
query for height h answers with the balance the pool had when block h
started.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pcl_engine.errors import SnapshotOutOfOrder


@dataclass(frozen=True)
class BalanceHistory:
    """Per-asset list of (height, amount) snapshots, sorted by height."""

    snapshots: Mapping[str, tuple[tuple[int, int], ...]] = field(default_factory=lambda: MappingProxyType({}))

    def save(self, asset: str, amount: int, height: int) -> BalanceHistory:
        """Record `amount` for `asset` at `height`.

        Saving twice at the same height keeps the last value.
        """
        history = self.snapshots.get(asset, ())
        if history and history[-1][0] > height:
            raise SnapshotOutOfOrder(asset, height, history[-1][0])
        if history and history[-1][0] == height:
            history = history[:-1]
        snapshots = dict(self.snapshots)
        snapshots[asset] = history + ((height, amount),)
        return BalanceHistory(snapshots=MappingProxyType(snapshots))

    def save_all(self, balances: Iterable[tuple[str, int]], height: int) -> BalanceHistory:
        history = self
        for asset, amount in balances:
            history = history.save(asset, amount, height)
        return history

    def balance_at(self, asset: str, height: int) -> int | None:
        """Balance of `asset` at the start of block `height`, None if unknown."""
        history = self.snapshots.get(asset, ())
        idx = bisect_left([h for h, _ in history], height)
        if idx == 0:
            return None
        return history[idx - 1][1]
