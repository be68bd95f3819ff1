"""Pool aggregate record, execution context and operation results."""

from __future__ import annotations

from dataclasses import dataclass, field

from pcl_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from pcl_engine.curve.params import PoolParams
from pcl_engine.curve.state import PoolState
from pcl_engine.math.fixed_point import Decimal256
from pcl_engine.oracle.observation import ObservationBuffer
from pcl_engine.pool.balances import BalanceHistory
from pcl_engine.precision import Precisions


@dataclass(frozen=True)
class PoolConfig:
    """Everything the engine persists for one pool.

    Attributes:
        precisions: Pair assets (pool order) and their decimals
        params: Fee and repeg parameters
        state: Amp/gamma schedule and price state
        observations: TWAP ring buffer with the pending precommit
        balances: Height-indexed balance snapshots
        track_asset_balances: Whether balance snapshots are recorded
        owner: Only address allowed to run governance operations
        engine: Engine tunables
    """

    precisions: Precisions
    params: PoolParams
    state: PoolState
    observations: ObservationBuffer
    owner: str
    balances: BalanceHistory = field(default_factory=BalanceHistory)
    track_asset_balances: bool = False
    engine: EngineConfig = DEFAULT_ENGINE_CONFIG

    @property
    def pair(self) -> tuple[str, str]:
        return self.precisions.assets


@dataclass(frozen=True)
class ExecutionContext:
    """External reads for one operation.

    Attributes:
        block_time: Block timestamp, in seconds
        block_height: Block height
        balances: Pool balances in native units, pool order. For provide and
            swap they exclude the caller's deposit/offer.
        total_share: LP token supply, in raw LP units
        maker_fee_share: Share of swap fees sent to the maker
        fee_address: Maker fee recipient; no maker fee is charged without one
        sender: Caller address, checked by governance operations
    """

    block_time: int
    block_height: int
    balances: tuple[int, int] = (0, 0)
    total_share: int = 0
    maker_fee_share: Decimal256 = field(default_factory=Decimal256.zero)
    fee_address: str | None = None
    sender: str | None = None

    @property
    def effective_maker_fee_share(self) -> Decimal256:
        if self.fee_address is None:
            return Decimal256.zero()
        return self.maker_fee_share


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class SwapComputation:
    """Swap math result, in ask asset 18-decimal units.

    Attributes:
        dy: Amount returned to the trader, after fees
        spread_fee: Loss against the price_scale rate
        total_fee: Fee charged on the output
        maker_fee: Part of total_fee sent to the maker
    """

    dy: Decimal256
    spread_fee: Decimal256
    total_fee: Decimal256
    maker_fee: Decimal256

    def last_price(self, offer_amount: Decimal256, offer_ind: int) -> Decimal256:
        """Trade price expressed as asset 0 per asset 1."""
        gross = self.dy + self.maker_fee
        if offer_ind == 0:
            return offer_amount / gross
        return gross / offer_amount


@dataclass(frozen=True)
class ProvideResult:
    """Outcome of a provide.

    Attributes:
        share: LP amount minted to the provider, in raw LP units
        minted_to_pool: LP amount locked in the pool (first provide only)
        slippage: Measured slippage, zero when the price was not updated
        deposits: Deposited amounts, native units, pool order
        balances: Pool balances after the provide
    """

    share: int
    minted_to_pool: int
    slippage: Decimal256
    deposits: tuple[int, int]
    balances: tuple[int, int]


@dataclass(frozen=True)
class WithdrawResult:
    """Outcome of a withdraw.

    Attributes:
        refund_assets: Amount of each asset paid out, pool order
        burned: LP amount burned
        balances: Pool balances after the withdraw
    """

    refund_assets: tuple[int, int]
    burned: int
    balances: tuple[int, int]


@dataclass(frozen=True)
class SwapResult:
    """Outcome of an executed swap, native units.

    The ask balance decreases by exactly return_amount + maker_fee_amount.
    """

    offer_asset: str
    ask_asset: str
    offer_amount: int
    return_amount: int
    spread_amount: int
    commission_amount: int
    maker_fee_amount: int
    fee_address: str | None
    balances: tuple[int, int]


@dataclass(frozen=True)
class SimulationResult:
    return_amount: int
    spread_amount: int
    commission_amount: int


@dataclass(frozen=True)
class ReverseSimulationResult:
    offer_amount: int
    spread_amount: int
    commission_amount: int


@dataclass(frozen=True)
class AmpGammaResult:
    amp: Decimal256
    gamma: Decimal256
    future_time: int
