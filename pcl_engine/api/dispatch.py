"""Message dispatch and the in-memory pool store.

The store plays the ledger the engine expects around it: it keeps the pool
balances and the LP supply next to each PoolConfig, builds the
ExecutionContext for every message and applies the balance movements of a
successful operation together with the new config. A failed operation
leaves the record untouched.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import assert_never

import structlog
from pydantic import BaseModel

from pcl_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from pcl_engine.curve.params import PoolParams, UpdatePoolParams
from pcl_engine.errors import BlockOutOfOrder, PoolAlreadyExists, PoolNotFound, ValidationError
from pcl_engine.math.fixed_point import Decimal256
from pcl_engine.models.messages import (
    ActionResponse,
    AmpGammaQuery,
    AmpGammaResponse,
    AssetAmount,
    AssetBalanceAtQuery,
    AssetPrecision,
    BalanceAtResponse,
    BlockInfo,
    ComputeDQuery,
    ConfigQuery,
    ConfigResponse,
    CreatePoolRequest,
    DecimalResponse,
    EnableAssetBalancesTrackingMsg,
    ExecuteMsg,
    LpPriceQuery,
    ObservationResponse,
    ObserveQuery,
    PoolParamsResponse,
    PriceStateResponse,
    PromoteParamsMsg,
    ProvideMsg,
    ProvideResponse,
    QueryMsg,
    ReverseSimulationQuery,
    ReverseSimulationResponse,
    ShareQuery,
    ShareResponse,
    SimulationQuery,
    SimulationResponse,
    StopPromotionMsg,
    SwapExactAmountOutMsg,
    SwapMsg,
    SwapResponse,
    UpdateParamsMsg,
    WithdrawMsg,
    WithdrawResponse,
)
from pcl_engine.models.types import optional_decimal256, to_decimal256
from pcl_engine.pool import engine
from pcl_engine.pool.state import ExecutionContext, PoolConfig, SwapResult

logger = structlog.get_logger()


@dataclass(frozen=True)
class PoolRecord:
    """A pool config with the ledger state around it.

    Attributes:
        config: Engine state
        balances: Pool balances, native units, pool order
        total_share: LP supply, raw LP units
        fee_address: Maker fee recipient
        maker_fee_share: Share of swap fees sent to the maker
        block_time: Time of the last block applied to the pool
        block_height: Height of the last block applied to the pool
    """

    config: PoolConfig
    balances: tuple[int, int] = (0, 0)
    total_share: int = 0
    fee_address: str | None = None
    maker_fee_share: Decimal256 = field(default_factory=Decimal256.zero)
    block_time: int = 0
    block_height: int = 0

    def check_block(self, block: BlockInfo) -> None:
        """Reject a block that goes back in time or height.

        Raises:
            BlockOutOfOrder: If either coordinate is below the last applied block
        """
        if block.time < self.block_time or block.height < self.block_height:
            raise BlockOutOfOrder(block.time, block.height, self.block_time, self.block_height)

    def context(self, block: BlockInfo, sender: str | None = None) -> ExecutionContext:
        return ExecutionContext(
            block_time=block.time,
            block_height=block.height,
            balances=self.balances,
            total_share=self.total_share,
            maker_fee_share=self.maker_fee_share,
            fee_address=self.fee_address,
            sender=sender,
        )


# =============================================================================
# Creation
# =============================================================================


def create_record(request: CreatePoolRequest, engine_config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> PoolRecord:
    """Validate a create request and build the pool record."""
    if len(request.assets) != 2:
        raise ValidationError(f"A pool holds exactly 2 assets, got {len(request.assets)}")
    if request.assets[0].denom == request.assets[1].denom:
        raise ValidationError(f"Duplicate asset {request.assets[0].denom}")

    maker_fee_share = to_decimal256(request.maker_fee_share)
    if maker_fee_share > Decimal256.one():
        raise ValidationError(f"Maker fee share must be at most 1, got {maker_fee_share}")

    params = request.params
    config = engine.create_pool(
        precisions={asset.denom: asset.decimals for asset in request.assets},
        amp=to_decimal256(params.amp),
        gamma=to_decimal256(params.gamma),
        params=PoolParams(
            mid_fee=to_decimal256(params.mid_fee),
            out_fee=to_decimal256(params.out_fee),
            fee_gamma=to_decimal256(params.fee_gamma),
            repeg_profit_threshold=to_decimal256(params.repeg_profit_threshold),
            min_price_scale_delta=to_decimal256(params.min_price_scale_delta),
            ma_half_time=params.ma_half_time,
        ),
        price_scale=to_decimal256(params.price_scale),
        owner=request.owner,
        block_time=request.block.time,
        block_height=request.block.height,
        track_asset_balances=params.track_asset_balances,
        engine=engine_config,
    )
    return PoolRecord(
        config=config,
        fee_address=request.fee_address,
        maker_fee_share=maker_fee_share,
        block_time=request.block.time,
        block_height=request.block.height,
    )


# =============================================================================
# Execute
# =============================================================================


def _swap_response(result: SwapResult) -> SwapResponse:
    return SwapResponse(
        offer_asset=result.offer_asset,
        ask_asset=result.ask_asset,
        offer_amount=str(result.offer_amount),
        return_amount=str(result.return_amount),
        spread_amount=str(result.spread_amount),
        commission_amount=str(result.commission_amount),
        maker_fee_amount=str(result.maker_fee_amount),
    )


def execute_msg(record: PoolRecord, sender: str, block: BlockInfo, msg: ExecuteMsg) -> tuple[PoolRecord, BaseModel]:
    """Run one execute message against a pool record.

    Returns:
        (new record, response model)
    """
    ctx = record.context(block, sender)
    config = record.config

    match msg:
        case ProvideMsg():
            assets = [(asset.denom, int(asset.amount)) for asset in msg.assets]
            config, provided = engine.provide(config, ctx, assets, optional_decimal256(msg.slippage_tolerance))
            record = replace(
                record,
                config=config,
                balances=provided.balances,
                total_share=record.total_share + provided.share + provided.minted_to_pool,
            )
            return record, ProvideResponse(
                share=str(provided.share),
                minted_to_pool=str(provided.minted_to_pool),
                slippage=str(provided.slippage),
            )
        case WithdrawMsg():
            assets = [(asset.denom, int(asset.amount)) for asset in msg.assets]
            config, withdrawn = engine.withdraw(config, ctx, int(msg.amount), assets)
            record = replace(
                record,
                config=config,
                balances=withdrawn.balances,
                total_share=record.total_share - withdrawn.burned,
            )
            return record, WithdrawResponse(
                burned=str(withdrawn.burned),
                refund_assets=[
                    AssetAmount(denom=denom, amount=str(amount))
                    for denom, amount in zip(config.pair, withdrawn.refund_assets, strict=True)
                ],
            )
        case SwapMsg():
            config, swapped = engine.swap(
                config,
                ctx,
                msg.offer_asset.denom,
                int(msg.offer_asset.amount),
                belief_price=optional_decimal256(msg.belief_price),
                max_spread=optional_decimal256(msg.max_spread),
            )
            return replace(record, config=config, balances=swapped.balances), _swap_response(swapped)
        case SwapExactAmountOutMsg():
            config, swapped = engine.swap_exact_amount_out(
                config,
                ctx,
                msg.ask_asset.denom,
                int(msg.ask_asset.amount),
                int(msg.max_amount_in),
            )
            return replace(record, config=config, balances=swapped.balances), _swap_response(swapped)
        case UpdateParamsMsg():
            update = UpdatePoolParams(
                mid_fee=optional_decimal256(msg.mid_fee),
                out_fee=optional_decimal256(msg.out_fee),
                fee_gamma=optional_decimal256(msg.fee_gamma),
                repeg_profit_threshold=optional_decimal256(msg.repeg_profit_threshold),
                min_price_scale_delta=optional_decimal256(msg.min_price_scale_delta),
                ma_half_time=msg.ma_half_time,
            )
            config, _ = engine.update_params(config, ctx, update)
            return replace(record, config=config), ActionResponse(action="update_params")
        case PromoteParamsMsg():
            config, _ = engine.promote_params(
                config,
                ctx,
                to_decimal256(msg.next_amp),
                to_decimal256(msg.next_gamma),
                msg.future_time,
            )
            return replace(record, config=config), ActionResponse(action="promote_params")
        case StopPromotionMsg():
            config, _ = engine.stop_promotion(config, ctx)
            return replace(record, config=config), ActionResponse(action="stop_changing_amp_gamma")
        case EnableAssetBalancesTrackingMsg():
            config = engine.enable_asset_balances_tracking(config, ctx)
            return replace(record, config=config), ActionResponse(action="enable_asset_balances_tracking")
        case _:
            assert_never(msg)


# =============================================================================
# Query
# =============================================================================


def config_response(record: PoolRecord) -> ConfigResponse:
    config = record.config
    params = config.params
    price_state = config.state.price_state
    return ConfigResponse(
        pair=[
            AssetPrecision(denom=denom, decimals=decimals)
            for denom, decimals in zip(config.pair, config.precisions.decimals, strict=True)
        ],
        owner=config.owner,
        params=PoolParamsResponse(
            mid_fee=str(params.mid_fee),
            out_fee=str(params.out_fee),
            fee_gamma=str(params.fee_gamma),
            repeg_profit_threshold=str(params.repeg_profit_threshold),
            min_price_scale_delta=str(params.min_price_scale_delta),
            ma_half_time=params.ma_half_time,
        ),
        price_state=PriceStateResponse(
            oracle_price=str(price_state.oracle_price),
            last_price=str(price_state.last_price),
            price_scale=str(price_state.price_scale),
            last_price_update=price_state.last_price_update,
            xcp_profit=str(price_state.xcp_profit),
            xcp_profit_real=str(price_state.xcp_profit_real),
        ),
        track_asset_balances=config.track_asset_balances,
        balances=[
            AssetAmount(denom=denom, amount=str(amount))
            for denom, amount in zip(config.pair, record.balances, strict=True)
        ],
        total_share=str(record.total_share),
    )


def query_msg(record: PoolRecord, block: BlockInfo, msg: QueryMsg) -> BaseModel:
    """Answer one query message. Queries never change the record."""
    ctx = record.context(block)
    config = record.config

    match msg:
        case ConfigQuery():
            return config_response(record)
        case ComputeDQuery():
            return DecimalResponse(value=str(engine.compute_d(config, ctx)))
        case LpPriceQuery():
            return DecimalResponse(value=str(engine.lp_price(config, ctx)))
        case ShareQuery():
            amounts = engine.share_in_assets(config, ctx, int(msg.amount))
            return ShareResponse(
                assets=[
                    AssetAmount(denom=denom, amount=str(amount))
                    for denom, amount in zip(config.pair, amounts, strict=True)
                ]
            )
        case SimulationQuery():
            simulated = engine.simulate_swap(config, ctx, msg.offer_asset.denom, int(msg.offer_asset.amount))
            return SimulationResponse(
                return_amount=str(simulated.return_amount),
                spread_amount=str(simulated.spread_amount),
                commission_amount=str(simulated.commission_amount),
            )
        case ReverseSimulationQuery():
            reversed_ = engine.reverse_simulate_swap(config, ctx, msg.ask_asset.denom, int(msg.ask_asset.amount))
            return ReverseSimulationResponse(
                offer_amount=str(reversed_.offer_amount),
                spread_amount=str(reversed_.spread_amount),
                commission_amount=str(reversed_.commission_amount),
            )
        case ObserveQuery():
            observation = engine.observe(config, ctx, msg.seconds_ago)
            return ObservationResponse(timestamp=observation.timestamp, price=str(observation.price))
        case AmpGammaQuery():
            current = engine.amp_gamma(config, ctx)
            return AmpGammaResponse(amp=str(current.amp), gamma=str(current.gamma), future_time=current.future_time)
        case AssetBalanceAtQuery():
            balance = engine.asset_balance_at(config, msg.asset, msg.height)
            return BalanceAtResponse(balance=None if balance is None else str(balance))
        case _:
            assert_never(msg)


# =============================================================================
# Store
# =============================================================================


class PoolStore:
    """Thread-safe in-memory registry of pool records."""

    def __init__(self, engine_config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> None:
        self._engine_config = engine_config
        self._pools: dict[str, PoolRecord] = {}
        self._lock = threading.Lock()

    def __contains__(self, pool_id: str) -> bool:
        with self._lock:
            return pool_id in self._pools

    def get(self, pool_id: str) -> PoolRecord:
        with self._lock:
            return self._get(pool_id)

    def _get(self, pool_id: str) -> PoolRecord:
        try:
            return self._pools[pool_id]
        except KeyError:
            raise PoolNotFound(pool_id) from None

    def create(self, request: CreatePoolRequest) -> ConfigResponse:
        record = create_record(request, self._engine_config)
        with self._lock:
            if request.pool_id in self._pools:
                raise PoolAlreadyExists(request.pool_id)
            self._pools[request.pool_id] = record
        return config_response(record)

    def execute(self, pool_id: str, sender: str, block: BlockInfo, msg: ExecuteMsg) -> BaseModel:
        with self._lock:
            current = self._get(pool_id)
            current.check_block(block)
            record, response = execute_msg(current, sender, block, msg)
            self._pools[pool_id] = replace(record, block_time=block.time, block_height=block.height)
        return response

    def query(self, pool_id: str, block: BlockInfo, msg: QueryMsg) -> BaseModel:
        with self._lock:
            record = self._get(pool_id)
        return query_msg(record, block, msg)
