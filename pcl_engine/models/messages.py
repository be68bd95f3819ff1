"""Pydantic models for pool execute/query messages and their responses.

Messages are discriminated on their `kind` field.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Discriminator, Field, Tag

from pcl_engine.models.types import DecimalStr, Denom, Uint128


class BlockInfo(BaseModel):
    """Block the message executes in."""

    time: int = Field(ge=0, description="Block timestamp in seconds.")
    height: int = Field(ge=0, description="Block height.")


class AssetAmount(BaseModel):
    """A denomination and an amount in its native decimals."""

    denom: Denom
    amount: Uint128


class AssetPrecision(BaseModel):
    """A pool asset and its decimals."""

    denom: Denom
    decimals: int = Field(ge=0, le=18)


class ConcentratedPoolParams(BaseModel):
    """Pool creation parameters."""

    amp: DecimalStr
    gamma: DecimalStr
    mid_fee: DecimalStr
    out_fee: DecimalStr
    fee_gamma: DecimalStr
    repeg_profit_threshold: DecimalStr
    min_price_scale_delta: DecimalStr
    price_scale: DecimalStr
    ma_half_time: int = Field(ge=0)
    track_asset_balances: bool = False


class CreatePoolRequest(BaseModel):
    """Create a pool in the store."""

    pool_id: str = Field(min_length=1, max_length=64, pattern=r"^[a-zA-Z0-9_-]+$")
    assets: list[AssetPrecision]
    params: ConcentratedPoolParams
    owner: str = Field(min_length=1)
    block: BlockInfo
    fee_address: str | None = Field(default=None, description="Maker fee recipient.")
    maker_fee_share: DecimalStr = Field(default="0", description="Share of swap fees sent to the maker.")


# =============================================================================
# Execute messages
# =============================================================================


class ProvideMsg(BaseModel):
    kind: Literal["provide"] = "provide"
    assets: list[AssetAmount]
    slippage_tolerance: DecimalStr | None = None


class WithdrawMsg(BaseModel):
    kind: Literal["withdraw"] = "withdraw"
    amount: Uint128
    assets: list[AssetAmount] = Field(default_factory=list)


class SwapMsg(BaseModel):
    kind: Literal["swap"] = "swap"
    offer_asset: AssetAmount
    belief_price: DecimalStr | None = None
    max_spread: DecimalStr | None = None


class SwapExactAmountOutMsg(BaseModel):
    kind: Literal["swap_exact_amount_out"] = "swap_exact_amount_out"
    ask_asset: AssetAmount
    max_amount_in: Uint128


class UpdateParamsMsg(BaseModel):
    kind: Literal["update_params"] = "update_params"
    mid_fee: DecimalStr | None = None
    out_fee: DecimalStr | None = None
    fee_gamma: DecimalStr | None = None
    repeg_profit_threshold: DecimalStr | None = None
    min_price_scale_delta: DecimalStr | None = None
    ma_half_time: int | None = Field(default=None, ge=0)


class PromoteParamsMsg(BaseModel):
    kind: Literal["promote_params"] = "promote_params"
    next_amp: DecimalStr
    next_gamma: DecimalStr
    future_time: int = Field(ge=0)


class StopPromotionMsg(BaseModel):
    kind: Literal["stop_promotion"] = "stop_promotion"


class EnableAssetBalancesTrackingMsg(BaseModel):
    kind: Literal["enable_asset_balances_tracking"] = "enable_asset_balances_tracking"


def _get_kind(v: dict[str, Any] | BaseModel) -> str | None:
    """Discriminator function for message unions."""
    if isinstance(v, dict):
        kind = v.get("kind")
        return str(kind) if kind is not None else None
    return str(getattr(v, "kind", None))


ExecuteMsg = Annotated[
    Annotated[ProvideMsg, Tag("provide")]
    | Annotated[WithdrawMsg, Tag("withdraw")]
    | Annotated[SwapMsg, Tag("swap")]
    | Annotated[SwapExactAmountOutMsg, Tag("swap_exact_amount_out")]
    | Annotated[UpdateParamsMsg, Tag("update_params")]
    | Annotated[PromoteParamsMsg, Tag("promote_params")]
    | Annotated[StopPromotionMsg, Tag("stop_promotion")]
    | Annotated[EnableAssetBalancesTrackingMsg, Tag("enable_asset_balances_tracking")],
    Discriminator(_get_kind),
]


class ExecuteRequest(BaseModel):
    sender: str = Field(min_length=1)
    block: BlockInfo
    msg: ExecuteMsg


# =============================================================================
# Query messages
# =============================================================================


class ConfigQuery(BaseModel):
    kind: Literal["config"] = "config"


class ComputeDQuery(BaseModel):
    kind: Literal["compute_d"] = "compute_d"


class LpPriceQuery(BaseModel):
    kind: Literal["lp_price"] = "lp_price"


class ShareQuery(BaseModel):
    kind: Literal["share"] = "share"
    amount: Uint128


class SimulationQuery(BaseModel):
    kind: Literal["simulation"] = "simulation"
    offer_asset: AssetAmount


class ReverseSimulationQuery(BaseModel):
    kind: Literal["reverse_simulation"] = "reverse_simulation"
    ask_asset: AssetAmount


class ObserveQuery(BaseModel):
    kind: Literal["observe"] = "observe"
    seconds_ago: int = Field(ge=0)


class AmpGammaQuery(BaseModel):
    kind: Literal["amp_gamma"] = "amp_gamma"


class AssetBalanceAtQuery(BaseModel):
    kind: Literal["asset_balance_at"] = "asset_balance_at"
    asset: Denom
    height: int = Field(ge=0)


QueryMsg = Annotated[
    Annotated[ConfigQuery, Tag("config")]
    | Annotated[ComputeDQuery, Tag("compute_d")]
    | Annotated[LpPriceQuery, Tag("lp_price")]
    | Annotated[ShareQuery, Tag("share")]
    | Annotated[SimulationQuery, Tag("simulation")]
    | Annotated[ReverseSimulationQuery, Tag("reverse_simulation")]
    | Annotated[ObserveQuery, Tag("observe")]
    | Annotated[AmpGammaQuery, Tag("amp_gamma")]
    | Annotated[AssetBalanceAtQuery, Tag("asset_balance_at")],
    Discriminator(_get_kind),
]


class QueryRequest(BaseModel):
    block: BlockInfo
    msg: QueryMsg


# =============================================================================
# Responses
# =============================================================================


class ProvideResponse(BaseModel):
    kind: Literal["provide"] = "provide"
    share: Uint128
    minted_to_pool: Uint128
    slippage: DecimalStr


class WithdrawResponse(BaseModel):
    kind: Literal["withdraw"] = "withdraw"
    burned: Uint128
    refund_assets: list[AssetAmount]


class SwapResponse(BaseModel):
    kind: Literal["swap"] = "swap"
    offer_asset: Denom
    ask_asset: Denom
    offer_amount: Uint128
    return_amount: Uint128
    spread_amount: Uint128
    commission_amount: Uint128
    maker_fee_amount: Uint128


class ActionResponse(BaseModel):
    """Response of governance actions."""

    kind: Literal["action"] = "action"
    action: str


class PoolParamsResponse(BaseModel):
    mid_fee: DecimalStr
    out_fee: DecimalStr
    fee_gamma: DecimalStr
    repeg_profit_threshold: DecimalStr
    min_price_scale_delta: DecimalStr
    ma_half_time: int


class PriceStateResponse(BaseModel):
    oracle_price: DecimalStr
    last_price: DecimalStr
    price_scale: DecimalStr
    last_price_update: int
    xcp_profit: DecimalStr
    xcp_profit_real: DecimalStr


class ConfigResponse(BaseModel):
    kind: Literal["config"] = "config"
    pair: list[AssetPrecision]
    owner: str
    params: PoolParamsResponse
    price_state: PriceStateResponse
    track_asset_balances: bool
    balances: list[AssetAmount]
    total_share: Uint128


class DecimalResponse(BaseModel):
    """A single fixed-point value (D, LP price)."""

    kind: Literal["decimal"] = "decimal"
    value: DecimalStr


class ShareResponse(BaseModel):
    kind: Literal["share"] = "share"
    assets: list[AssetAmount]


class SimulationResponse(BaseModel):
    kind: Literal["simulation"] = "simulation"
    return_amount: Uint128
    spread_amount: Uint128
    commission_amount: Uint128


class ReverseSimulationResponse(BaseModel):
    kind: Literal["reverse_simulation"] = "reverse_simulation"
    offer_amount: Uint128
    spread_amount: Uint128
    commission_amount: Uint128


class ObservationResponse(BaseModel):
    kind: Literal["observation"] = "observation"
    timestamp: int
    price: DecimalStr


class AmpGammaResponse(BaseModel):
    kind: Literal["amp_gamma"] = "amp_gamma"
    amp: DecimalStr
    gamma: DecimalStr
    future_time: int


class BalanceAtResponse(BaseModel):
    kind: Literal["balance_at"] = "balance_at"
    balance: Uint128 | None = None


class ErrorResponse(BaseModel):
    error: str = Field(description="Error class name.")
    detail: str
