"""Pool operations.

Every operation takes the current `PoolConfig` and an `ExecutionContext`
with the external reads (balances, LP supply, maker fee settings) and
returns the new `PoolConfig` together with the operation result. All
checks run before the new config is built, so a failed operation leaves
the caller's config untouched.

Amounts cross this boundary as integers in each asset's native decimals;
internally everything is Decimal256 with asset 1 scaled by price_scale
wherever the curve math is involved.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace

import structlog

from pcl_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from pcl_engine.curve.fees import calc_provide_fee, fee_rate, split_fee
from pcl_engine.curve.invariant import calc_d, calc_y, get_xcp
from pcl_engine.curve.params import PoolParams, UpdatePoolParams
from pcl_engine.curve.repeg import update_price
from pcl_engine.curve.scheduler import get_amp_gamma
from pcl_engine.curve.scheduler import promote_params as schedule_promotion
from pcl_engine.curve.scheduler import stop_promotion as freeze_promotion
from pcl_engine.curve.state import AmpGamma, PoolState
from pcl_engine.errors import (
    BalanceTrackingAlreadyEnabled,
    EmptyPoolError,
    InsufficientOfferAmount,
    InvalidNumberOfAssets,
    InvalidZeroAmount,
    MinimumLiquidityAmountError,
    Unauthorized,
    UnsupportedOperation,
    ValidationError,
    ZeroAmount,
)
from pcl_engine.math.fixed_point import Decimal256
from pcl_engine.oracle.observation import ObservationBuffer, OracleObservation
from pcl_engine.pool.balances import BalanceHistory
from pcl_engine.pool.guards import (
    assert_max_spread,
    assert_slippage_tolerance,
    before_swap_check,
    check_spread_limits,
)
from pcl_engine.pool.state import (
    AmpGammaResult,
    ExecutionContext,
    PoolConfig,
    ProvideResult,
    ReverseSimulationResult,
    SimulationResult,
    SwapComputation,
    SwapResult,
    WithdrawResult,
)
from pcl_engine.precision import Precisions

logger = structlog.get_logger()

SpreadGuard = Callable[[int, int], None]


# =============================================================================
# Helpers
# =============================================================================


def _to_internal(xs: Sequence[Decimal256], price_scale: Decimal256) -> list[Decimal256]:
    return [xs[0], xs[1] * price_scale]


def _total_share(config: PoolConfig, ctx: ExecutionContext) -> Decimal256:
    return Decimal256.with_precision(ctx.total_share, config.engine.lp_token_precision)


def _track_balances(config: PoolConfig, ctx: ExecutionContext, balances: tuple[int, int]) -> BalanceHistory:
    if not config.track_asset_balances:
        return config.balances
    return config.balances.save_all(zip(config.pair, balances, strict=True), ctx.block_height)


def _check_owner(config: PoolConfig, ctx: ExecutionContext) -> None:
    if ctx.sender != config.owner:
        raise Unauthorized()


def _check_amount(amount: int, name: str) -> None:
    if amount < 0:
        raise ValidationError(f"{name} must not be negative, got {amount}")


def compute_swap(
    config: PoolConfig,
    now: int,
    xs: Sequence[Decimal256],
    offer_amount: Decimal256,
    ask_ind: int,
    maker_fee_share: Decimal256,
) -> SwapComputation:
    """Swap math on normalized balances.

    Args:
        config: Pool config
        now: Block time (selects the effective amp/gamma)
        xs: Pool balances before the swap, not price-scaled
        offer_amount: Offered amount, offer asset units
        ask_ind: Index of the asset bought
        maker_fee_share: Share of the fee sent to the maker

    Returns:
        SwapComputation in ask asset units
    """
    offer_ind = 1 - ask_ind
    price_scale = config.state.price_state.price_scale
    amp_gamma = get_amp_gamma(config.state, now)

    ixs = _to_internal(xs, price_scale)
    d = calc_d(ixs, amp_gamma)

    ixs[offer_ind] = ixs[offer_ind] + (offer_amount * price_scale if offer_ind == 1 else offer_amount)
    new_y = calc_y(ixs, d, amp_gamma, ask_ind)
    dy = ixs[ask_ind] - new_y
    ixs[ask_ind] = new_y

    if ask_ind == 1:
        dy = dy / price_scale
        rate = price_scale.inv()
    else:
        rate = price_scale

    # price_scale lags the market, so the spread can be negative
    spread_fee = (offer_amount * rate).saturating_sub(dy)
    total_fee = fee_rate(ixs, config.params) * dy
    _, maker_fee = split_fee(total_fee, maker_fee_share)

    return SwapComputation(dy=dy - total_fee, spread_fee=spread_fee, total_fee=total_fee, maker_fee=maker_fee)


def compute_offer_amount(
    config: PoolConfig,
    now: int,
    xs: Sequence[Decimal256],
    want_amount: Decimal256,
    ask_ind: int,
) -> tuple[Decimal256, Decimal256, Decimal256]:
    """Offer needed to receive `want_amount` of the ask asset.

    The fee is not known before the trade, so the maximum rate (out_fee)
    is assumed.

    Returns:
        (offer_amount in offer units, spread_fee and fee in ask units)
    """
    offer_ind = 1 - ask_ind
    price_scale = config.state.price_state.price_scale
    amp_gamma = get_amp_gamma(config.state, now)

    ixs = _to_internal(xs, price_scale)
    d = calc_d(ixs, amp_gamma)

    want_internal = want_amount * price_scale if ask_ind == 1 else want_amount
    before_fee = want_internal / config.params.out_fee.complement()
    fee = before_fee - want_internal
    if before_fee >= ixs[ask_ind]:
        raise ValidationError("Ask amount exceeds the pool liquidity")

    ixs[ask_ind] = ixs[ask_ind] - before_fee
    new_y = calc_y(ixs, d, amp_gamma, offer_ind)
    dy = new_y.saturating_sub(ixs[offer_ind])
    spread_fee = dy.saturating_sub(before_fee)

    if offer_ind == 1:
        dy = dy / price_scale
    else:
        spread_fee = spread_fee / price_scale
        fee = fee / price_scale
    return dy, spread_fee, fee


# =============================================================================
# Creation
# =============================================================================


def create_pool(
    precisions: Mapping[str, int],
    amp: Decimal256,
    gamma: Decimal256,
    params: PoolParams,
    price_scale: Decimal256,
    owner: str,
    block_time: int,
    block_height: int,
    track_asset_balances: bool = False,
    engine: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> PoolConfig:
    """Validate init parameters and build the initial pool config.

    Raises:
        ValidationError: On any invalid parameter (IncorrectPoolParam for
            out-of-range amp, gamma or pool params)
    """
    pair = Precisions.from_assets(precisions)
    if price_scale.is_zero():
        raise ValidationError("Initial price scale must be positive")
    if not owner:
        raise ValidationError("Pool owner must be set")

    amp_gamma = AmpGamma.new(amp, gamma)
    params.validate()

    balances = BalanceHistory()
    if track_asset_balances:
        balances = balances.save_all(((asset, 0) for asset in pair.assets), block_height)

    logger.info(
        "pool_created",
        pair=list(pair.assets),
        amp=str(amp_gamma.amp),
        gamma=str(amp_gamma.gamma),
        price_scale=str(price_scale),
        track_asset_balances=track_asset_balances,
    )
    return PoolConfig(
        precisions=pair,
        params=params,
        state=PoolState.initial_state(amp_gamma, price_scale, block_time),
        observations=ObservationBuffer(capacity=engine.observations_size),
        owner=owner,
        balances=balances,
        track_asset_balances=track_asset_balances,
        engine=engine,
    )


# =============================================================================
# Liquidity
# =============================================================================


def _collect_deposits(config: PoolConfig, assets: Iterable[tuple[str, int]]) -> tuple[int, int]:
    assets = list(assets)
    if not assets:
        raise ValidationError("Nothing to provide")
    if len(assets) > 2:
        raise InvalidNumberOfAssets(2)

    amounts = [0, 0]
    seen: set[int] = set()
    for asset, amount in assets:
        idx = config.precisions.index_of(asset)
        if idx in seen:
            raise ValidationError(f"Duplicate asset {asset}")
        if amount < 0:
            raise ValidationError(f"Negative amount for {asset}: {amount}")
        seen.add(idx)
        amounts[idx] = amount
    return amounts[0], amounts[1]


def provide(
    config: PoolConfig,
    ctx: ExecutionContext,
    assets: Iterable[tuple[str, int]],
    slippage_tolerance: Decimal256 | None = None,
) -> tuple[PoolConfig, ProvideResult]:
    """Deposit liquidity and mint LP shares.

    Args:
        config: Pool config
        ctx: Context; ctx.balances exclude the deposit
        assets: (asset, amount) pairs; an omitted asset is a zero deposit
        slippage_tolerance: Max slippage, DEFAULT_SLIPPAGE when None

    Returns:
        (new config, ProvideResult)

    Raises:
        ValidationError: Empty, oversized or unknown asset list
        InvalidZeroAmount: One-sided first provide
        MinimumLiquidityAmountError: First provide too small to lock liquidity
        SlippageExceeded: Imbalanced provide beyond the tolerance
    """
    amounts = _collect_deposits(config, assets)
    deposits = config.precisions.normalize(amounts)
    total_share = _total_share(config, ctx)

    if total_share.is_zero() and (deposits[0].is_zero() or deposits[1].is_zero()):
        raise InvalidZeroAmount()
    if deposits[0].is_zero() and deposits[1].is_zero():
        raise ZeroAmount("Provided amounts must not be zero")

    now = ctx.block_time
    state = config.state
    price_scale = state.price_state.price_scale
    amp_gamma = get_amp_gamma(state, now)
    min_trade_size = config.engine.min_trade_size

    xs = config.precisions.normalize(ctx.balances)
    new_xp = _to_internal([xs[0] + deposits[0], xs[1] + deposits[1]], price_scale)
    new_d = calc_d(new_xp, amp_gamma)

    minted_to_pool = 0
    if total_share.is_zero():
        lock = Decimal256.with_precision(config.engine.minimum_liquidity_amount, config.engine.lp_token_precision)
        share = get_xcp(new_d, price_scale).saturating_sub(lock)
        if share.is_zero():
            raise MinimumLiquidityAmountError(config.engine.minimum_liquidity_amount)
        minted_to_pool = config.engine.minimum_liquidity_amount
        state = replace(
            state,
            price_state=replace(state.price_state, xcp_profit=Decimal256.one(), xcp_profit_real=Decimal256.one()),
        )
    else:
        old_d = calc_d(_to_internal(xs, price_scale), amp_gamma)
        share = (total_share * new_d / old_d).saturating_sub(total_share)
        provide_fee = calc_provide_fee(_to_internal(deposits, price_scale), new_xp, config.params)
        share = share * provide_fee.complement()

    share_ratio = share / (total_share + share)
    balanced_share = [new_xp[0] * share_ratio, new_xp[1] * share_ratio / price_scale]
    assets_diff = [deposits[i].abs_diff(balanced_share[i]) for i in range(2)]

    slippage = Decimal256.zero()
    # Deposits close to the pool ratio do not move the price
    if assets_diff[0] >= min_trade_size and assets_diff[1] >= min_trade_size:
        slippage = assert_slippage_tolerance(deposits, share, state.price_state, slippage_tolerance)
        state = update_price(
            state,
            config.params,
            now,
            total_share + share,
            new_xp,
            assets_diff[0] / assets_diff[1],
        )

    share_amount = share.to_uint(config.engine.lp_token_precision)
    new_balances = (ctx.balances[0] + amounts[0], ctx.balances[1] + amounts[1])

    new_config = replace(
        config,
        state=state,
        observations=config.observations.commit_pending(now),
        balances=_track_balances(config, ctx, new_balances),
    )
    logger.info(
        "liquidity_provided",
        deposits=list(amounts),
        share=share_amount,
        minted_to_pool=minted_to_pool,
        slippage=str(slippage),
    )
    return new_config, ProvideResult(
        share=share_amount,
        minted_to_pool=minted_to_pool,
        slippage=slippage,
        deposits=amounts,
        balances=new_balances,
    )


def _share_in_assets(xs: Sequence[Decimal256], amount: int, total_share: int) -> list[Decimal256]:
    if total_share == 0:
        return [Decimal256.zero(), Decimal256.zero()]
    ratio = Decimal256.from_ratio(amount, total_share)
    return [x * ratio for x in xs]


def withdraw(
    config: PoolConfig,
    ctx: ExecutionContext,
    lp_amount: int,
    assets: Sequence[tuple[str, int]] = (),
) -> tuple[PoolConfig, WithdrawResult]:
    """Burn LP shares for a proportional part of both balances.

    One raw LP unit is kept back from the refund so rounding never pays out
    more than the share is worth.

    Raises:
        UnsupportedOperation: If specific assets are requested (imbalanced withdraw)
        ZeroAmount: If lp_amount is zero
        ValidationError: If lp_amount is not below the LP supply
    """
    if assets:
        raise UnsupportedOperation("Imbalanced withdraw is currently disabled")
    if lp_amount <= 0:
        raise ZeroAmount("Withdraw amount must not be zero")
    if lp_amount >= ctx.total_share:
        raise ValidationError(f"LP amount {lp_amount} must be below the total supply {ctx.total_share}")

    now = ctx.block_time
    state = config.state
    price_scale = state.price_state.price_scale

    xs = config.precisions.normalize(ctx.balances)
    refund = _share_in_assets(xs, lp_amount - 1, ctx.total_share)
    remaining = [xs[i] - refund[i] for i in range(2)]

    d = calc_d(_to_internal(remaining, price_scale), get_amp_gamma(state, now))
    remaining_share = Decimal256.with_precision(ctx.total_share - lp_amount, config.engine.lp_token_precision)
    state = replace(
        state,
        price_state=replace(state.price_state, xcp_profit_real=get_xcp(d, price_scale) / remaining_share),
    )

    refund_assets = config.precisions.denormalize(refund)
    new_balances = (ctx.balances[0] - refund_assets[0], ctx.balances[1] - refund_assets[1])

    new_config = replace(
        config,
        state=state,
        observations=config.observations.commit_pending(now),
        balances=_track_balances(config, ctx, new_balances),
    )
    logger.info("liquidity_withdrawn", burned=lp_amount, refund_assets=list(refund_assets))
    return new_config, WithdrawResult(refund_assets=refund_assets, burned=lp_amount, balances=new_balances)


# =============================================================================
# Swaps
# =============================================================================


def _execute_swap(
    config: PoolConfig,
    ctx: ExecutionContext,
    offer_ind: int,
    amount_in: int,
    spread_guard: SpreadGuard | None,
) -> tuple[PoolConfig, SwapResult]:
    ask_ind = 1 - offer_ind
    now = ctx.block_time
    pair = config.pair
    precisions = config.precisions
    min_trade_size = config.engine.min_trade_size

    _check_amount(amount_in, "Offer amount")
    xs = precisions.normalize(ctx.balances)
    offer_amount = precisions.to_decimal(offer_ind, amount_in)
    before_swap_check(xs, offer_amount)

    swap = compute_swap(config, now, xs, offer_amount, ask_ind, ctx.effective_maker_fee_share)

    return_amount = precisions.to_uint(ask_ind, swap.dy)
    spread_amount = precisions.to_uint(ask_ind, swap.spread_fee)
    if spread_guard is not None:
        spread_guard(return_amount, spread_amount)

    new_xs = list(xs)
    new_xs[offer_ind] = new_xs[offer_ind] + offer_amount
    new_xs[ask_ind] = new_xs[ask_ind] - (swap.dy + swap.maker_fee)

    state = config.state
    # Tiny trades are dominated by rounding and must not move the oracle
    if swap.dy + swap.maker_fee >= min_trade_size and offer_amount >= min_trade_size:
        state = update_price(
            state,
            config.params,
            now,
            _total_share(config, ctx),
            _to_internal(new_xs, state.price_state.price_scale),
            swap.last_price(offer_amount, offer_ind),
        )

    maker_fee_amount = precisions.to_uint(ask_ind, swap.maker_fee) if ctx.fee_address is not None else 0

    observations = config.observations.commit_pending(now)
    if offer_amount >= min_trade_size and swap.dy >= min_trade_size:
        # Observed in native units
        offered, returned = Decimal256.from_int(amount_in), Decimal256.from_int(return_amount)
        if offer_ind == 0:
            observations = observations.precommit_trade(now, offered, returned)
        else:
            observations = observations.precommit_trade(now, returned, offered)

    balances = list(ctx.balances)
    balances[offer_ind] += amount_in
    balances[ask_ind] -= return_amount + maker_fee_amount
    new_balances = (balances[0], balances[1])

    result = SwapResult(
        offer_asset=pair[offer_ind],
        ask_asset=pair[ask_ind],
        offer_amount=amount_in,
        return_amount=return_amount,
        spread_amount=spread_amount,
        commission_amount=precisions.to_uint(ask_ind, swap.total_fee),
        maker_fee_amount=maker_fee_amount,
        fee_address=ctx.fee_address,
        balances=new_balances,
    )
    new_config = replace(
        config,
        state=state,
        observations=observations,
        balances=_track_balances(config, ctx, new_balances),
    )
    logger.info(
        "swap_executed",
        offer_asset=result.offer_asset,
        ask_asset=result.ask_asset,
        offer_amount=result.offer_amount,
        return_amount=result.return_amount,
        spread_amount=result.spread_amount,
        commission_amount=result.commission_amount,
        maker_fee_amount=result.maker_fee_amount,
    )
    return new_config, result


def swap(
    config: PoolConfig,
    ctx: ExecutionContext,
    offer_asset: str,
    amount_in: int,
    belief_price: Decimal256 | None = None,
    max_spread: Decimal256 | None = None,
) -> tuple[PoolConfig, SwapResult]:
    """Sell `amount_in` of `offer_asset` for the other pool asset.

    Args:
        config: Pool config
        ctx: Context; ctx.balances exclude amount_in
        offer_asset: Asset sold
        amount_in: Amount sold, native units
        belief_price: Expected price (offer per ask), enables the belief check
        max_spread: Max spread, DEFAULT_SLIPPAGE when None

    Returns:
        (new config, SwapResult)

    Raises:
        InvalidAsset: If offer_asset is not in the pair
        ValidationError: If amount_in is negative or belief_price is zero
        ZeroAmount: If amount_in is zero
        EmptyPoolError: If a pool balance is zero
        MaxSpreadAssertion: If the spread is above max_spread
        AllowedSpreadAssertion: If max_spread is above the protocol maximum
        XcpProfitLoss: If the trade would decrease the LP virtual price
    """
    offer_ind = config.precisions.index_of(offer_asset)
    check_spread_limits(belief_price, max_spread)

    def spread_guard(return_amount: int, spread_amount: int) -> None:
        assert_max_spread(belief_price, max_spread, amount_in, return_amount, spread_amount)

    return _execute_swap(config, ctx, offer_ind, amount_in, spread_guard)


def swap_exact_amount_out(
    config: PoolConfig,
    ctx: ExecutionContext,
    ask_asset: str,
    amount_out: int,
    max_amount_in: int,
) -> tuple[PoolConfig, SwapResult]:
    """Buy `amount_out` of `ask_asset`, paying at most `max_amount_in`.

    The offer is sized with the maximum fee rate and then executed as a
    regular swap, so the trader may receive slightly more than asked.

    Raises:
        ValidationError: If an amount is negative
        InsufficientOfferAmount: If the required offer is above max_amount_in
    """
    ask_ind = config.precisions.index_of(ask_asset)
    offer_ind = 1 - ask_ind
    _check_amount(amount_out, "Ask amount")
    _check_amount(max_amount_in, "Max amount in")
    if amount_out == 0:
        raise ZeroAmount("Swap amount must not be zero")

    precisions = config.precisions
    xs = precisions.normalize(ctx.balances)
    if any(x.is_zero() for x in xs):
        raise EmptyPoolError("One of the pools is empty")

    want = precisions.to_decimal(ask_ind, amount_out)
    offer_dec, _, _ = compute_offer_amount(config, ctx.block_time, xs, want, ask_ind)
    offer_amount = precisions.to_uint_up(offer_ind, offer_dec)
    if offer_amount > max_amount_in:
        raise InsufficientOfferAmount(offer_amount, max_amount_in)

    return _execute_swap(config, ctx, offer_ind, offer_amount, None)


# =============================================================================
# Governance
# =============================================================================


def update_params(
    config: PoolConfig, ctx: ExecutionContext, update: UpdatePoolParams
) -> tuple[PoolConfig, PoolParams]:
    _check_owner(config, ctx)
    params = config.params.update(update)
    logger.info("params_updated", mid_fee=str(params.mid_fee), out_fee=str(params.out_fee))
    return replace(config, params=params), params


def promote_params(
    config: PoolConfig,
    ctx: ExecutionContext,
    next_amp: Decimal256,
    next_gamma: Decimal256,
    future_time: int,
) -> tuple[PoolConfig, AmpGammaResult]:
    _check_owner(config, ctx)
    state = schedule_promotion(config.state, ctx.block_time, next_amp, next_gamma, future_time)
    new_config = replace(config, state=state)
    return new_config, amp_gamma(new_config, ctx)


def stop_promotion(config: PoolConfig, ctx: ExecutionContext) -> tuple[PoolConfig, AmpGammaResult]:
    _check_owner(config, ctx)
    new_config = replace(config, state=freeze_promotion(config.state, ctx.block_time))
    return new_config, amp_gamma(new_config, ctx)


def enable_asset_balances_tracking(config: PoolConfig, ctx: ExecutionContext) -> PoolConfig:
    """Start recording balance snapshots, seeded with the current balances.

    Raises:
        Unauthorized: If the sender is not the owner
        BalanceTrackingAlreadyEnabled: If tracking is already on
    """
    _check_owner(config, ctx)
    if config.track_asset_balances:
        raise BalanceTrackingAlreadyEnabled()

    balances = config.balances.save_all(zip(config.pair, ctx.balances, strict=True), ctx.block_height)
    logger.info("asset_balances_tracking_enabled", height=ctx.block_height)
    return replace(config, track_asset_balances=True, balances=balances)


# =============================================================================
# Queries
# =============================================================================


def compute_d(config: PoolConfig, ctx: ExecutionContext) -> Decimal256:
    """Current invariant, zero for an empty pool."""
    xs = config.precisions.normalize(ctx.balances)
    if any(x.is_zero() for x in xs):
        return Decimal256.zero()
    state = config.state
    return calc_d(_to_internal(xs, state.price_state.price_scale), get_amp_gamma(state, ctx.block_time))


def lp_price(config: PoolConfig, ctx: ExecutionContext) -> Decimal256:
    """Virtual value of one LP unit, zero for an empty pool."""
    total_share = _total_share(config, ctx)
    d = compute_d(config, ctx)
    if total_share.is_zero() or d.is_zero():
        return Decimal256.zero()
    return get_xcp(d, config.state.price_state.price_scale) / total_share


def share_in_assets(config: PoolConfig, ctx: ExecutionContext, lp_amount: int) -> tuple[int, int]:
    """Amounts of each asset that `lp_amount` LP units represent."""
    xs = config.precisions.normalize(ctx.balances)
    return config.precisions.denormalize(_share_in_assets(xs, lp_amount, ctx.total_share))


def simulate_swap(
    config: PoolConfig, ctx: ExecutionContext, offer_asset: str, offer_amount: int
) -> SimulationResult:
    offer_ind = config.precisions.index_of(offer_asset)
    ask_ind = 1 - offer_ind
    precisions = config.precisions

    _check_amount(offer_amount, "Offer amount")
    xs = precisions.normalize(ctx.balances)
    offer_dec = precisions.to_decimal(offer_ind, offer_amount)
    before_swap_check(xs, offer_dec)

    result = compute_swap(config, ctx.block_time, xs, offer_dec, ask_ind, ctx.effective_maker_fee_share)
    return SimulationResult(
        return_amount=precisions.to_uint(ask_ind, result.dy),
        spread_amount=precisions.to_uint(ask_ind, result.spread_fee),
        commission_amount=precisions.to_uint(ask_ind, result.total_fee),
    )


def reverse_simulate_swap(
    config: PoolConfig, ctx: ExecutionContext, ask_asset: str, ask_amount: int
) -> ReverseSimulationResult:
    ask_ind = config.precisions.index_of(ask_asset)
    offer_ind = 1 - ask_ind
    precisions = config.precisions

    _check_amount(ask_amount, "Ask amount")
    xs = precisions.normalize(ctx.balances)
    want = precisions.to_decimal(ask_ind, ask_amount)
    before_swap_check(xs, want)

    offer_dec, spread_fee, fee = compute_offer_amount(config, ctx.block_time, xs, want, ask_ind)
    return ReverseSimulationResult(
        offer_amount=precisions.to_uint_up(offer_ind, offer_dec),
        spread_amount=precisions.to_uint(ask_ind, spread_fee),
        commission_amount=precisions.to_uint(ask_ind, fee),
    )


def observe(config: PoolConfig, ctx: ExecutionContext, seconds_ago: int) -> OracleObservation:
    """TWAP query.

    A pending observation from an earlier block is taken into account as if
    it had been committed already.
    """
    return config.observations.commit_pending(ctx.block_time).observe(ctx.block_time, seconds_ago)


def amp_gamma(config: PoolConfig, ctx: ExecutionContext) -> AmpGammaResult:
    current = get_amp_gamma(config.state, ctx.block_time)
    return AmpGammaResult(amp=current.amp, gamma=current.gamma, future_time=config.state.future_time)


def asset_balance_at(config: PoolConfig, asset: str, height: int) -> int | None:
    """Pool balance of `asset` at the start of block `height`.

    None when tracking was off at that height.
    """
    config.precisions.index_of(asset)
    return config.balances.balance_at(asset, height)
