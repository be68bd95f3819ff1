"""Amplification/gamma ramp scheduling.

The owner can ramp amp and gamma linearly toward new targets. Between
`initial_time` and `future_time` the effective values are interpolated;
afterwards the future values hold.
"""

from __future__ import annotations

from dataclasses import replace

import structlog

from pcl_engine.constants import MAX_CHANGE, MIN_AMP_CHANGING_TIME
from pcl_engine.curve.state import AmpGamma, PoolState
from pcl_engine.errors import MaxChangeAssertion, MinChangingTimeAssertion
from pcl_engine.math.fixed_point import Decimal256

logger = structlog.get_logger()


def _interpolate(start: Decimal256, end: Decimal256, ratio: Decimal256) -> Decimal256:
    if end >= start:
        return start + (end - start) * ratio
    return start - (start - end) * ratio


def get_amp_gamma(state: PoolState, now: int) -> AmpGamma:
    """Effective AmpGamma at time `now`."""
    if now >= state.future_time:
        return state.future
    if now <= state.initial_time:
        return state.initial

    ratio = Decimal256.from_ratio(now - state.initial_time, state.future_time - state.initial_time)
    return AmpGamma(
        amp=_interpolate(state.initial.amp, state.future.amp, ratio),
        gamma=_interpolate(state.initial.gamma, state.future.gamma, ratio),
    )


def is_changing(state: PoolState, now: int) -> bool:
    """True while a ramp is in progress."""
    return state.initial != state.future and state.initial_time <= now < state.future_time


def _relative_change(old: Decimal256, new: Decimal256) -> Decimal256:
    return old.abs_diff(new) / old


def promote_params(
    state: PoolState,
    now: int,
    next_amp: Decimal256,
    next_gamma: Decimal256,
    future_time: int,
) -> PoolState:
    """Start a new ramp from the current effective values.

    Args:
        state: Current pool state
        now: Block time
        next_amp: Target amp
        next_gamma: Target gamma
        future_time: When the targets are reached

    Returns:
        New PoolState with the ramp scheduled

    Raises:
        MinChangingTimeAssertion: If the previous change is too recent or the
            ramp is too short
        IncorrectPoolParam: If a target is out of range
        MaxChangeAssertion: If a target differs from the current value by
            more than MAX_CHANGE (relative)
    """
    if now < state.initial_time + MIN_AMP_CHANGING_TIME or future_time < now + MIN_AMP_CHANGING_TIME:
        raise MinChangingTimeAssertion(MIN_AMP_CHANGING_TIME)

    target = AmpGamma.new(next_amp, next_gamma)
    current = get_amp_gamma(state, now)

    if _relative_change(current.amp, target.amp) > MAX_CHANGE:
        raise MaxChangeAssertion("amp", MAX_CHANGE)
    if _relative_change(current.gamma, target.gamma) > MAX_CHANGE:
        raise MaxChangeAssertion("gamma", MAX_CHANGE)

    logger.info(
        "amp_gamma_promoted",
        amp=str(current.amp),
        gamma=str(current.gamma),
        next_amp=str(target.amp),
        next_gamma=str(target.gamma),
        future_time=future_time,
    )
    return replace(
        state,
        initial=current,
        future=target,
        initial_time=now,
        future_time=future_time,
    )


def stop_promotion(state: PoolState, now: int) -> PoolState:
    """Freeze amp/gamma at their current effective values."""
    current = get_amp_gamma(state, now)
    logger.info("amp_gamma_frozen", amp=str(current.amp), gamma=str(current.gamma))
    return replace(
        state,
        initial=current,
        future=current,
        initial_time=now,
        future_time=now,
    )
