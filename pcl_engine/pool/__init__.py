"""Pool engine: state-in, state-out operations on a PoolConfig."""

from . import engine
from .balances import BalanceHistory
from .state import (
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

__all__ = [
    "AmpGammaResult",
    "BalanceHistory",
    "ExecutionContext",
    "PoolConfig",
    "ProvideResult",
    "ReverseSimulationResult",
    "SimulationResult",
    "SwapComputation",
    "SwapResult",
    "WithdrawResult",
    "engine",
]
