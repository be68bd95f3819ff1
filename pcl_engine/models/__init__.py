"""Pydantic models for the pool boundary messages."""

from pcl_engine.models.messages import (
    AssetAmount,
    BlockInfo,
    CreatePoolRequest,
    ExecuteMsg,
    ExecuteRequest,
    QueryMsg,
    QueryRequest,
)
from pcl_engine.models.types import DecimalStr, Denom, Uint128

__all__ = [
    # Types
    "DecimalStr",
    "Denom",
    "Uint128",
    # Requests
    "AssetAmount",
    "BlockInfo",
    "CreatePoolRequest",
    "ExecuteMsg",
    "ExecuteRequest",
    "QueryMsg",
    "QueryRequest",
]
