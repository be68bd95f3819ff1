"""API endpoints for the pool engine."""

import os

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pcl_engine.api.dispatch import PoolStore
from pcl_engine.config import EngineConfig
from pcl_engine.errors import (
    ArithmeticFailure,
    GuardViolation,
    PclError,
    PoolNotFound,
    StateError,
    UnsupportedOperation,
    ValidationError,
)
from pcl_engine.models.messages import (
    ConfigResponse,
    CreatePoolRequest,
    ErrorResponse,
    ExecuteRequest,
    QueryRequest,
)

logger = structlog.get_logger()

router = APIRouter()

# Observation ring capacity for pools created by this server
OBSERVATIONS_SIZE = int(os.environ.get("PCL_OBSERVATIONS_SIZE", "3000"))

_default_store = PoolStore(EngineConfig(observations_size=OBSERVATIONS_SIZE))

# Error class -> HTTP status, most specific first
_STATUS_BY_ERROR: list[tuple[type[PclError], int]] = [
    (PoolNotFound, 404),
    (ValidationError, 400),
    (GuardViolation, 422),
    (StateError, 409),
    (UnsupportedOperation, 501),
    (ArithmeticFailure, 500),
]


def get_store() -> PoolStore:
    """Dependency provider for the pool store.

    Override this in tests to inject a fresh store:
        app.dependency_overrides[get_store] = lambda: PoolStore()

    Returns:
        The store holding every pool served by this process.
    """
    return _default_store


def status_for(error: PclError) -> int:
    """HTTP status for an engine error."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def _error_response(error: PclError, **context: object) -> JSONResponse:
    status = status_for(error)
    if status >= 500:
        logger.error("operation_failed", error=type(error).__name__, detail=str(error), **context)
    else:
        logger.warning("operation_rejected", error=type(error).__name__, detail=str(error), **context)
    body = ErrorResponse(error=type(error).__name__, detail=str(error))
    return JSONResponse(status_code=status, content=body.model_dump())


@router.post("/pools", response_model=ConfigResponse, responses={400: {"model": ErrorResponse}})
async def create_pool(request: CreatePoolRequest, store: PoolStore = Depends(get_store)) -> BaseModel | JSONResponse:
    """Create a pool.

    Error Handling:
        - Invalid request schema: Returns 422 Validation Error (Pydantic)
        - Invalid pool parameters: Returns 400 with the error class name
        - Existing pool id: Returns 409
    """
    logger.info("received_create_pool", pool_id=request.pool_id, assets=[a.denom for a in request.assets])
    try:
        return store.create(request)
    except PclError as err:
        return _error_response(err, pool_id=request.pool_id)


@router.post("/pools/{pool_id}/execute", response_model=None)
async def execute(
    pool_id: str,
    request: ExecuteRequest,
    store: PoolStore = Depends(get_store),
) -> BaseModel | JSONResponse:
    """Run an execute message (provide, withdraw, swap, governance).

    Engine errors map to statuses by class: ValidationError 400,
    GuardViolation 422, StateError 409, UnsupportedOperation 501,
    ArithmeticFailure 500. The pool is left unchanged on any error.
    """
    logger.info(
        "received_execute",
        pool_id=pool_id,
        kind=request.msg.kind,
        sender=request.sender,
        block_time=request.block.time,
    )
    try:
        return store.execute(pool_id, request.sender, request.block, request.msg)
    except PclError as err:
        return _error_response(err, pool_id=pool_id, kind=request.msg.kind)


@router.post("/pools/{pool_id}/query", response_model=None)
async def query(
    pool_id: str,
    request: QueryRequest,
    store: PoolStore = Depends(get_store),
) -> BaseModel | JSONResponse:
    """Answer a read-only query."""
    try:
        return store.query(pool_id, request.block, request.msg)
    except PclError as err:
        return _error_response(err, pool_id=pool_id, kind=request.msg.kind)
