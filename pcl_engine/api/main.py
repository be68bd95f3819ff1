"""FastAPI application for the pool engine.

Note: Rate limiting is intentionally not implemented at the application level.
It should be handled at the infrastructure layer (reverse proxy / load balancer).
"""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pcl_engine import __version__
from pcl_engine.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("PCL_HOST", "0.0.0.0")
PORT = int(os.environ.get("PCL_PORT", "8000"))
DEBUG = os.environ.get("PCL_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="PCL Engine",
    description="Concentrated-liquidity pool pricing engine",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool engine API server.

    Configuration via environment variables:
    - PCL_HOST: Host to bind to (default: 0.0.0.0)
    - PCL_PORT: Port to bind to (default: 8000)
    - PCL_DEBUG: Enable debug/reload mode (default: false)
    - PCL_OBSERVATIONS_SIZE: Observation ring capacity for new pools (default: 3000)
    """
    uvicorn.run(
        "pcl_engine.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
