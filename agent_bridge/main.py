"""Agent stream bridge — FastAPI app between the AG-UI client and the agent service.

Loads config.yaml on startup. Exposes /api/agent for SSE streaming,
plus operational endpoints for health, config viewing, and hot-reload.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from agent_bridge.adapter import adapt_request
from agent_bridge.config import get_config, load_config, reload_config
from agent_bridge.runtime import execute_run, upstream_timeout
from agent_bridge.schemas import RunRequest
from agent_bridge.stream.emitter import SSE_HEADERS, SSE_MEDIA_TYPE

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config and open the shared upstream client on startup."""
    config = load_config()
    app.state.http_client = httpx.AsyncClient(timeout=upstream_timeout(config))
    logger.info(
        f"Agent bridge started (origins={config.allowed_origins}, "
        f"upstream={config.upstream.run_url})"
    )
    yield
    await app.state.http_client.aclose()
    logger.info("Agent bridge shutting down")


# Load config early so we can read allowed_origins for CORS middleware.
_boot_config = load_config()

app = FastAPI(title="Agent Stream Bridge", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_boot_config.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """The lifespan-owned client. Overridden in tests with a mock transport."""
    return request.app.state.http_client


# ---------------------------------------------------------------------------
# Runtime endpoint
# ---------------------------------------------------------------------------


@app.post("/api/agent")
async def run_agent(
    request: RunRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Forward one AG-UI run to the agent service.

    Streams the translated response as Server-Sent Events (SSE).
    """
    config = get_config()
    upstream_request = adapt_request(request, config.fallback_thread_id)

    return StreamingResponse(
        execute_run(config, upstream_request, client),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )


# ---------------------------------------------------------------------------
# Operational endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    """Liveness check."""
    config = get_config()
    return {
        "status": "healthy",
        "upstream": config.upstream.run_url,
    }


@app.get("/config")
async def get_current_config():
    """Return current config as JSON."""
    config = get_config()
    return config.model_dump()


@app.post("/reload")
async def reload():
    """Hot-reload config.yaml without container restart.

    Runs already in flight keep the config they started with.
    """
    try:
        new_config = reload_config()
    except Exception as e:
        logger.error(f"Reload failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Reload failed: {e}")

    return {
        "status": "reloaded",
        "upstream": new_config.upstream.run_url,
    }
