"""
BlockQL HTTP application.

Serves the JSON-RPC dispatcher on ``POST /rpc``. The upstream block source
is opened on startup and closed on shutdown unless a ready-made query
service is injected (as tests do).
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from ..config import BlockQLConfig, load_config
from ..constants import SERVICE_VERSION
from ..logger import get_logger, set_log_level
from ..rpc.modules import QueryModule, Web3Module
from ..rpc.server import RPCServer
from ..service import BlockQueryService
from ..source import JSONRPCBlockSource

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Shared state handed to RPC modules."""
    config: BlockQLConfig
    service: Optional[BlockQueryService] = None


def build_service(config: BlockQLConfig, source=None) -> BlockQueryService:
    """Create the query service for a configuration."""
    if source is None:
        source = JSONRPCBlockSource(
            config.source.url,
            timeout=config.source.timeout,
            full_transactions=config.source.full_transactions,
        )
    default_block = config.query.default_block
    return BlockQueryService(
        source,
        query_max_size=config.query.max_size,
        default_anchor=lambda: default_block,
    )


def create_app(config: Optional[BlockQLConfig] = None, service: Optional[BlockQueryService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Service configuration; loaded from config.toml/env when omitted
        service: Pre-built query service; owned by the caller when given
    """
    config = config or load_config()
    config.validate()
    set_log_level(config.server.log_level)

    context = AppContext(config=config, service=service)
    rpc_server = RPCServer()
    if config.rpc.modules.ql:
        rpc_server.register_module(QueryModule(context))
    if config.rpc.modules.web3:
        rpc_server.register_module(Web3Module(context))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = context.service is None
        if owned:
            context.service = build_service(config)
            logger.info(f"Querying blocks from {config.source.url} (max selection {config.query.max_size})")
        try:
            yield
        finally:
            if owned:
                await context.service.source.aclose()
                context.service = None
                logger.info("Upstream block source closed.")

    app = FastAPI(
        title="BlockQL",
        description="Block selection queries over an Ethereum JSON-RPC node.",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.context = context
    app.state.rpc_server = rpc_server

    if config.rpc.http.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.rpc.http.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.get("/")
    async def root():
        return {
            "version": SERVICE_VERSION,
            "query_max_size": config.query.max_size,
            "methods": sorted(rpc_server.get_methods()),
        }

    @app.post("/rpc")
    async def rpc_endpoint(body: Any = Body(...)):
        """JSON-RPC 2.0 endpoint"""
        result = await rpc_server.handle_request(body)
        if result is None:
            return Response(status_code=204)
        # handle_request returns a JSON string; send it raw to avoid double-encoding
        return Response(content=result, media_type="application/json")

    return app
