"""FastMCP server implementation for store-nl2sql."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import dotenv
from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from store_nl2sql.mcp_tools import register_chat_tools
from store_nl2sql.services.service_manager import ChatServiceManager

# Load environment variables
dotenv.load_dotenv()

_logger = get_logger(__name__)


# -- Lifespan ----------------------------------------------------------------
@asynccontextmanager
async def lifespan(_mcp_instance: FastMCP) -> AsyncGenerator[None]:
    """Release the database engine and Redis client on shutdown."""
    manager = ChatServiceManager.get_instance()
    try:
        yield
    finally:
        _logger.info("Shutting down ChatService during lifespan shutdown")
        await manager.shutdown()


mcp = FastMCP(
    name="store-nl2sql",
    instructions=(
        "Answers plain-language questions about a WooCommerce store's sales "
        "data. Each question is turned into a validated, store-scoped SQL "
        "query, executed read-only, and returned with rows and an optional chart."
    ),
    lifespan=lifespan,
)

# -- Tool Registration -------------------------------------------------------
register_chat_tools(mcp)


# -- Health Check ----------------------------------------------------------
@mcp.custom_route("/health", methods=["GET"])
async def health_check(_request: Request) -> JSONResponse:
    manager = ChatServiceManager.get_instance()
    return JSONResponse(
        {
            "status": "healthy",
            "service": "store-nl2sql",
            "initialized": manager.is_initialized,
        }
    )
