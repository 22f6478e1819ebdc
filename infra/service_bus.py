"""
FastAPI Service Bus
-------------------
Local HTTP transport for the same dispatcher the MCP server uses.
Handy for scripting and for checking a deployment with curl.

This is NOT an external-facing API; it binds to localhost by default.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import Body, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from infra.health import HealthMonitor
from infra.version import get_version
from tools.dispatcher import Dispatcher


# Request/Response Models

class EnvelopeResponse(BaseModel):
    """Uniform tool call result."""
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[str] = None


class ToolInfo(BaseModel):
    """Tool information."""
    name: str
    description: str
    inputSchema: Dict[str, Any]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    tools_loaded: int
    uptime_seconds: float
    scripts: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


# Service Bus

class ServiceBus:
    """
    HTTP front end for a Dispatcher.

    Provides REST API for:
    - Health and script statistics
    - Tool discovery
    - Tool calls
    """

    def __init__(self, dispatcher: Dispatcher, health: Optional[HealthMonitor] = None):
        self._dispatcher = dispatcher
        self._health = health
        self._start_time = datetime.now()
        self._logger = logging.getLogger("music_mcp.infra.service_bus")
        self._app: Optional[FastAPI] = None

    def create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self._logger.info("Service bus starting...")
            yield
            self._logger.info("Service bus shutting down...")

        app = FastAPI(
            title="Music MCP",
            description="HTTP transport for the Music MCP tools",
            version=get_version(),
            lifespan=lifespan
        )

        self._register_routes(app)

        self._app = app
        return app

    def _register_routes(self, app: FastAPI) -> None:
        """Register all API routes."""

        @app.get("/health", response_model=HealthResponse, tags=["System"])
        async def health_check():
            """Health check endpoint."""
            summary = self._health.get_summary() if self._health else {}
            return HealthResponse(
                status=summary.get("overallStatus", "HEALTHY").lower(),
                version=get_version(),
                tools_loaded=len(self._dispatcher.registry),
                uptime_seconds=(datetime.now() - self._start_time).total_seconds(),
                scripts=summary.get("scripts", {}),
            )

        @app.get("/tools", response_model=List[ToolInfo], tags=["Tools"])
        async def list_tools():
            """List available tools."""
            return [ToolInfo(**descriptor) for descriptor in self._dispatcher.list_tools()]

        @app.post("/tools/{name}", response_model=EnvelopeResponse, tags=["Tools"])
        async def call_tool(name: str, arguments: Optional[Dict[str, Any]] = Body(default=None)):
            """Call a tool; failures are reported in the envelope, not as HTTP errors."""
            envelope = await self._dispatcher.dispatch(name, arguments or {})
            return JSONResponse(content=jsonable_encoder(envelope.to_dict()))


def create_app(dispatcher: Dispatcher, health: Optional[HealthMonitor] = None) -> FastAPI:
    """Create the FastAPI application."""
    bus = ServiceBus(dispatcher, health)
    return bus.create_app()


async def run_server(app: FastAPI, host: str = "127.0.0.1", port: int = 8000, log_level: str = "info") -> None:
    """Run the service bus server."""
    import uvicorn

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level
    )
    server = uvicorn.Server(config)
    await server.serve()
