from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.utils.logger import get_logger
from src.utils.config import Settings, load_settings
from src.agents.flight_agent.provider import ProviderClient
from src.orchestrator.router import MCPRouter


SERVICE_NAME = "Google Flights MCP Server"
VERSION = "1.0.0"

ENDPOINTS = {
  "root": "GET /",
  "health": "GET /health",
  "execute": "POST /execute-tool",
}

AVAILABLE_ROUTES = {
  "GET /": "Server info",
  "GET /health": "Health check",
  "POST /execute-tool": "Execute MCP tool",
}

logger = get_logger("api_server")


class ServerInfo(BaseModel):
  message: str
  status: str
  version: str
  port: int
  endpoints: Dict[str, str]
  timestamp: str


class HealthResponse(BaseModel):
  status: str
  timestamp: str
  serp_configured: bool
  port: int
  cors_enabled: bool


def _timestamp() -> str:
  """ISO-8601 UTC with milliseconds and a Z suffix."""
  return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_app(settings: Optional[Settings] = None, provider: Optional[ProviderClient] = None) -> FastAPI:
  settings = settings or load_settings()
  router = MCPRouter(settings, provider=provider)

  app = FastAPI(title=SERVICE_NAME, version=VERSION)
  app.state.settings = settings
  app.state.router = router

  app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
    max_age=86400,
  )

  @app.get("/", response_model=ServerInfo)
  def root():
    logger.info("GET / - Root endpoint accessed")
    return ServerInfo(
      message=SERVICE_NAME,
      status="running",
      version=VERSION,
      port=settings.port,
      endpoints=ENDPOINTS,
      timestamp=_timestamp(),
    )

  @app.get("/health", response_model=HealthResponse)
  def health():
    logger.info("GET /health - Health check")
    return HealthResponse(
      status="healthy",
      timestamp=_timestamp(),
      serp_configured=settings.serp_configured,
      port=settings.port,
      cors_enabled=True,
    )

  @app.post("/execute-tool")
  async def execute_tool(request: Request):
    try:
      body: Any = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
      body = None
    logger.info(f"POST /execute-tool - Request received: {body}")

    try:
      result = await run_in_threadpool(router.route, body)
    except Exception as e:
      logger.exception(f"Error in /execute-tool: {e}")
      content = {"success": False, "error": "Internal server error"}
      if settings.debug:
        content["message"] = str(e)
      return JSONResponse(status_code=500, content=content)
    return JSONResponse(status_code=result.status_code, content=result.body)

  @app.exception_handler(StarletteHTTPException)
  async def http_error(request: Request, exc: StarletteHTTPException):
    # Unknown paths and wrong methods on known paths share one envelope
    if exc.status_code in (404, 405):
      logger.info(f"404 - Route not found: {request.method} {request.url.path}")
      return JSONResponse(status_code=404, content={
        "error": "Route not found",
        "method": request.method,
        "path": request.url.path,
        "available_routes": AVAILABLE_ROUTES,
      })
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

  @app.exception_handler(Exception)
  async def unhandled_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}")
    content = {"error": "Internal server error"}
    if settings.debug:
      content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)

  logger.info(
    f"Flight relay configured: port={settings.port} currency={settings.currency} "
    f"trip={'one-way + round-trip' if settings.round_trip_enabled else 'one-way only'} "
    f"serp={'CONFIGURED' if settings.serp_configured else 'NOT CONFIGURED'}"
  )
  return app


app = create_app()
