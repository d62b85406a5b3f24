"""MCP tool router for /execute-tool invocations"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from src.utils.config import Settings
from src.utils.logger import get_logger
from src.agents.flight_agent.provider import ProviderClient
from src.agents.flight_agent.server import FlightMCPServer
from src.agents.flight_agent.tools import SearchValidationError


@dataclass
class ToolResponse:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.body.get("success"))


class MCPRouter:
    """Validates a {tool, parameters} invocation and dispatches it to the owning MCP server"""

    def __init__(self, settings: Settings, provider: Optional[ProviderClient] = None):
        self.logger = get_logger("mcp_router")
        self.flight_server = FlightMCPServer(settings, provider=provider)
        self.tools: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "search_flights": self.flight_server.execute,
        }

    @property
    def available_tools(self) -> List[str]:
        return list(self.tools)

    def route(self, body: Any) -> ToolResponse:
        payload = body if isinstance(body, dict) else {}
        tool = payload.get("tool")
        parameters = payload.get("parameters")

        if not tool:
            return ToolResponse(400, {"success": False, "error": 'Missing "tool" parameter', "received": body})
        if parameters is None:
            return ToolResponse(400, {"success": False, "error": 'Missing "parameters" parameter', "received": body})
        if not isinstance(parameters, dict):
            return ToolResponse(400, {"success": False, "error": '"parameters" must be an object', "received": body})

        handler = self.tools.get(tool) if isinstance(tool, str) else None
        if handler is None:
            self.logger.warning(f"Unknown tool requested: {tool}")
            return ToolResponse(400, {
                "success": False,
                "error": f"Unknown tool: {tool}",
                "available_tools": self.available_tools,
            })

        try:
            result = handler(parameters)
        except SearchValidationError as e:
            self.logger.error(f"{tool} rejected: {e.message}")
            return ToolResponse(400, e.envelope())

        self.logger.info(f"Sending response: {'SUCCESS' if result.get('success') else 'FAILED'}")
        return ToolResponse(200, result)
