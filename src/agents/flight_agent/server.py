from __future__ import annotations

from typing import Dict, Any, Optional

from src.utils.config import Settings
from src.utils.logger import get_logger
from .provider import ProviderClient
from .tools import FlightTools, SearchValidationError


class FlightMCPServer:
    """MCP server facade for flight search."""

    def __init__(self, settings: Settings, provider: Optional[ProviderClient] = None):
        self.settings = settings
        self.logger = get_logger("flight_mcp")
        self.tools = FlightTools(settings, provider=provider)

    def execute(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Raises SearchValidationError before any provider call."""
        request = self.tools.parse_request(params)
        return self.tools.search(request)

    def search_flights(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self.execute(params)
        except SearchValidationError as e:
            self.logger.error(f"Missing required parameters: {params}")
            return e.envelope()
