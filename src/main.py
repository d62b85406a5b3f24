"""Flight relay - Main CLI entrypoint
Runs the HTTP relay, or a single flight search straight from the command line.
For interactive mode, use: python -m src.clients.cli_client
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from src.utils.logger import get_logger
from src.utils.config import load_settings
from src.orchestrator.router import MCPRouter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for main entrypoint"""
    p = argparse.ArgumentParser(
        description="Google Flights MCP relay",
        epilog="For interactive mode: python -m src.clients.cli_client"
    )
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP relay")
    serve.add_argument("--host", type=str, default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Listening port (default: PORT or 3000)")

    search = sub.add_parser("search", help="Run one flight search and print the JSON result")
    search.add_argument("origin", type=str, help="Origin IATA code, e.g. BOM")
    search.add_argument("destination", type=str, help="Destination IATA code, e.g. DEL")
    search.add_argument("departure_date", type=str, help="Departure date, YYYY-MM-DD")
    search.add_argument("--return-date", type=str, default=None, help="Return date for round trips (optional)")
    return p.parse_args(argv)


def serve(host: Optional[str], port: Optional[int]) -> None:
    import uvicorn

    settings = load_settings()
    if port is not None:
        settings.port = port
    if host is not None:
        settings.host = host

    from src.api.server import create_app
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


def search(args: argparse.Namespace) -> int:
    router = MCPRouter(load_settings())
    parameters = {
        "origin": args.origin,
        "destination": args.destination,
        "departure_date": args.departure_date,
    }
    if args.return_date:
        parameters["return_date"] = args.return_date

    result = router.route({"tool": "search_flights", "parameters": parameters})
    print(json.dumps(result.body, indent=2, ensure_ascii=False))
    return 0 if result.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    logger = get_logger("main")
    args = parse_args(argv)

    if args.command == "serve":
        logger.info("Starting server...")
        serve(args.host, args.port)
        return 0
    return search(args)


if __name__ == "__main__":
    sys.exit(main())
