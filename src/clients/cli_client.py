"""CLI Client for the flight relay
Interactive prompt that runs search_flights and renders the flattened results.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from src.utils.logger import get_logger
from src.utils.config import load_settings
from src.orchestrator.router import MCPRouter


class FlightCLIClient:
    """Interactive CLI over the same tool path as POST /execute-tool"""

    def __init__(self, router: Optional[MCPRouter] = None, console: Optional[Console] = None):
        self.console = console or Console()
        self.logger = get_logger("flight_cli")
        self.settings = load_settings()
        self.router = router or MCPRouter(self.settings)

    def run_interactive(self):
        """Run interactive CLI session"""
        self.console.print(Panel.fit(
            "[bold blue]Google Flights MCP - Interactive CLI[/bold blue]\n"
            "Search one-way or round-trip flights by IATA code\n\n"
            "Commands: search, help, exit",
            border_style="blue"
        ))
        if not self.settings.serp_configured:
            self.console.print("[yellow]SERP_API_KEY is not set; searches will fail.[/yellow]")

        while True:
            try:
                cmd = Prompt.ask("\n[bold green]flights>[/bold green]", default="search").strip().lower()
                if cmd in ("exit", "quit", "q"):
                    break
                if cmd == "help":
                    self.show_help()
                elif cmd == "search":
                    self._search_prompt()
                else:
                    self.console.print("[yellow]Unknown command. Type 'help' for commands.[/yellow]")
            except KeyboardInterrupt:
                self.console.print("\n[yellow]Session interrupted by user[/yellow]")
                break

    def show_help(self):
        self.console.print(
            "[bold]search[/bold]  prompt for origin, destination and dates\n"
            "[bold]help[/bold]    show this message\n"
            "[bold]exit[/bold]    quit"
        )

    def _search_prompt(self):
        params = {
            "origin": Prompt.ask("Origin (IATA)", default="BOM").strip().upper(),
            "destination": Prompt.ask("Destination (IATA)", default="DEL").strip().upper(),
            "departure_date": Prompt.ask("Departure date (YYYY-MM-DD)").strip(),
            "return_date": Prompt.ask("Return date (blank for one-way)", default="").strip(),
        }
        self.search(params)

    def search(self, params: Dict[str, Any]) -> Dict[str, Any]:
        with self.console.status("Searching flights..."):
            result = self.router.route({"tool": "search_flights", "parameters": params})
        body = result.body
        if body.get("success"):
            self.console.print(self.render(body))
        else:
            self.console.print(f"[red]Error: {body.get('error')}[/red]")
            if body.get("fallback_message"):
                self.console.print(body["fallback_message"])
        return body

    @staticmethod
    def render(body: Dict[str, Any]) -> Table:
        title = f"{body.get('route')} on {body.get('date')}"
        if body.get("return_date"):
            title += f", back {body['return_date']}"
        table = Table(title=f"{title} ({body.get('total_results', 0)} results)")
        for col in ("", "Airline", "Flight", "Departs", "Arrives", "Duration", "Stops", "Price"):
            table.add_column(col)
        for f in body.get("flights", []):
            table.add_row(
                "★" if f.get("type") == "best" else "",
                str(f.get("airline")),
                str(f.get("flight_number")),
                f"{f.get('departure_airport')} {f.get('departure_time')}",
                f"{f.get('arrival_airport')} {f.get('arrival_time')}",
                str(f.get("duration")),
                str(f.get("stops")),
                str(f.get("price")),
            )
        return table


def main():
    FlightCLIClient().run_interactive()


if __name__ == "__main__":
    main()
