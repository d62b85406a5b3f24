from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from src.utils.config import Settings
from src.utils.logger import get_logger
from .provider import GoogleFlightsProvider, ProviderClient, ProviderError


NA = "N/A"
UNKNOWN_AIRLINE = "Unknown"
OTHER_FLIGHTS_LIMIT = 5

ONE_WAY = "one_way"
ROUND_TRIP = "round_trip"


class SearchValidationError(ValueError):
    """Caller sent a search without origin, destination or departure_date."""

    def __init__(self, message: str, received: Any = None):
        super().__init__(message)
        self.message = message
        self.received = received

    def envelope(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "fallback_message": "Please provide origin, destination and departure_date to search flights.",
            "received": self.received,
        }


@dataclass
class SearchRequest:
    origin: str
    destination: str
    departure_date: str
    return_date: Optional[str] = None

    @property
    def is_round_trip(self) -> bool:
        return has_return_date(self.return_date)

    @property
    def route(self) -> str:
        return f"{self.origin} to {self.destination}"


@dataclass
class LegSummary:
    airline: str
    flight_number: str
    departure_airport: str
    arrival_airport: str
    departure_time: str
    arrival_time: str
    duration: Any


@dataclass
class FlightResult:
    type: str  # 'best' | 'other'
    airline: str
    flight_number: str
    departure_time: str
    arrival_time: str
    departure_airport: str
    arrival_airport: str
    duration: Any
    price: Any
    stops: int
    is_round_trip: bool = False
    outbound_leg: Optional[LegSummary] = None
    return_leg: Optional[LegSummary] = None
    carbon_emissions: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def has_return_date(value: Any) -> bool:
    """True only for a non-blank return date other than the literal 'null'."""
    if value is None:
        return False
    text = str(value).strip()
    return bool(text) and text.lower() != "null"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ("" if value is None else str(value))


def _endpoint(leg: Dict[str, Any], key: str) -> Dict[str, Any]:
    ep = leg.get(key)
    return ep if isinstance(ep, dict) else {}


def _price_key(result: FlightResult) -> tuple:
    price = result.price
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return (1, 0.0)
    return (0, float(price))


class FlightTools:
    """Flight search helper for the Flight MCP Agent.
    Validates the parameter bag, calls the provider once and flattens its
    itineraries into FlightResult records wrapped in a success/failure envelope.
    """

    def __init__(self, settings: Settings, provider: Optional[ProviderClient] = None):
        self.settings = settings
        self.logger = get_logger("flight_mcp")
        self.provider = provider or GoogleFlightsProvider(settings)

    # --- Request handling ---
    def parse_request(self, params: Dict[str, Any]) -> SearchRequest:
        params = params if isinstance(params, dict) else {}
        # Provider airport ids are upper-case IATA codes
        origin = _text(params.get("origin")).upper()
        destination = _text(params.get("destination")).upper()
        departure_date = _text(params.get("departure_date"))
        if not origin or not destination or not departure_date:
            raise SearchValidationError(
                "Missing required parameters: origin, destination, or departure_date",
                received=params,
            )

        return_date = params.get("return_date")
        if not self.settings.round_trip_enabled or not has_return_date(return_date):
            return_date = None
        return SearchRequest(origin, destination, departure_date, _text(return_date) or None)

    def search(self, request: SearchRequest) -> Dict[str, Any]:
        self.logger.info(f"searchFlights: {request.route} on {request.departure_date}"
                         + (f", returning {request.return_date}" if request.return_date else ""))

        if not self.settings.serp_configured:
            self.logger.error("SERP_API_KEY not configured")
            return {
                "success": False,
                "error": "SERP_API_KEY not configured",
                "fallback_message": "MCP server configuration error - API key missing",
            }

        try:
            data = self.provider.search(
                request.origin,
                request.destination,
                request.departure_date,
                request.return_date,
            )
        except ProviderError as e:
            self.logger.error(f"SerpApi error ({e.status_code or 'no status'}): {e.message}")
            if e.details is not None:
                self.logger.error(f"SerpApi diagnostic: {e.details}")
            reason = e.provider_message or e.message
            return {
                "success": False,
                "error": e.message,
                "serp_error": e.details,
                "fallback_message": (
                    f"Unable to fetch flights for {request.route} on {request.departure_date}. {reason}"
                ),
            }

        flights = self.flatten(data, request)
        self.logger.info(f"Total flights parsed: {len(flights)}")

        if not flights and self.settings.empty_results_as_failure:
            self.logger.warning("No flights found for this route")
            return {
                "success": False,
                "error": "No flights found",
                "fallback_message": (
                    f"No flights available for {request.route} on {request.departure_date}"
                ),
                "flights": [],
                "total_results": 0,
            }

        return {
            "success": True,
            "route": request.route,
            "date": request.departure_date,
            "return_date": request.return_date,
            "trip_type": ROUND_TRIP if request.is_round_trip else ONE_WAY,
            "flights": [f.to_dict() for f in flights],
            "total_results": len(flights),
            "price_insights": data.get("price_insights") or None,
        }

    # --- Response flattening ---
    def flatten(self, data: Dict[str, Any], request: SearchRequest) -> List[FlightResult]:
        best = data.get("best_flights") or []
        other = data.get("other_flights") or []
        if not isinstance(best, list):
            best = []
        if not isinstance(other, list):
            other = []
        self.logger.info(f"Found {len(best)} best flights, {len(other)} other flights")

        out: List[FlightResult] = []
        for category, itineraries in (("best", best), ("other", other[:OTHER_FLIGHTS_LIMIT])):
            for itinerary in itineraries:
                result = self._flatten_itinerary(itinerary, category, request)
                if result is not None:
                    out.append(result)

        if self.settings.sort_by_price:
            out.sort(key=_price_key)
        return out

    def _flatten_itinerary(
        self, itinerary: Any, category: str, request: SearchRequest
    ) -> Optional[FlightResult]:
        if not isinstance(itinerary, dict):
            return None
        legs = [leg for leg in (itinerary.get("flights") or []) if isinstance(leg, dict)]
        if not legs:
            return None

        emissions = itinerary.get("carbon_emissions")
        carbon = emissions.get("this_flight") if isinstance(emissions, dict) else None
        price = itinerary.get("price") or NA

        if request.is_round_trip:
            outbound = self._summarize(self._outbound_leg(legs, request), request.origin, request.destination)
            inbound = self._summarize(self._return_leg(legs, request), request.destination, request.origin)
            return FlightResult(
                type=category,
                airline=outbound.airline,
                flight_number=outbound.flight_number,
                departure_time=outbound.departure_time,
                arrival_time=outbound.arrival_time,
                departure_airport=outbound.departure_airport,
                arrival_airport=outbound.arrival_airport,
                duration=outbound.duration,
                price=price,
                # Known undercount when either direction has its own connections
                stops=len(legs) - 2,
                is_round_trip=True,
                outbound_leg=outbound,
                return_leg=inbound,
                carbon_emissions=carbon,
            )

        first = self._summarize(legs[0], request.origin, request.destination)
        return FlightResult(
            type=category,
            airline=first.airline,
            flight_number=first.flight_number,
            departure_time=first.departure_time,
            arrival_time=first.arrival_time,
            departure_airport=first.departure_airport,
            arrival_airport=first.arrival_airport,
            duration=first.duration,
            price=price,
            stops=len(legs) - 1,
            carbon_emissions=carbon,
        )

    def _summarize(self, leg: Dict[str, Any], default_dep: str, default_arr: str) -> LegSummary:
        dep = _endpoint(leg, "departure_airport")
        arr = _endpoint(leg, "arrival_airport")
        return LegSummary(
            airline=leg.get("airline") or UNKNOWN_AIRLINE,
            flight_number=leg.get("flight_number") or NA,
            departure_airport=dep.get("id") or default_dep,
            arrival_airport=arr.get("id") or default_arr,
            departure_time=dep.get("time") or NA,
            arrival_time=arr.get("time") or NA,
            duration=leg.get("duration") or NA,
        )

    @staticmethod
    def _outbound_leg(legs: List[Dict[str, Any]], request: SearchRequest) -> Dict[str, Any]:
        for leg in legs:
            if _endpoint(leg, "departure_airport").get("id") == request.origin:
                return leg
        return legs[0]

    @staticmethod
    def _return_leg(legs: List[Dict[str, Any]], request: SearchRequest) -> Dict[str, Any]:
        for leg in legs[1:]:
            if (_endpoint(leg, "departure_airport").get("id") == request.destination
                    or _endpoint(leg, "arrival_airport").get("id") == request.origin):
                return leg
        return legs[-1]
