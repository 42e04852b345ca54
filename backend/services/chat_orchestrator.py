"""
Chat turn orchestration
extraction -> date normalization -> search -> normalization -> reply
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from .amadeus_service import AmadeusService
from .currency_service import REPORTING_CURRENCY, ExchangeRateService
from .date_normalizer import normalize_departure_date
from .exceptions import AuthError, ConversionError, SearchError, ValidationError
from .flight_formatter import needs_conversion, normalize_offers
from .models import FlightQuery, NormalizedOffer
from .query_extractor import extract_flight_query
from .results import Result
from .text_generator import TextGenerator

logger = logging.getLogger(__name__)

GREETING_REPLY = (
    "Hi! To help you find the best flight deals, could you tell me your origin, "
    "destination, and travel date?"
)
NO_FLIGHTS_REPLY = (
    "I couldn't find any flights for your query. Would you like to try different "
    "dates, airports, or adjust your search?"
)


@dataclass(frozen=True)
class ChatReply:
    response: str
    # None when no search was attempted, a (possibly empty) list otherwise
    flight_data: Optional[List[NormalizedOffer]]


def describe_stops(stops: int) -> str:
    if stops == 0:
        return "nonstop"
    if stops == 1:
        return "1 stop"
    return f"{stops} stops"


def summarize_offer(offer: NormalizedOffer) -> str:
    if offer.currency == REPORTING_CURRENCY:
        price = f"${offer.price:.2f} USD"
    else:
        price = f"{offer.price:.2f} {offer.currency} (about ${offer.price_usd:.2f} USD)"
    return (
        f"The best flight I found: {offer.origin} to {offer.destination} with "
        f"{offer.airline_name} for {price} ({describe_stops(offer.stops)}, {offer.duration}).\n"
        "Would you like to see more options, filter by direct flights, or search different dates?"
    )


class ChatOrchestrator:
    """Decides what to tell the user; only the wording is delegated to the text generator"""

    def __init__(
        self,
        amadeus_service: AmadeusService,
        exchange_rate_service: ExchangeRateService,
        text_generator: TextGenerator,
        today: Callable[[], date] = date.today,
        search_max_results: int = 5,
        display_limit: int = 3,
    ):
        self.amadeus_service = amadeus_service
        self.exchange_rate_service = exchange_rate_service
        self.text_generator = text_generator
        self.today = today
        self.search_max_results = search_max_results
        self.display_limit = display_limit

    async def _search(self, query: FlightQuery, departure_date: date) -> Result[List[Dict[str, Any]]]:
        try:
            offers = await self.amadeus_service.search_flights(
                origin=query.origin,
                destination=query.destination,
                departure_date=departure_date,
                adults=1,
                max_results=self.search_max_results,
            )
        except (AuthError, SearchError) as e:
            return Result.failure(e)
        return Result.success(offers)

    async def _rates(self) -> Result[Dict[str, float]]:
        try:
            return Result.success(await self.exchange_rate_service.get_rates())
        except ConversionError as e:
            return Result.failure(e)

    async def find_flights(self, query: FlightQuery) -> List[NormalizedOffer]:
        """Search and normalize; every lower-layer failure degrades to an empty list"""
        departure_date = normalize_departure_date(query.date, today=self.today())
        logger.info(f"[ORCHESTRATOR] Searching flights: {query.origin} to {query.destination} on {departure_date.isoformat()}")

        search = await self._search(query, departure_date)
        if not search.ok:
            logger.warning(f"[ORCHESTRATOR] No flight data available: {search.error}")
            return []
        if not search.value:
            logger.info("[ORCHESTRATOR] No flights found for this query")
            return []

        rates = None
        if needs_conversion(search.value, REPORTING_CURRENCY):
            rate_lookup = await self._rates()
            if rate_lookup.ok:
                rates = rate_lookup.value
            else:
                logger.warning(f"[ORCHESTRATOR] Prices left unconverted: {rate_lookup.error}")

        offers = normalize_offers(search.value, rates)
        offers.sort(key=lambda offer: offer.price_usd)
        return offers[:self.display_limit]

    async def handle_message(self, message: Optional[str]) -> ChatReply:
        """
        Handle one chat message

        Raises ValidationError for an empty message and GenerationError when
        the reply cannot be worded; search, auth and rate failures never escape.
        """
        if not message or not message.strip():
            raise ValidationError("Message is required")

        query = extract_flight_query(message)
        logger.info(f"[ORCHESTRATOR] Extracted flight parameters: {query}")

        flight_data = None
        if query.is_searchable:
            flight_data = await self.find_flights(query)
            draft = summarize_offer(flight_data[0]) if flight_data else NO_FLIGHTS_REPLY
        else:
            draft = GREETING_REPLY

        response = await self.text_generator.elaborate(draft, message)
        return ChatReply(response=response, flight_data=flight_data)
