"""
Flight Offer Formatter
Turns raw Amadeus flight offers into display-ready, USD-comparable records
"""
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import pydantic

from .currency_service import convert_to_reporting_currency
from .exceptions import OfferFormatError
from .models import NormalizedOffer

logger = logging.getLogger(__name__)

DURATION_PATTERN = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?)?$")

BOOKING_URL_TEMPLATE = "https://www.google.com/flights?hl=en#flt={origin}.{destination}.{date}"

AIRLINE_NAMES: Dict[str, str] = {
    # Major US Airlines
    "UA": "United Airlines",
    "AA": "American Airlines",
    "DL": "Delta Air Lines",
    "WN": "Southwest Airlines",
    "B6": "JetBlue Airways",
    "NK": "Spirit Airlines",
    "F9": "Frontier Airlines",
    "AS": "Alaska Airlines",
    "HA": "Hawaiian Airlines",
    "SY": "Sun Country Airlines",

    # European Airlines
    "BA": "British Airways",
    "LH": "Lufthansa",
    "AF": "Air France",
    "KL": "KLM",
    "OS": "Austrian Airlines",
    "LX": "SWISS",
    "SK": "SAS Scandinavian Airlines",
    "AZ": "ITA Airways",
    "IB": "Iberia",
    "TP": "TAP Air Portugal",
    "EI": "Aer Lingus",
    "AY": "Finnair",
    "FI": "Icelandair",
    "VS": "Virgin Atlantic",
    "TK": "Turkish Airlines",

    # Middle East & Asia
    "EK": "Emirates",
    "QR": "Qatar Airways",
    "EY": "Etihad Airways",
    "SQ": "Singapore Airlines",
    "CX": "Cathay Pacific",
    "NH": "ANA",
    "JL": "Japan Airlines",
    "KE": "Korean Air",
    "OZ": "Asiana Airlines",
    "BR": "EVA Air",
    "CI": "China Airlines",
    "TG": "Thai Airways",
    "AI": "Air India",

    # Other Major Airlines
    "AC": "Air Canada",
    "WS": "WestJet",
    "QF": "Qantas",
    "NZ": "Air New Zealand",
    "AM": "Aeroméxico",
    "CM": "Copa Airlines",
    "AV": "Avianca",
    "LA": "LATAM Airlines",
}


def get_airline_name(airline_code: str) -> str:
    """Get airline name from code, falling back to the code itself"""
    return AIRLINE_NAMES.get(airline_code, airline_code)


def format_duration(duration_str: str) -> str:
    """
    Format an ISO 8601 duration (PT6H44M) as "6h 44m"

    Zero or absent parts are left out ("PT50M" -> "50m"), an all-zero
    duration renders as "0m" and days fold into hours. Unparseable input is
    returned unchanged.
    """
    match = DURATION_PATTERN.match(duration_str or "")
    if not match or not any(match.groups()):
        return duration_str

    days, hours, minutes = (int(part) if part else 0 for part in match.groups())
    hours += days * 24

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    return " ".join(parts) if parts else "0m"


def build_booking_url(origin: str, destination: str, departure_date: str) -> str:
    return BOOKING_URL_TEMPLATE.format(origin=origin, destination=destination, date=departure_date)


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        raise OfferFormatError(f"Missing segment timestamp: {value!r}")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise OfferFormatError(f"Invalid segment timestamp: {value!r}")


def _code(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise OfferFormatError(f"Invalid {what}: {value!r}")
    return value.strip()


def _airport(endpoint: Any) -> str:
    code = endpoint.get("iataCode") if isinstance(endpoint, dict) else None
    return _code(code, "airport code")


def normalize_offer(offer: Dict[str, Any], rates: Optional[Mapping[str, float]]) -> NormalizedOffer:
    """
    Normalize one raw offer using its outbound itinerary

    `rates` is a USD-based rate snapshot, or None when the rate source was
    unavailable. Raises OfferFormatError when the offer has no itinerary,
    no segments, or unusable price/segment fields.
    """
    try:
        itineraries = offer["itineraries"]
        outbound = itineraries[0]
        segments = outbound["segments"]
        first_segment = segments[0]
        last_segment = segments[-1]
        price_info = offer["price"]
        price = float(price_info["total"])
        currency = _code(price_info["currency"], "currency")
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise OfferFormatError(f"Offer {offer.get('id') if isinstance(offer, dict) else offer!r} is malformed: {e!r}")
    if not isinstance(first_segment, dict) or not isinstance(last_segment, dict):
        raise OfferFormatError(f"Offer {offer.get('id')} has non-object segments")

    origin = _airport(first_segment.get("departure"))
    destination = _airport(last_segment.get("arrival"))
    departure = _parse_timestamp(first_segment["departure"].get("at"))
    arrival = _parse_timestamp(last_segment["arrival"].get("at"))

    airline_code = _code(first_segment.get("carrierCode"), "carrier code")
    duration = outbound.get("duration")

    try:
        return NormalizedOffer(
            id=str(offer.get("id", "")),
            price=price,
            price_usd=convert_to_reporting_currency(price, currency, rates),
            currency=currency,
            origin=origin,
            destination=destination,
            departure_time=departure.isoformat(),
            arrival_time=arrival.isoformat(),
            duration=format_duration(duration if isinstance(duration, str) else ""),
            stops=len(segments) - 1,
            airline=airline_code,
            airline_name=get_airline_name(airline_code),
            booking_url=build_booking_url(origin, destination, departure.date().isoformat()),
        )
    except pydantic.ValidationError as e:
        raise OfferFormatError(f"Offer {offer.get('id')} does not fit the display shape: {e}")


def normalize_offers(offers: List[Dict[str, Any]], rates: Optional[Mapping[str, float]]) -> List[NormalizedOffer]:
    """Normalize every well-formed offer, dropping and logging the malformed ones"""
    normalized = []
    for offer in offers:
        try:
            normalized.append(normalize_offer(offer, rates))
        except OfferFormatError as e:
            logger.error(f"[FLIGHT_FORMATTER] Dropping offer: {e}")
    logger.info(f"[FLIGHT_FORMATTER] Normalized {len(normalized)} of {len(offers)} offers")
    return normalized


def needs_conversion(offers: List[Dict[str, Any]], reporting_currency: str) -> bool:
    """True when at least one offer is priced outside the reporting currency"""
    for offer in offers:
        price_info = offer.get("price") if isinstance(offer, dict) else None
        if isinstance(price_info, dict) and price_info.get("currency") not in (None, reporting_currency):
            return True
    return False
