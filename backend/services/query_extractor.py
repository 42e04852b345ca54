"""
Keyword-based flight query extraction
Pulls origin, destination and a loose date phrase out of a chat message
"""
import re
from typing import List, Optional, Tuple

from .iata_codes import CITY_PATTERN, resolve_airport_code
from .models import FlightQuery

AIRPORT_CODE_PATTERN = re.compile(r"\b([A-Z]{3})\b")
DATE_PATTERN = re.compile(r"\b(?:on|in|for)\s+([a-z]+\s*\d{0,2}\s*\d{0,4})", re.IGNORECASE)

Span = Tuple[int, int]


def _overlaps(span: Span, taken: List[Span]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in taken)


def extract_flight_query(message: str) -> FlightQuery:
    """
    Extract a FlightQuery from free text

    The first two distinct recognized cities, in order of appearance, become
    origin and destination. When fewer than two are found, bare uppercase
    3-letter codes fill the remaining slots in order of appearance. There is
    no notion of direction ("from"/"to"), only position.
    """
    codes: List[str] = []
    city_spans: List[Span] = []

    for match in CITY_PATTERN.finditer(message):
        city_spans.append(match.span())
        code = resolve_airport_code(match.group(0))
        if code not in codes:
            codes.append(code)

    if len(codes) < 2:
        for match in AIRPORT_CODE_PATTERN.finditer(message):
            if len(codes) >= 2:
                break
            if _overlaps(match.span(1), city_spans):
                continue
            code = match.group(1)
            if code not in codes:
                codes.append(code)

    origin: Optional[str] = codes[0] if len(codes) > 0 else None
    destination: Optional[str] = codes[1] if len(codes) > 1 else None

    date_match = DATE_PATTERN.search(message)
    date_text = date_match.group(1).strip() if date_match else None

    return FlightQuery(origin=origin, destination=destination, date=date_text or None)
