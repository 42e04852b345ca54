"""
IATA Code Lookup for Common Cities
Maps free-text city names and aliases to airport codes without calling the API
"""
import re
from typing import Dict, Pattern, Tuple

# Common city/alias to IATA code mappings; several aliases may share one code
COMMON_IATA_CODES: Dict[str, str] = {
    # Major US cities
    "san francisco": "SFO",
    "sf": "SFO",
    "los angeles": "LAX",
    "la": "LAX",
    "new york": "JFK",       # JFK for international
    "new york city": "JFK",
    "nyc": "JFK",
    "newark": "EWR",
    "laguardia": "LGA",
    "washington dc": "DCA",
    "washington": "DCA",
    "dc": "DCA",
    "reagan": "DCA",
    "dulles": "IAD",
    "baltimore": "BWI",
    "chicago": "ORD",
    "miami": "MIA",
    "boston": "BOS",
    "seattle": "SEA",
    "atlanta": "ATL",
    "dallas": "DFW",
    "denver": "DEN",
    "las vegas": "LAS",
    "vegas": "LAS",
    "phoenix": "PHX",
    "orlando": "MCO",
    "tampa": "TPA",
    "detroit": "DTW",
    "minneapolis": "MSP",
    "charlotte": "CLT",
    "philadelphia": "PHL",
    "philly": "PHL",
    "houston": "IAH",
    "austin": "AUS",
    "san diego": "SAN",
    "portland": "PDX",
    "sacramento": "SMF",
    "salt lake city": "SLC",
    "kansas city": "MCI",
    "st louis": "STL",
    "nashville": "BNA",
    "new orleans": "MSY",
    "raleigh": "RDU",
    "honolulu": "HNL",

    # European cities
    "london": "LHR",
    "paris": "CDG",
    "berlin": "BER",
    "munich": "MUC",
    "frankfurt": "FRA",
    "rome": "FCO",
    "milan": "MXP",
    "madrid": "MAD",
    "barcelona": "BCN",
    "amsterdam": "AMS",
    "zurich": "ZRH",
    "vienna": "VIE",
    "dublin": "DUB",
    "lisbon": "LIS",
    "istanbul": "IST",

    # Asia, Middle East and others
    "tokyo": "NRT",
    "seoul": "ICN",
    "hong kong": "HKG",
    "singapore": "SIN",
    "bangkok": "BKK",
    "delhi": "DEL",
    "mumbai": "BOM",
    "dubai": "DXB",
    "doha": "DOH",
    "toronto": "YYZ",
    "vancouver": "YVR",
    "montreal": "YUL",
    "mexico city": "MEX",
    "cancun": "CUN",
    "sydney": "SYD",
    "sao paulo": "GRU",
}

# Fixed scan order for the query extractor
CITY_NAMES: Tuple[str, ...] = tuple(COMMON_IATA_CODES)


def _build_city_pattern() -> Pattern[str]:
    # Longest alias first so "new york city" wins over "new york" at the same position
    aliases = sorted(CITY_NAMES, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(alias) for alias in aliases) + r")\b", re.IGNORECASE)


CITY_PATTERN: Pattern[str] = _build_city_pattern()


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def resolve_airport_code(text: str) -> str:
    """
    Resolve a city name, alias or airport code to an IATA code

    Unknown input is upper-cased and passed through as a best-effort code;
    this never fails.
    """
    normalized = _normalize(text or "")
    return COMMON_IATA_CODES.get(normalized, normalized.upper())
