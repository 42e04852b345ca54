"""
Data shapes shared between the search, normalization and chat layers
"""
from dataclasses import dataclass
import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class FlightQuery:
    """Origin/destination/date pulled out of one user message"""
    origin: Optional[str] = None
    destination: Optional[str] = None
    date: Optional[str] = None  # raw text, e.g. "December 20"

    @property
    def is_searchable(self) -> bool:
        return bool(self.origin and self.destination)


@dataclass(frozen=True)
class AccessCredential:
    token: str
    expires_at: float  # clock reading after which the token must not be reused


class NormalizedOffer(BaseModel):
    """Display-ready flight offer; serialized with camelCase keys for the chat UI"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    price: float
    price_usd: float = Field(alias="priceUSD")
    currency: str
    origin: str
    destination: str
    departure_time: str = Field(alias="departureTime")
    arrival_time: str = Field(alias="arrivalTime")
    duration: str
    stops: int
    airline: str
    airline_name: str = Field(alias="airlineName")
    booking_url: str = Field(alias="bookingUrl")


class DatePricePoint(BaseModel):
    """Cheapest price for one departure day; price is None when the search failed or was empty"""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    price: Optional[float] = None
